from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from twex.db.session import get_db
from twex.models.user import User
from twex.schemas.like_schema import LikeStatus, ToggleResponse
from twex.services.auth_service import get_current_user
from twex.services.like_service import LikeService
from twex.utils.exceptions import TwexError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/liked/{post_id}", response_model=LikeStatus)
async def get_like_status(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Check if the current user liked a post"""
    try:
        liked = await LikeService(db).status(current_user.id, post_id)
        return {"liked": liked}
    except Exception as e:
        logger.error(f"Error checking like status: {e}")
        raise TwexError()

@router.post("/like/{post_id}", response_model=ToggleResponse)
async def like_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Like a post; liking twice is a no-op"""
    try:
        await LikeService(db).activate(current_user.id, post_id)
        return {"success": True}
    except TwexError:
        raise
    except Exception as e:
        logger.error(f"Error liking post: {e}")
        raise TwexError()

@router.delete("/unlike/{post_id}", response_model=ToggleResponse)
async def unlike_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Unlike a post; unliking a post you never liked is a no-op"""
    try:
        await LikeService(db).deactivate(current_user.id, post_id)
        return {"success": True}
    except Exception as e:
        logger.error(f"Error unliking post: {e}")
        raise TwexError()
