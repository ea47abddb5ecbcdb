from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from twex.db.session import get_db
from twex.models.user import User
from twex.schemas.follow_schema import FollowStatus
from twex.schemas.like_schema import ToggleResponse
from twex.services.auth_service import get_current_user
from twex.services.follow_service import FollowService
from twex.utils.exceptions import TwexError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/following/{user_id}", response_model=FollowStatus)
async def get_follow_status(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Check if the current user follows another user"""
    try:
        following = await FollowService(db).status(current_user.id, user_id)
        return {"is_following": following}
    except Exception as e:
        logger.error(f"Error checking following status: {e}")
        raise TwexError()

@router.post("/follow/{user_id}", response_model=ToggleResponse)
async def follow_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Follow a user"""
    try:
        await FollowService(db).activate(current_user.id, user_id)
        return {"success": True}
    except TwexError:
        raise
    except Exception as e:
        logger.error(f"Error following user: {e}")
        raise TwexError()

@router.delete("/unfollow/{user_id}", response_model=ToggleResponse)
async def unfollow_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Unfollow a user"""
    try:
        await FollowService(db).deactivate(current_user.id, user_id)
        return {"success": True}
    except Exception as e:
        logger.error(f"Error unfollowing user: {e}")
        raise TwexError()
