from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from twex.config import Settings
from twex.db.session import get_db
from twex.models.user import User
from twex.schemas.bookmark_schema import BookmarkStatus
from twex.schemas.like_schema import ToggleResponse
from twex.schemas.post_schema import PostSummary
from twex.services.auth_service import get_current_user, get_app_settings
from twex.services.bookmark_service import BookmarkService
from twex.services.feed_service import FeedService
from twex.utils.exceptions import TwexError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/bookmarks", response_model=List[PostSummary])
async def get_bookmarks(
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Posts the current user bookmarked"""
    try:
        return await FeedService(db, settings.PAGE_SIZE).get_bookmarks(current_user.id, page)
    except Exception as e:
        logger.error(f"Error fetching bookmarks: {e}")
        raise TwexError()

@router.get("/bookmarked/{post_id}", response_model=BookmarkStatus)
async def get_bookmark_status(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        bookmarked = await BookmarkService(db).status(current_user.id, post_id)
        return {"bookmarked": bookmarked}
    except Exception as e:
        logger.error(f"Error checking bookmark status: {e}")
        raise TwexError()

@router.post("/bookmark/{post_id}", response_model=ToggleResponse)
async def bookmark_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        await BookmarkService(db).activate(current_user.id, post_id)
        return {"success": True}
    except TwexError:
        raise
    except Exception as e:
        logger.error(f"Error bookmarking post: {e}")
        raise TwexError()

@router.delete("/unbookmark/{post_id}", response_model=ToggleResponse)
async def unbookmark_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        await BookmarkService(db).deactivate(current_user.id, post_id)
        return {"success": True}
    except Exception as e:
        logger.error(f"Error removing bookmark: {e}")
        raise TwexError()
