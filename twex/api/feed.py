from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from twex.config import Settings
from twex.db.session import get_db
from twex.models.user import User
from twex.schemas.post_schema import PostSummary
from twex.services.auth_service import get_current_user, get_app_settings
from twex.services.feed_service import FeedService, FEED_ALL
from twex.utils.exceptions import TwexError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/posts", response_model=List[PostSummary])
async def get_feed(
    type: str = Query(FEED_ALL, description="all or following"),
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Home timeline, ten posts per page"""
    try:
        feed_service = FeedService(db, settings.PAGE_SIZE)
        return await feed_service.get_feed(current_user.id, type, page)
    except Exception as e:
        logger.error(f"Fetch posts error: {e}")
        raise TwexError()
