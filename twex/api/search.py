from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from twex.config import Settings
from twex.db.session import get_db
from twex.models.user import User
from twex.schemas.user_schema import UserCard
from twex.services.auth_service import get_current_user, get_app_settings
from twex.services.user_service import UserService
from twex.utils.exceptions import TwexError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/search/users", response_model=List[UserCard])
async def search_users(
    q: Optional[str] = Query(None, max_length=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Search users by username or real name"""
    try:
        return await UserService(db).search_users(q, limit=settings.SEARCH_LIMIT)
    except Exception as e:
        logger.error(f"Error searching users: {e}")
        raise TwexError("Search error")
