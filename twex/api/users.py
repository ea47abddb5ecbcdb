from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from twex.config import Settings
from twex.db.session import get_db
from twex.models.user import User
from twex.schemas.post_schema import PostSummary, ReplyWithPost
from twex.schemas.user_schema import UserCard, UserEnvelope, UserPublic, ProfileUpdate
from twex.services.auth_service import get_current_user, get_app_settings
from twex.services.feed_service import FeedService
from twex.services.user_service import UserService
from twex.utils.exceptions import TwexError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/users/suggestions", response_model=List[UserCard])
async def get_suggestions(
    limit: Optional[int] = Query(None, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Random users the current user does not follow yet"""
    try:
        return await UserService(db).get_suggestions(
            current_user.id, limit=limit or settings.SUGGESTION_LIMIT
        )
    except Exception as e:
        logger.error(f"Error fetching suggestions: {e}")
        raise TwexError()

@router.get("/users/{user_id}/posts", response_model=List[PostSummary])
async def get_user_posts(
    user_id: int,
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Posts written by a user"""
    try:
        return await FeedService(db, settings.PAGE_SIZE).get_user_posts(current_user.id, user_id, page)
    except Exception as e:
        logger.error(f"Error fetching user's posts: {e}")
        raise TwexError()

@router.get("/users/{user_id}/replies", response_model=List[ReplyWithPost])
async def get_user_replies(
    user_id: int,
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Replies written by a user, each with its parent post"""
    try:
        return await FeedService(db, settings.PAGE_SIZE).get_user_replies(user_id, page)
    except Exception as e:
        logger.error(f"Error fetching replies: {e}")
        raise TwexError()

@router.get("/users/{user_id}/likes", response_model=List[PostSummary])
async def get_user_likes(
    user_id: int,
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Posts a user liked"""
    try:
        return await FeedService(db, settings.PAGE_SIZE).get_user_likes(current_user.id, user_id, page)
    except Exception as e:
        logger.error(f"Error fetching liked posts: {e}")
        raise TwexError()

@router.get("/users/{user_id}/following", response_model=List[UserCard])
async def get_following(
    user_id: int,
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        return await UserService(db, settings.PAGE_SIZE).get_following(user_id, page)
    except Exception as e:
        logger.error(f"Error fetching following users: {e}")
        raise TwexError()

@router.get("/users/{user_id}/followers", response_model=List[UserCard])
async def get_followers(
    user_id: int,
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        return await UserService(db, settings.PAGE_SIZE).get_followers(user_id, page)
    except Exception as e:
        logger.error(f"Error fetching followers: {e}")
        raise TwexError()

@router.post("/profile/{user_id}", response_model=UserEnvelope)
@router.put("/edit/profile/{user_id}", response_model=UserEnvelope)
async def update_profile(
    user_id: int,
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Fill in or edit your own profile"""
    try:
        user = await UserService(db).update_profile(current_user.id, user_id, profile)
        return {"user": UserPublic.model_validate(user)}
    except TwexError:
        raise
    except Exception as e:
        logger.error(f"Profile update error: {e}")
        raise TwexError()
