from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from twex.db.session import get_db
from twex.models.user import User
from twex.schemas.notification_schema import NotificationCheckResponse, MarkSeenResponse
from twex.services.auth_service import get_current_user
from twex.services.notification_service import NotificationService
from twex.utils.exceptions import TwexError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/notifications/check", response_model=NotificationCheckResponse)
async def check_notifications(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Whether followed users posted since notifications were last seen"""
    try:
        has_new = await NotificationService(db).has_unseen_activity(current_user.id)
        return {"has_new": has_new}
    except Exception as e:
        logger.error(f"Notification check error: {e}")
        raise TwexError()

@router.post("/notifications/mark-seen", response_model=MarkSeenResponse)
async def mark_notifications_seen(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        last_seen = await NotificationService(db).mark_seen(current_user.id)
        return {"success": True, "last_seen": last_seen}
    except Exception as e:
        logger.error(f"Mark seen error: {e}")
        raise TwexError()
