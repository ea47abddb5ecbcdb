from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from twex.db.session import get_db
from twex.models.user import User
from twex.schemas.user_schema import ProfileResponse
from twex.services.auth_service import get_current_user
from twex.services.user_service import UserService
from twex.utils.exceptions import TwexError

logger = logging.getLogger(__name__)

# Mounted last: "/{username}/profile" would otherwise shadow fixed paths.
router = APIRouter()

@router.get("/{username}/profile", response_model=ProfileResponse)
async def get_profile(
    username: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Profile summary with post and follow counts"""
    try:
        return await UserService(db).get_profile(username)
    except TwexError:
        raise
    except Exception as e:
        logger.error(f"Error fetching user profile: {e}")
        raise TwexError()
