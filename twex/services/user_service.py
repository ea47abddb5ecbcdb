"""
User Service for profiles, follow lists and user discovery
"""
import logging
from typing import List, Optional

from sqlalchemy import select, func, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession

from twex.db.base import utcnow
from twex.models.follow import Follow
from twex.models.post import Post
from twex.models.user import User
from twex.schemas.user_schema import UserCard, ProfileResponse, ProfileUpdate
from twex.utils.exceptions import NotFoundError, ForbiddenError
from twex.utils.pagination import page_window

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db: AsyncSession, page_size: int = 10):
        self.db = db
        self.page_size = page_size

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _count(self, stmt) -> int:
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def get_profile(self, username: str) -> ProfileResponse:
        """Profile summary with post and follow counts"""
        user = await self.get_user_by_username(username)
        if not user:
            raise NotFoundError("User not found")

        tweet_count = await self._count(select(func.count(Post.id)).where(Post.user_id == user.id))
        follower_count = await self._count(select(func.count(Follow.id)).where(Follow.following_id == user.id))
        following_count = await self._count(select(func.count(Follow.id)).where(Follow.follower_id == user.id))

        profile = ProfileResponse.model_validate(user)
        profile.tweet_count = tweet_count
        profile.follower_count = follower_count
        profile.following_count = following_count
        return profile

    async def update_profile(self, actor_id: int, user_id: int, data: ProfileUpdate) -> User:
        """Update a user's own profile fields"""
        if actor_id != user_id:
            raise ForbiddenError("You can only edit your own profile")

        user = await self.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        user.real_name = data.real_name
        user.avatar_url = data.avatar_url
        user.date_of_birth = data.date_of_birth
        user.bio = data.bio
        user.updated_at = utcnow()

        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"User {user_id} updated their profile")
        return user

    async def _user_cards(self, stmt) -> List[UserCard]:
        result = await self.db.execute(stmt)
        return [UserCard.model_validate(user) for user in result.scalars().all()]

    async def get_following(self, user_id: int, page: int = 1) -> List[UserCard]:
        """Users that `user_id` follows, most recent follow first"""
        offset, limit = page_window(page, self.page_size)
        stmt = (
            select(User)
            .join(Follow, Follow.following_id == User.id)
            .where(Follow.follower_id == user_id)
            .order_by(desc(Follow.created_at), desc(Follow.id))
            .offset(offset)
            .limit(limit)
        )
        return await self._user_cards(stmt)

    async def get_followers(self, user_id: int, page: int = 1) -> List[UserCard]:
        """Users following `user_id`, most recent follow first"""
        offset, limit = page_window(page, self.page_size)
        stmt = (
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.following_id == user_id)
            .order_by(desc(Follow.created_at), desc(Follow.id))
            .offset(offset)
            .limit(limit)
        )
        return await self._user_cards(stmt)

    async def search_users(self, query: Optional[str], limit: int = 20) -> List[UserCard]:
        """Case-insensitive substring match on username or real name"""
        query = (query or "").strip()
        if not query:
            return []

        stmt = (
            select(User)
            .where(
                or_(
                    User.username.icontains(query, autoescape=True),
                    User.real_name.icontains(query, autoescape=True),
                )
            )
            .order_by(User.username)
            .limit(limit)
        )
        return await self._user_cards(stmt)

    async def get_suggestions(self, viewer_id: int, limit: int = 5) -> List[UserCard]:
        """Random users the viewer does not follow yet"""
        followed = select(Follow.following_id).where(Follow.follower_id == viewer_id)
        stmt = (
            select(User)
            .where(User.id != viewer_id, User.id.not_in(followed))
            .order_by(func.random())
            .limit(limit)
        )
        return await self._user_cards(stmt)
