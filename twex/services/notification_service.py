"""
Notification gate.

The gate answers one question: has anyone the user follows posted since the
user last opened their notifications? The watermark is advisory, so a check
racing a mark-seen may briefly report either answer.
"""
from datetime import datetime
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from twex.db.base import utcnow
from twex.db.session import dialect_insert
from twex.models.follow import Follow
from twex.models.notification import NotificationCheck
from twex.models.post import Post

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)

class NotificationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_last_seen(self, user_id: int) -> datetime:
        stmt = select(NotificationCheck.last_seen).where(NotificationCheck.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() or EPOCH

    async def has_unseen_activity(self, user_id: int) -> bool:
        last_seen = await self.get_last_seen(user_id)

        followed = select(Follow.following_id).where(Follow.follower_id == user_id)
        stmt = select(
            select(Post.id).where(
                Post.user_id.in_(followed),
                Post.created_at > last_seen,
            ).exists()
        )
        result = await self.db.execute(stmt)
        return bool(result.scalar())

    async def mark_seen(self, user_id: int) -> datetime:
        """Move the user's watermark to now"""
        now = utcnow()
        stmt = dialect_insert(self.db, NotificationCheck).values(
            user_id=user_id, last_seen=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id"],
            set_={"last_seen": now, "updated_at": now},
        )
        await self.db.execute(stmt)
        await self.db.commit()

        logger.info(f"User {user_id} marked notifications seen at {now.isoformat()}")
        return now
