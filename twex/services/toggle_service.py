"""
Idempotent relation toggles.

A toggle family manages one (subject, object) relation table:

- ``activate`` inserts the pair unless it is already present
- ``deactivate`` deletes the pair if it is present
- ``status`` reports whether the pair is present

Both writes are single statements, so duplicate or concurrent requests from
the same client converge on the same final state.
"""
import logging

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from twex.db.session import dialect_insert

logger = logging.getLogger(__name__)


class ToggleService:
    model = None
    subject_field: str = "user_id"
    object_field: str = "tweet_id"
    verb: str = "toggled"

    def __init__(self, db: AsyncSession):
        self.db = db

    def _pair(self, subject_id: int, object_id: int):
        return (
            getattr(self.model, self.subject_field) == subject_id,
            getattr(self.model, self.object_field) == object_id,
        )

    async def validate_target(self, subject_id: int, object_id: int) -> None:
        """Reject an activation before anything is written"""

    async def activate(self, subject_id: int, object_id: int) -> None:
        await self.validate_target(subject_id, object_id)

        stmt = dialect_insert(self.db, self.model).values(
            {self.subject_field: subject_id, self.object_field: object_id}
        ).on_conflict_do_nothing()
        await self.db.execute(stmt)
        await self.db.commit()

        logger.info(f"User {subject_id} {self.verb} {object_id}")

    async def deactivate(self, subject_id: int, object_id: int) -> None:
        stmt = delete(self.model).where(*self._pair(subject_id, object_id))
        await self.db.execute(stmt)
        await self.db.commit()

        logger.info(f"User {subject_id} un-{self.verb} {object_id}")

    async def status(self, subject_id: int, object_id: int) -> bool:
        stmt = select(select(self.model.id).where(*self._pair(subject_id, object_id)).exists())
        result = await self.db.execute(stmt)
        return bool(result.scalar())
