from sqlalchemy import Column, Integer, ForeignKey, DateTime
from twex.db.base import BaseModel

class NotificationCheck(BaseModel):
    """Per-user watermark of the last time the notifications tab was opened"""
    __tablename__ = "notification_checks"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    last_seen = Column(DateTime, nullable=False)
