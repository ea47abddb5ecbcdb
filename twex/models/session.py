from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, Index
from twex.db.base import BaseModel

class UserSession(BaseModel):
    __tablename__ = "user_sessions"

    sid = Column(String(64), unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('ix_user_sessions_expires_at', 'expires_at'),
    )
