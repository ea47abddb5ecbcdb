from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, CheckConstraint, Index
from twex.db.base import BaseModel

class Follow(BaseModel):
    __tablename__ = "follows"

    follower_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    following_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Ensure unique follow relationships
    __table_args__ = (
        UniqueConstraint('follower_id', 'following_id', name='unique_follow'),
        CheckConstraint('follower_id <> following_id', name='check_no_self_follow'),
        Index('ix_follows_follower_id', 'follower_id'),
        Index('ix_follows_following_id', 'following_id'),
    )
