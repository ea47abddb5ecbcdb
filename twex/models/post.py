from sqlalchemy import Column, String, Text, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from twex.db.base import BaseModel

class Post(BaseModel):
    __tablename__ = "tweets"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False, default="")
    image_url = Column(String(500))

    # Relationships
    user = relationship("User", back_populates="posts")
    replies = relationship("Reply", back_populates="post", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index('ix_tweets_user_id', 'user_id'),
        Index('ix_tweets_created_at', 'created_at'),
    )
