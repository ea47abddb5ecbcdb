from sqlalchemy import Column, String, Text, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from twex.db.base import BaseModel

class Reply(BaseModel):
    __tablename__ = "replies"

    tweet_id = Column(Integer, ForeignKey("tweets.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False, default="")
    image_url = Column(String(500))

    # Relationships
    post = relationship("Post", back_populates="replies")
    user = relationship("User", back_populates="replies")

    __table_args__ = (
        Index('ix_replies_tweet_id', 'tweet_id'),
        Index('ix_replies_user_id', 'user_id'),
    )
