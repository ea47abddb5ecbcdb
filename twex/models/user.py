from sqlalchemy import Column, String, Text, Date, Index
from sqlalchemy.orm import relationship
from twex.db.base import BaseModel

class User(BaseModel):
    __tablename__ = "users"

    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # NULL for accounts created through Google sign-in
    password = Column(String(255), nullable=True)
    real_name = Column(String(100))
    avatar_url = Column(String(500))
    date_of_birth = Column(Date)
    bio = Column(Text)

    # Relationships
    posts = relationship("Post", back_populates="user", cascade="all, delete-orphan")
    replies = relationship("Reply", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_users_created_at', 'created_at'),
    )
