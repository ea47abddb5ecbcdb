from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime

class UserCard(BaseModel):
    """Compact user row used by follower lists, search and suggestions"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    real_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None

class UserPublic(UserCard):
    email: str
    date_of_birth: Optional[date] = None
    created_at: Optional[datetime] = None

class UserEnvelope(BaseModel):
    user: Optional[UserPublic] = None

class ProfileResponse(UserCard):
    """Public profile; the email address stays private to its owner"""
    date_of_birth: Optional[date] = None
    created_at: Optional[datetime] = None
    tweet_count: int = 0
    follower_count: int = 0
    following_count: int = 0

class ProfileUpdate(BaseModel):
    real_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)
    date_of_birth: Optional[date] = None
    bio: Optional[str] = Field(None, max_length=500)
