from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class AuthorFields(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    username: str
    real_name: Optional[str] = None
    avatar_url: Optional[str] = None

class PostSummary(AuthorFields):
    """One row of any post listing"""
    id: int
    content: str
    image_url: Optional[str] = None
    date: datetime
    total_likes: int = 0
    total_replies: int = 0
    liked_by_current_user: bool = False
    bookmarked_by_current_user: bool = False

class PostCreated(BaseModel):
    message: str
    post: PostSummary

class ReplyResponse(AuthorFields):
    id: int
    tweet_id: int
    content: str
    image_url: Optional[str] = None
    date: datetime

class ReplyCreated(BaseModel):
    message: str
    reply: ReplyResponse

class ParentPost(AuthorFields):
    id: int
    content: str
    image_url: Optional[str] = None
    date: datetime

class ReplyWithPost(ReplyResponse):
    """A user's reply together with the post it answers"""
    post: ParentPost

class MessageResponse(BaseModel):
    message: str
