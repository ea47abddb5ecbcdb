"""
Models package for the Twex API
"""
from twex.db.base import Base, BaseModel
from twex.models.user import User
from twex.models.post import Post
from twex.models.reply import Reply
from twex.models.like import Like
from twex.models.bookmark import Bookmark
from twex.models.follow import Follow
from twex.models.notification import NotificationCheck
from twex.models.session import UserSession

__all__ = [
    'Base',
    'BaseModel',
    'User',
    'Post',
    'Reply',
    'Like',
    'Bookmark',
    'Follow',
    'NotificationCheck',
    'UserSession',
]
