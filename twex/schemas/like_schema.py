from pydantic import BaseModel

class ToggleResponse(BaseModel):
    """Result of any like/bookmark/follow activate or deactivate call"""
    success: bool = True

class LikeStatus(BaseModel):
    liked: bool
