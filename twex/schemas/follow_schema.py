from pydantic import BaseModel

class FollowStatus(BaseModel):
    is_following: bool
