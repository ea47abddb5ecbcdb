from pydantic import BaseModel
from datetime import datetime

class NotificationCheckResponse(BaseModel):
    has_new: bool

class MarkSeenResponse(BaseModel):
    success: bool = True
    last_seen: datetime
