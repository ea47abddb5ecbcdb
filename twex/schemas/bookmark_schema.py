from pydantic import BaseModel

class BookmarkStatus(BaseModel):
    bookmarked: bool
