from twex.models.bookmark import Bookmark
from twex.services.like_service import PostTargetMixin
from twex.services.toggle_service import ToggleService

class BookmarkService(PostTargetMixin, ToggleService):
    model = Bookmark
    subject_field = "user_id"
    object_field = "tweet_id"
    verb = "bookmarked post"
