from twex.models.like import Like
from twex.models.post import Post
from twex.services.toggle_service import ToggleService
from twex.utils.exceptions import NotFoundError

class PostTargetMixin:
    """Activation requires the target post to exist"""

    async def validate_target(self, subject_id: int, object_id: int) -> None:
        if await self.db.get(Post, object_id) is None:
            raise NotFoundError("Post not found")

class LikeService(PostTargetMixin, ToggleService):
    model = Like
    subject_field = "user_id"
    object_field = "tweet_id"
    verb = "liked post"
