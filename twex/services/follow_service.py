from twex.models.follow import Follow
from twex.models.user import User
from twex.services.toggle_service import ToggleService
from twex.utils.exceptions import NotFoundError, ValidationError

class FollowService(ToggleService):
    model = Follow
    subject_field = "follower_id"
    object_field = "following_id"
    verb = "followed user"

    async def validate_target(self, subject_id: int, object_id: int) -> None:
        if subject_id == object_id:
            raise ValidationError("You can't follow yourself")
        if await self.db.get(User, object_id) is None:
            raise NotFoundError("User not found")
