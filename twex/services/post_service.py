from typing import Optional
import logging

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from twex.db.base import utcnow
from twex.models.bookmark import Bookmark
from twex.models.like import Like
from twex.models.post import Post
from twex.models.reply import Reply
from twex.utils.exceptions import NotFoundError, ForbiddenError, ValidationError

logger = logging.getLogger(__name__)

class PostService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_post(self, post_id: int) -> Optional[Post]:
        """Get a post by ID"""
        stmt = select(Post).where(Post.id == post_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_owned_post(self, post_id: int, user_id: int) -> Post:
        """Load a post the user is allowed to modify"""
        post = await self.get_post(post_id)
        if not post:
            raise NotFoundError("Post not found")
        if post.user_id != user_id:
            raise ForbiddenError("You can't modify this post")
        return post

    async def create_post(self, user_id: int, content: Optional[str], image_url: Optional[str] = None) -> Post:
        """Create a new post"""
        content = (content or "").strip()
        if not content and not image_url:
            raise ValidationError("Post must have content or an image")

        post = Post(user_id=user_id, content=content, image_url=image_url)

        self.db.add(post)
        await self.db.commit()
        await self.db.refresh(post)

        logger.info(f"User {user_id} created post {post.id}")
        return post

    async def update_post(
        self,
        post_id: int,
        user_id: int,
        content: Optional[str],
        image_url: Optional[str] = None,
        remove_image: bool = False,
    ) -> Post:
        """Edit a post's text and image; only the author may do this"""
        post = await self.get_owned_post(post_id, user_id)

        if image_url:
            post.image_url = image_url
        elif remove_image:
            post.image_url = None

        if content is not None:
            post.content = content.strip()

        if not post.content and not post.image_url:
            raise ValidationError("Post must have content or an image")

        post.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(post)

        logger.info(f"User {user_id} updated post {post_id}")
        return post

    async def delete_post(self, post_id: int, user_id: int) -> Post:
        """Delete a post together with its replies, likes and bookmarks"""
        post = await self.get_owned_post(post_id, user_id)

        await self.db.execute(delete(Like).where(Like.tweet_id == post_id))
        await self.db.execute(delete(Bookmark).where(Bookmark.tweet_id == post_id))
        await self.db.execute(delete(Reply).where(Reply.tweet_id == post_id))
        await self.db.execute(delete(Post).where(Post.id == post_id))
        await self.db.commit()

        logger.info(f"User {user_id} deleted post {post_id}")
        return post

    async def create_reply(
        self,
        user_id: int,
        post_id: int,
        content: Optional[str],
        image_url: Optional[str] = None,
    ) -> Reply:
        """Reply to an existing post"""
        if not await self.get_post(post_id):
            raise NotFoundError("Post not found")

        content = (content or "").strip()
        if not content and not image_url:
            raise ValidationError("Reply must have content or an image")

        reply = Reply(tweet_id=post_id, user_id=user_id, content=content, image_url=image_url)

        self.db.add(reply)
        await self.db.commit()
        await self.db.refresh(reply)

        logger.info(f"User {user_id} replied to post {post_id} with reply {reply.id}")
        return reply

    async def delete_reply(self, reply_id: int, user_id: int) -> Reply:
        result = await self.db.execute(select(Reply).where(Reply.id == reply_id))
        reply = result.scalar_one_or_none()

        if not reply:
            raise NotFoundError("Reply not found")
        if reply.user_id != user_id:
            raise ForbiddenError("Forbidden: Not your reply")

        await self.db.execute(delete(Reply).where(Reply.id == reply_id))
        await self.db.commit()

        logger.info(f"User {user_id} deleted reply {reply_id}")
        return reply
