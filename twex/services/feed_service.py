"""
Feed Query Service.

Every listing returns one page of post summaries ordered newest first
(post id descending), except a user's likes which are ordered by post date.
Like and reply totals and the viewer's like/bookmark flags are sub-queries
evaluated on each request, so a toggle is visible on the very next fetch.
"""
from typing import List, Optional
import logging

from sqlalchemy import select, func, literal, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from twex.models.bookmark import Bookmark
from twex.models.follow import Follow
from twex.models.like import Like
from twex.models.post import Post
from twex.models.reply import Reply
from twex.models.user import User
from twex.schemas.post_schema import PostSummary, ReplyResponse, ReplyWithPost, ParentPost
from twex.utils.exceptions import NotFoundError
from twex.utils.pagination import page_window

logger = logging.getLogger(__name__)

FEED_ALL = "all"
FEED_FOLLOWING = "following"

class FeedService:
    def __init__(self, db: AsyncSession, page_size: int = 10):
        self.db = db
        self.page_size = page_size

    def _summary_query(self, viewer_id: int, bookmarked_by_construction: bool = False):
        """SELECT of annotated post rows, before scope filters and paging"""
        total_likes = (
            select(func.count(func.distinct(Like.user_id)))
            .where(Like.tweet_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
        )
        total_replies = (
            select(func.count(Reply.id))
            .where(Reply.tweet_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
        )
        liked = (
            select(Like.id)
            .where(Like.tweet_id == Post.id, Like.user_id == viewer_id)
            .correlate(Post)
            .exists()
        )
        if bookmarked_by_construction:
            bookmarked = literal(True)
        else:
            bookmarked = (
                select(Bookmark.id)
                .where(Bookmark.tweet_id == Post.id, Bookmark.user_id == viewer_id)
                .correlate(Post)
                .exists()
            )

        return select(
            Post.id,
            Post.content,
            Post.image_url,
            Post.created_at.label("date"),
            Post.user_id,
            User.username,
            User.real_name,
            User.avatar_url,
            total_likes.label("total_likes"),
            total_replies.label("total_replies"),
            liked.label("liked_by_current_user"),
            bookmarked.label("bookmarked_by_current_user"),
        ).join(User, Post.user_id == User.id)

    async def _fetch_summaries(self, stmt) -> List[PostSummary]:
        result = await self.db.execute(stmt)
        return [PostSummary.model_validate(dict(row._mapping)) for row in result.all()]

    def _paged(self, stmt, page: int):
        offset, limit = page_window(page, self.page_size)
        return stmt.offset(offset).limit(limit)

    async def get_feed(self, viewer_id: int, feed_type: Optional[str], page: int = 1) -> List[PostSummary]:
        """Home timeline; any type other than "following" reads as "all" """
        stmt = self._summary_query(viewer_id)

        if feed_type == FEED_FOLLOWING:
            followed = select(Follow.following_id).where(Follow.follower_id == viewer_id)
            stmt = stmt.where(Post.user_id.in_(followed))

        stmt = self._paged(stmt.order_by(desc(Post.id)), page)
        return await self._fetch_summaries(stmt)

    async def get_post(self, viewer_id: int, post_id: int) -> PostSummary:
        stmt = self._summary_query(viewer_id).where(Post.id == post_id)
        posts = await self._fetch_summaries(stmt)
        if not posts:
            raise NotFoundError("Post not found")
        return posts[0]

    async def get_user_posts(self, viewer_id: int, author_id: int, page: int = 1) -> List[PostSummary]:
        """Posts by one author, flagged from the viewer's point of view"""
        stmt = self._summary_query(viewer_id).where(Post.user_id == author_id)
        stmt = self._paged(stmt.order_by(desc(Post.id)), page)
        return await self._fetch_summaries(stmt)

    async def get_user_likes(self, viewer_id: int, liker_id: int, page: int = 1) -> List[PostSummary]:
        """Posts a user has liked, newest post first (not newest like)"""
        liker_like = aliased(Like)
        stmt = self._summary_query(viewer_id).join(
            liker_like, liker_like.tweet_id == Post.id
        ).where(liker_like.user_id == liker_id)
        stmt = self._paged(stmt.order_by(desc(Post.created_at), desc(Post.id)), page)
        return await self._fetch_summaries(stmt)

    async def get_bookmarks(self, viewer_id: int, page: int = 1) -> List[PostSummary]:
        owner_bookmark = aliased(Bookmark)
        stmt = self._summary_query(viewer_id, bookmarked_by_construction=True).join(
            owner_bookmark, owner_bookmark.tweet_id == Post.id
        ).where(owner_bookmark.user_id == viewer_id)
        stmt = self._paged(stmt.order_by(desc(Post.id)), page)
        return await self._fetch_summaries(stmt)

    async def get_post_replies(self, post_id: int, page: int = 1) -> List[ReplyResponse]:
        """Replies under a post, oldest first"""
        stmt = select(
            Reply.id,
            Reply.tweet_id,
            Reply.content,
            Reply.image_url,
            Reply.created_at.label("date"),
            Reply.user_id,
            User.username,
            User.real_name,
            User.avatar_url,
        ).join(User, Reply.user_id == User.id).where(Reply.tweet_id == post_id)
        stmt = self._paged(stmt.order_by(Reply.id), page)

        result = await self.db.execute(stmt)
        return [ReplyResponse.model_validate(dict(row._mapping)) for row in result.all()]

    async def get_user_replies(self, author_id: int, page: int = 1) -> List[ReplyWithPost]:
        """A user's replies, each paired with the post it answers"""
        reply_author = aliased(User)
        post_author = aliased(User)

        stmt = select(
            Reply.id,
            Reply.tweet_id,
            Reply.content,
            Reply.image_url,
            Reply.created_at.label("date"),
            Reply.user_id,
            reply_author.username,
            reply_author.real_name,
            reply_author.avatar_url,
            Post.content.label("post_content"),
            Post.image_url.label("post_image_url"),
            Post.created_at.label("post_date"),
            Post.user_id.label("post_user_id"),
            post_author.username.label("post_username"),
            post_author.real_name.label("post_real_name"),
            post_author.avatar_url.label("post_avatar_url"),
        ).join(
            reply_author, Reply.user_id == reply_author.id
        ).join(
            Post, Reply.tweet_id == Post.id
        ).join(
            post_author, Post.user_id == post_author.id
        ).where(Reply.user_id == author_id)
        stmt = self._paged(stmt.order_by(desc(Reply.id)), page)

        result = await self.db.execute(stmt)
        replies = []
        for row in result.all():
            replies.append(ReplyWithPost(
                id=row.id,
                tweet_id=row.tweet_id,
                content=row.content,
                image_url=row.image_url,
                date=row.date,
                user_id=row.user_id,
                username=row.username,
                real_name=row.real_name,
                avatar_url=row.avatar_url,
                post=ParentPost(
                    id=row.tweet_id,
                    content=row.post_content,
                    image_url=row.post_image_url,
                    date=row.post_date,
                    user_id=row.post_user_id,
                    username=row.post_username,
                    real_name=row.post_real_name,
                    avatar_url=row.post_avatar_url,
                ),
            ))
        return replies
