from datetime import timedelta

import pytest
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from twex.config import Settings
from twex.db.base import utcnow
from twex.models import Bookmark, Follow, Like, Post, User, UserSession
from twex.schemas.auth_schema import SignupRequest
from twex.services.auth_service import AuthService
from twex.services.bookmark_service import BookmarkService
from twex.services.feed_service import FeedService
from twex.services.follow_service import FollowService
from twex.services.like_service import LikeService
from twex.services.notification_service import EPOCH, NotificationService
from twex.services.post_service import PostService
from twex.services.user_service import UserService
from twex.utils.exceptions import ForbiddenError, NotFoundError, ValidationError


async def _user(db: AsyncSession, username: str) -> User:
    user = User(username=username, email=f"{username}@example.com", password="x")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def _count(db: AsyncSession, model) -> int:
    result = await db.execute(select(func.count(model.id)))
    return result.scalar()


@pytest.mark.asyncio
async def test_like_activate_twice_stores_one_row(db_session: AsyncSession):
    user = await _user(db_session, "liker")
    post = await PostService(db_session).create_post(user.id, "likeable")
    likes = LikeService(db_session)

    await likes.activate(user.id, post.id)
    await likes.activate(user.id, post.id)

    assert await _count(db_session, Like) == 1
    assert await likes.status(user.id, post.id) is True


@pytest.mark.asyncio
async def test_toggle_sequence_ends_in_last_state(db_session: AsyncSession):
    user = await _user(db_session, "eager")
    post = await PostService(db_session).create_post(user.id, "popular")
    bookmarks = BookmarkService(db_session)

    await bookmarks.activate(user.id, post.id)
    await bookmarks.deactivate(user.id, post.id)
    await bookmarks.deactivate(user.id, post.id)
    await bookmarks.activate(user.id, post.id)

    assert await _count(db_session, Bookmark) == 1
    assert await bookmarks.status(user.id, post.id) is True


@pytest.mark.asyncio
async def test_deactivate_absent_pair_is_noop(db_session: AsyncSession):
    user = await _user(db_session, "idle")
    other = await _user(db_session, "other")

    await FollowService(db_session).deactivate(user.id, other.id)

    assert await _count(db_session, Follow) == 0


@pytest.mark.asyncio
async def test_follow_rules(db_session: AsyncSession):
    user = await _user(db_session, "rules")
    follows = FollowService(db_session)

    with pytest.raises(ValidationError):
        await follows.activate(user.id, user.id)
    with pytest.raises(NotFoundError):
        await follows.activate(user.id, 12345)

    assert await _count(db_session, Follow) == 0


@pytest.mark.asyncio
async def test_like_missing_post(db_session: AsyncSession):
    user = await _user(db_session, "ghostliker")

    with pytest.raises(NotFoundError):
        await LikeService(db_session).activate(user.id, 12345)


@pytest.mark.asyncio
async def test_feed_service_counts_distinct_likers(db_session: AsyncSession):
    alice = await _user(db_session, "alice")
    bob = await _user(db_session, "bob")
    post = await PostService(db_session).create_post(alice.id, "counted")

    await LikeService(db_session).activate(alice.id, post.id)
    await LikeService(db_session).activate(bob.id, post.id)
    await LikeService(db_session).activate(bob.id, post.id)
    await PostService(db_session).create_reply(bob.id, post.id, "reply")

    summary = await FeedService(db_session).get_post(bob.id, post.id)

    assert summary.total_likes == 2
    assert summary.total_replies == 1
    assert summary.liked_by_current_user is True
    assert summary.bookmarked_by_current_user is False


@pytest.mark.asyncio
async def test_feed_service_page_size(db_session: AsyncSession):
    author = await _user(db_session, "pager")
    for i in range(5):
        await PostService(db_session).create_post(author.id, f"post {i}")

    feed = FeedService(db_session, page_size=2)

    pages = [await feed.get_feed(author.id, "all", page) for page in (1, 2, 3, 4)]

    assert [len(page) for page in pages] == [2, 2, 1, 0]


@pytest.mark.asyncio
async def test_post_service_ownership(db_session: AsyncSession):
    owner = await _user(db_session, "owner")
    other = await _user(db_session, "other")
    posts = PostService(db_session)
    post = await posts.create_post(owner.id, "mine")

    with pytest.raises(ForbiddenError):
        await posts.update_post(post.id, other.id, "stolen")
    with pytest.raises(ForbiddenError):
        await posts.delete_post(post.id, other.id)
    with pytest.raises(NotFoundError):
        await posts.delete_post(12345, owner.id)

    await posts.delete_post(post.id, owner.id)
    assert await _count(db_session, Post) == 0


@pytest.mark.asyncio
async def test_notification_watermark(db_session: AsyncSession):
    reader = await _user(db_session, "reader")
    writer = await _user(db_session, "writer")
    notifications = NotificationService(db_session)

    assert await notifications.get_last_seen(reader.id) == EPOCH

    await FollowService(db_session).activate(reader.id, writer.id)
    await PostService(db_session).create_post(writer.id, "news")
    assert await notifications.has_unseen_activity(reader.id) is True

    seen_at = await notifications.mark_seen(reader.id)
    assert await notifications.get_last_seen(reader.id) == seen_at
    assert await notifications.has_unseen_activity(reader.id) is False


@pytest.mark.asyncio
async def test_search_escapes_like_wildcards(db_session: AsyncSession):
    await _user(db_session, "under_score")
    await _user(db_session, "underscore")
    users = UserService(db_session)

    results = await users.search_users("r_s")

    assert [u.username for u in results] == ["under_score"]
    assert await users.search_users("   ") == []


@pytest.mark.asyncio
async def test_new_session_prunes_expired_ones(db_session: AsyncSession):
    user = await _user(db_session, "sessions")
    auth = AuthService(db_session, Settings(ENVIRONMENT="testing", SECRET_KEY="test-secret-key"))

    for _ in range(5):
        await auth.create_session(user)
    await db_session.execute(
        update(UserSession).values(expires_at=utcnow() - timedelta(minutes=1))
    )
    await db_session.commit()

    token = await auth.create_session(user)

    assert await _count(db_session, UserSession) == 1
    assert (await auth.resolve_session(token)).id == user.id


@pytest.mark.asyncio
async def test_prune_keeps_live_sessions(db_session: AsyncSession):
    user = await _user(db_session, "live")
    auth = AuthService(db_session, Settings(ENVIRONMENT="testing", SECRET_KEY="test-secret-key"))
    await auth.create_session(user)
    await auth.create_session(user)

    assert await auth.prune_expired_sessions() == 0
    assert await _count(db_session, UserSession) == 2


@pytest.mark.asyncio
async def test_signup_losing_race_reports_duplicate(db_session: AsyncSession, monkeypatch):
    auth = AuthService(db_session, Settings(ENVIRONMENT="testing", SECRET_KEY="test-secret-key"))
    await auth.create_user(SignupRequest(username="racer", email="racer@example.com", password="pw"))

    # Both requests passed the existence check before either committed
    async def no_existing_account(self, username, email):
        return False

    monkeypatch.setattr(AuthService, "_account_exists", no_existing_account)

    with pytest.raises(ValidationError, match="Email or username already in use"):
        await auth.create_user(SignupRequest(username="racer", email="other@example.com", password="pw"))

    assert await _count(db_session, User) == 1
