from fastapi import APIRouter, Depends, status, Query, Form, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from twex.config import Settings
from twex.db.session import get_db
from twex.models.user import User
from twex.schemas.post_schema import (
    PostSummary,
    PostCreated,
    ReplyResponse,
    ReplyCreated,
    MessageResponse,
)
from twex.services.auth_service import get_current_user, get_app_settings
from twex.services.feed_service import FeedService
from twex.services.post_service import PostService
from twex.utils.exceptions import TwexError, NotFoundError
from twex.utils.file_upload import save_upload_file, delete_file

logger = logging.getLogger(__name__)

router = APIRouter()

async def _store_image(image: Optional[UploadFile], settings: Settings) -> Optional[str]:
    # Browsers send an empty part when no file was picked
    if image is None or not image.filename:
        return None
    return await save_upload_file(image, settings)

@router.get("/post/{post_id}", response_model=PostSummary)
async def get_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a post by ID"""
    try:
        return await FeedService(db).get_post(current_user.id, post_id)
    except TwexError:
        raise
    except Exception as e:
        logger.error(f"Fetch single post error: {e}")
        raise TwexError()

@router.post("/create/post", response_model=PostCreated, status_code=status.HTTP_201_CREATED)
async def create_post(
    content: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Create a new post"""
    pending_image = None
    try:
        pending_image = await _store_image(image, settings)
        post = await PostService(db).create_post(current_user.id, content, pending_image)
        pending_image = None  # owned by the post now
        summary = await FeedService(db).get_post(current_user.id, post.id)
        return {"message": "Post created", "post": summary}
    except TwexError:
        await delete_file(pending_image, settings)
        raise
    except Exception as e:
        logger.error(f"Post creation failed: {e}")
        await delete_file(pending_image, settings)
        raise TwexError()

@router.put("/edit/post/{post_id}", response_model=PostSummary)
async def edit_post(
    post_id: int,
    content: Optional[str] = Form(None),
    remove_image: bool = Form(False),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Edit a post's text and image"""
    pending_image = None
    try:
        post_service = PostService(db)

        # Ownership is checked before anything is written to disk
        post = await post_service.get_owned_post(post_id, current_user.id)
        previous_image = post.image_url

        pending_image = await _store_image(image, settings)
        post = await post_service.update_post(
            post_id,
            current_user.id,
            content,
            image_url=pending_image,
            remove_image=remove_image,
        )
        pending_image = None

        if previous_image and previous_image != post.image_url:
            await delete_file(previous_image, settings)

        return await FeedService(db).get_post(current_user.id, post_id)
    except TwexError:
        await delete_file(pending_image, settings)
        raise
    except Exception as e:
        logger.error(f"Failed to update post: {e}")
        await delete_file(pending_image, settings)
        raise TwexError()

@router.delete("/delete/post/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Delete a post"""
    try:
        post = await PostService(db).delete_post(post_id, current_user.id)
        await delete_file(post.image_url, settings)
        return {"message": "Post deleted"}
    except TwexError:
        raise
    except Exception as e:
        logger.error(f"Post deletion error: {e}")
        raise TwexError()

@router.get("/posts/{post_id}/replies", response_model=List[ReplyResponse])
async def get_post_replies(
    post_id: int,
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Replies under a post, oldest first"""
    try:
        return await FeedService(db, settings.PAGE_SIZE).get_post_replies(post_id, page)
    except Exception as e:
        logger.error(f"Error fetching replies: {e}")
        raise TwexError()

@router.post("/replies", response_model=ReplyCreated, status_code=status.HTTP_201_CREATED)
async def create_reply(
    reply_to: int = Form(...),
    content: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Reply to a post"""
    pending_image = None
    try:
        post_service = PostService(db)
        if not await post_service.get_post(reply_to):
            raise NotFoundError("Post not found")

        pending_image = await _store_image(image, settings)
        reply = await post_service.create_reply(current_user.id, reply_to, content, pending_image)
        pending_image = None

        return {
            "message": "Reply created",
            "reply": ReplyResponse(
                id=reply.id,
                tweet_id=reply.tweet_id,
                content=reply.content,
                image_url=reply.image_url,
                date=reply.created_at,
                user_id=current_user.id,
                username=current_user.username,
                real_name=current_user.real_name,
                avatar_url=current_user.avatar_url,
            ),
        }
    except TwexError:
        await delete_file(pending_image, settings)
        raise
    except Exception as e:
        logger.error(f"Reply creation failed: {e}")
        await delete_file(pending_image, settings)
        raise TwexError()

@router.delete("/reply/{reply_id}", response_model=MessageResponse)
async def delete_reply(
    reply_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Delete one of your replies"""
    try:
        reply = await PostService(db).delete_reply(reply_id, current_user.id)
        await delete_file(reply.image_url, settings)
        return {"message": "Reply deleted successfully"}
    except TwexError:
        raise
    except Exception as e:
        logger.error(f"Error deleting reply: {e}")
        raise TwexError()
