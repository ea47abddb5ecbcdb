"""
Image upload helpers.

Uploaded images are written to `UPLOAD_DIR` under a random name and served
back through the static mount at `UPLOAD_URL_PREFIX`.
"""
import logging
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import UploadFile

from twex.config import Settings
from twex.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


def is_allowed_file(filename: Optional[str], settings: Settings) -> bool:
    """Check if file extension is allowed"""
    if not filename:
        return False

    return Path(filename).suffix.lower() in settings.ALLOWED_EXTENSIONS


async def save_upload_file(upload_file: UploadFile, settings: Settings) -> str:
    """
    Save an uploaded image to disk

    Returns:
        URL path to the saved file
    """
    content_type = upload_file.content_type or ""
    if not content_type.startswith("image/") or not is_allowed_file(upload_file.filename, settings):
        raise ValidationError("Only images allowed!")

    content = await upload_file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise ValidationError("Image is too large")

    unique_filename = f"{uuid.uuid4().hex}{Path(upload_file.filename).suffix.lower()}"

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)

    async with aiofiles.open(upload_dir / unique_filename, 'wb') as out_file:
        await out_file.write(content)

    logger.info(f"Stored upload {unique_filename} ({len(content)} bytes)")
    return f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{unique_filename}"


async def delete_file(file_url: Optional[str], settings: Settings) -> bool:
    """Delete a previously stored upload given its public URL"""
    prefix = settings.UPLOAD_URL_PREFIX.rstrip('/') + '/'
    if not file_url or not file_url.startswith(prefix):
        return False

    full_path = Path(settings.UPLOAD_DIR) / Path(file_url[len(prefix):]).name
    try:
        if full_path.exists():
            full_path.unlink()
            return True
    except OSError as e:
        logger.error(f"Error deleting file {full_path}: {e}")
    return False
