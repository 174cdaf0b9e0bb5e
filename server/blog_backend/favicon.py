"""
Site favicon: upload, conversion to WebP and serving from object storage.
"""

from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from blog_backend.config import Settings
from blog_backend.errors import InvalidArgument, NotFound
from blog_backend.policy import require_admin
from blog_backend.storage import ObjectNotFound, StorageClient
from blog_backend.types import Identity

logger = logging.getLogger(__name__)

FAVICON_ALLOWED_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
FAVICON_MAX_SIZE = 10 * 1024 * 1024
FAVICON_DIMENSION = 256
FAVICON_CACHE_CONTROL = "public, max-age=31536000"


def storage_key(folder: Optional[str], name: str) -> str:
    folder = (folder or "").strip("/")
    return f"{folder}/{name}" if folder else name


def get_favicon_key(settings: Settings) -> str:
    return storage_key(settings.s3_folder, "favicon.webp")


def get_original_favicon_key(settings: Settings) -> str:
    return storage_key(settings.s3_folder, "favicon_original")


def sniff_content_type(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.get_format_mimetype() or "application/octet-stream"
    except (UnidentifiedImageError, OSError):
        return "application/octet-stream"


def convert_to_webp(data: bytes, size: int = FAVICON_DIMENSION) -> bytes:
    """Scales the image down to fit ``size`` x ``size`` and encodes it as WebP."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            converted = img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidArgument("File is not a readable image") from e
    converted.thumbnail((size, size))
    output = io.BytesIO()
    converted.save(output, format="WEBP")
    return output.getvalue()


class FaviconService:
    def __init__(self, storage: StorageClient, settings: Settings):
        self.storage = storage
        self.settings = settings

    def get_favicon(self) -> bytes:
        key = get_favicon_key(self.settings)
        try:
            return self.storage.get_bytes(key)
        except ObjectNotFound:
            raise NotFound("Favicon not found") from None

    def get_original(self) -> tuple[bytes, str]:
        key = get_original_favicon_key(self.settings)
        try:
            data = self.storage.get_bytes(key)
        except ObjectNotFound:
            raise NotFound("Original favicon not found") from None
        return data, sniff_content_type(data)

    def upload(
        self,
        identity: Optional[Identity],
        data: bytes,
        content_type: Optional[str],
    ) -> str:
        """Stores the original upload and its WebP rendition, returns the WebP key."""
        identity = require_admin(identity)
        if len(data) > FAVICON_MAX_SIZE:
            raise InvalidArgument("File size exceeds the 10MB limit")
        if content_type not in FAVICON_ALLOWED_TYPES:
            raise InvalidArgument(
                "Only JPEG, PNG, GIF and WebP images are allowed"
            )

        webp = convert_to_webp(data)
        original_key = get_original_favicon_key(self.settings)
        favicon_key = get_favicon_key(self.settings)
        self.storage.put_object(original_key, data, content_type)
        self.storage.put_object(favicon_key, webp, "image/webp")
        logger.info(
            "User %s uploaded a new favicon (%s, %d bytes)",
            identity.user_id,
            content_type,
            len(data),
        )
        return favicon_key
