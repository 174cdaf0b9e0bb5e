"""
Authenticated uploads to object storage under content-addressed keys.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import PurePosixPath
from typing import Optional

from blog_backend.config import Settings
from blog_backend.errors import InvalidArgument
from blog_backend.favicon import storage_key
from blog_backend.policy import require_identity
from blog_backend.storage import StorageClient
from blog_backend.types import Identity

logger = logging.getLogger(__name__)

UPLOAD_MAX_SIZE = 50 * 1024 * 1024


def content_key(folder: Optional[str], data: bytes, filename: str) -> str:
    """Key derived from the file content so re-uploads land on the same object."""
    digest = hashlib.sha256(data).hexdigest()[:32]
    suffix = PurePosixPath(filename).suffix.lower()
    return storage_key(folder, f"{digest}{suffix}")


class UploadService:
    def __init__(self, storage: StorageClient, settings: Settings):
        self.storage = storage
        self.settings = settings

    def upload(
        self,
        identity: Optional[Identity],
        data: bytes,
        key: str,
        content_type: Optional[str],
    ) -> str:
        identity = require_identity(identity)
        if not key:
            raise InvalidArgument("key is required")
        if len(data) > UPLOAD_MAX_SIZE:
            raise InvalidArgument("File size exceeds the 50MB limit")

        object_key = content_key(self.settings.s3_folder, data, key)
        self.storage.put_object(object_key, data, content_type)
        logger.info(
            "User %s uploaded %s (%d bytes)", identity.user_id, object_key, len(data)
        )
        return self.storage.public_url(object_key)
