"""
Storage abstraction for S3-compatible object stores and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from blog_backend.errors import ObjectStoreError

MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class ObjectNotFound(LookupError):
    """Raised by ``get_bytes`` when the key does not exist."""


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def put_object(self, key: str, body: bytes, content_type: str | None = None) -> None:
        ...

    def get_bytes(self, key: str) -> bytes:
        ...

    def public_url(self, key: str) -> str:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = None
    content_types: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}
        if self.content_types is None:
            self.content_types = {}

    def put_object(self, key: str, body: bytes, content_type: str | None = None) -> None:
        self.stored_objects[key] = bytes(body)
        self.content_types[key] = content_type

    def get_bytes(self, key: str) -> bytes:
        stored = self.stored_objects.get(key)
        if stored is None:
            raise ObjectNotFound(key)
        return stored

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/{key}"


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client (AWS S3, Cloudflare R2, MinIO, Tencent COS).
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    force_path_style: bool = False
    access_host: str | None = None

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "path" if self.force_path_style else "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def put_object(self, key: str, body: bytes, content_type: str | None = None) -> None:
        params = {"Bucket": self.bucket, "Key": key, "Body": body}
        if content_type:
            params["ContentType"] = content_type
        try:
            self._client.put_object(**params)
        except (BotoCoreError, ClientError) as exc:
            raise ObjectStoreError(f"Failed to upload {key}") from exc

    def get_bytes(self, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in MISSING_KEY_CODES:
                raise ObjectNotFound(key) from exc
            raise ObjectStoreError(f"Failed to fetch {key}") from exc
        except BotoCoreError as exc:
            raise ObjectStoreError(f"Failed to fetch {key}") from exc
        return response["Body"].read()

    def public_url(self, key: str) -> str:
        if self.access_host:
            return f"{self.access_host.rstrip('/')}/{key}"
        endpoint = self.endpoint.rstrip("/")
        if self.force_path_style:
            return f"{endpoint}/{self.bucket}/{key}"
        parsed = urlparse(endpoint)
        return f"{parsed.scheme}://{self.bucket}.{parsed.netloc}/{key}"
