"""
Dependency wiring for the FastAPI app.

Clients (database, cache, object storage) are created once per process.
Config stores and services are built per request so buffered config
writes never leak between requests.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blog_backend.auth import JwtTokenVerifier, TokenVerifier, resolve_identity
from blog_backend.cache import Cache, InMemoryCache, RedisCache
from blog_backend.config import Settings, get_settings
from blog_backend.config_service import ConfigService
from blog_backend.config_store import ConfigStore
from blog_backend.db import DbClient, InMemoryDbClient, PostgresDbClient
from blog_backend.errors import DependencyFailure
from blog_backend.favicon import FaviconService
from blog_backend.friends import FriendService
from blog_backend.policy import require_identity
from blog_backend.storage import InMemoryStorageClient, S3StorageClient, StorageClient
from blog_backend.types import Identity, Namespace
from blog_backend.uploads import UploadService
from llm.provider import AiProvider, DefaultAiProvider

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_cache_client: Cache | None = None
_storage_client: StorageClient | None = None
_token_verifier: TokenVerifier | None = None

bearer_scheme = HTTPBearer(auto_error=False)

REQUIRED_S3_SETTINGS = (
    ("s3_endpoint", "S3_ENDPOINT"),
    ("s3_bucket", "S3_BUCKET"),
    ("s3_access_key_id", "S3_ACCESS_KEY_ID"),
    ("s3_secret_access_key", "S3_SECRET_ACCESS_KEY"),
)


def get_db_client() -> DbClient:
    """
    Return a singleton DB client shared by every request.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = PostgresDbClient(settings.database_url)
    return _db_client


def get_cache() -> Cache:
    global _cache_client
    if _cache_client:
        return _cache_client

    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        _cache_client = RedisCache(url=settings.redis_url, prefix=settings.cache_prefix)
    else:
        _cache_client = InMemoryCache()
    return _cache_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _storage_client = InMemoryStorageClient()
        return _storage_client

    for field_name, env_name in REQUIRED_S3_SETTINGS:
        if not getattr(settings, field_name):
            logger.error("Object storage is not configured: %s is missing", env_name)
            raise DependencyFailure(f"{env_name} is not defined")
    _storage_client = S3StorageClient(
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        endpoint=settings.s3_endpoint,
        access_key_id=settings.s3_access_key_id,
        secret_access_key=settings.s3_secret_access_key,
        force_path_style=settings.s3_force_path_style,
        access_host=settings.s3_access_host,
    )
    return _storage_client


def get_token_verifier() -> TokenVerifier:
    global _token_verifier
    if _token_verifier:
        return _token_verifier

    settings = get_settings()
    secret = settings.jwt_secret
    if not secret:
        logger.warning("JWT_SECRET is not set; no token will verify")
        secret = secrets.token_urlsafe(32)
    _token_verifier = JwtTokenVerifier(secret=secret, algorithm=settings.jwt_algorithm)
    return _token_verifier


def get_ai_provider(settings: Settings = Depends(get_settings)) -> AiProvider:
    return DefaultAiProvider(
        timeout=settings.ai_request_timeout,
        gemini_api_key=settings.gemini_api_key,
    )


def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token: Optional[str] = Cookie(None),
    verifier: TokenVerifier = Depends(get_token_verifier),
    db: DbClient = Depends(get_db_client),
) -> Optional[Identity]:
    """Caller identity from the bearer token or ``token`` cookie, if any."""
    raw = credentials.credentials if credentials else token
    return resolve_identity(raw, verifier, db)


def get_required_identity(
    identity: Optional[Identity] = Depends(get_identity),
) -> Identity:
    return require_identity(identity)


def get_server_config(
    db: DbClient = Depends(get_db_client), cache: Cache = Depends(get_cache)
) -> ConfigStore:
    return ConfigStore(db, Namespace.SERVER, cache)


def get_client_config(
    db: DbClient = Depends(get_db_client), cache: Cache = Depends(get_cache)
) -> ConfigStore:
    return ConfigStore(db, Namespace.CLIENT, cache)


def get_config_service(
    server_config: ConfigStore = Depends(get_server_config),
    client_config: ConfigStore = Depends(get_client_config),
    cache: Cache = Depends(get_cache),
    ai_provider: AiProvider = Depends(get_ai_provider),
) -> ConfigService:
    return ConfigService(server_config, client_config, cache, ai_provider)


def get_friend_service(
    db: DbClient = Depends(get_db_client),
    client_config: ConfigStore = Depends(get_client_config),
    server_config: ConfigStore = Depends(get_server_config),
) -> FriendService:
    return FriendService(db, client_config, server_config)


def get_favicon_service(
    storage: StorageClient = Depends(get_storage_client),
    settings: Settings = Depends(get_settings),
) -> FaviconService:
    return FaviconService(storage, settings)


def get_upload_service(
    storage: StorageClient = Depends(get_storage_client),
    settings: Settings = Depends(get_settings),
) -> UploadService:
    return UploadService(storage, settings)
