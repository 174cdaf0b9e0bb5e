"""
Key/value site settings persisted per namespace.

A ``ConfigStore`` is built for each request with the database and cache
it should use; no module-level instance holds config state. Reads go
through a namespace snapshot in the cache, writes are buffered until
``save`` persists them as one batch and drops the snapshot.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from blog_backend.cache import Cache
from blog_backend.db import DbClient
from blog_backend.types import Namespace

logger = logging.getLogger(__name__)

# Bounds staleness if an invalidation is lost.
SNAPSHOT_TTL = 300


def snapshot_key(namespace: Namespace | str) -> str:
    return f"config:{Namespace(namespace).value}"


class ConfigStore:
    """Settings for a single namespace."""

    def __init__(self, db: DbClient, namespace: Namespace | str, cache: Cache):
        self.db = db
        self.namespace = Namespace(namespace)
        self.cache = cache
        self._pending: dict[str, Any] = {}

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def _load(self) -> dict:
        return self.cache.get_or_set(
            snapshot_key(self.namespace),
            lambda: self.db.load_config(self.namespace.value),
            ttl=SNAPSHOT_TTL,
        )

    def all(self) -> dict:
        values = dict(self._load())
        values.update(self._pending)
        return values

    def get(self, key: str) -> Optional[Any]:
        if key in self._pending:
            return self._pending[key]
        return self._load().get(key)

    def get_or_default(self, key: str, default: Any) -> Any:
        value = self.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any, auto_save: bool = False) -> None:
        self._pending[key] = value
        if auto_save:
            self.save()

    def save(self) -> None:
        """Persist every pending change, then invalidate the cached snapshot.

        Errors from the database propagate; pending changes are kept so the
        caller can retry or ``discard`` them.
        """
        if not self.has_pending:
            return
        self.db.save_config(self.namespace.value, dict(self._pending))
        self.cache.delete(snapshot_key(self.namespace))
        logger.info(
            "Saved %s config keys: %s",
            self.namespace.value,
            ", ".join(sorted(self._pending)),
        )
        self._pending.clear()

    def discard(self) -> None:
        self._pending.clear()
