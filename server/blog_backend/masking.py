"""
Redaction of secret-bearing config values in read responses.

Only the server namespace can hold secrets. Masking happens at the read
boundary; stored values are never modified.
"""

from __future__ import annotations

from typing import Any, Mapping

from blog_backend.types import Namespace

MASK = "•" * 8

SENSITIVE_SUFFIXES = (
    ".api_key",
    ".secret",
    ".secret_key",
    ".password",
    ".token",
)


def should_mask(namespace: Namespace | str, key: str) -> bool:
    if Namespace(namespace) is not Namespace.SERVER:
        return False
    return key.endswith(SENSITIVE_SUFFIXES)


def is_mask(value: Any) -> bool:
    return value == MASK


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def mask_config(namespace: Namespace | str, values: Mapping[str, Any]) -> dict:
    """Return a copy of ``values`` with configured secrets replaced by ``MASK``.

    Empty or unset secrets pass through untouched so callers can tell a
    missing credential from a configured one.
    """
    masked = {}
    for key, value in values.items():
        if should_mask(namespace, key) and not _is_empty(value):
            masked[key] = MASK
        else:
            masked[key] = value
    return masked
