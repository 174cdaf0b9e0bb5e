"""
Shared domain types: config namespaces and caller identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from blog_backend.errors import InvalidArgument


class Namespace(StrEnum):
    SERVER = "server"
    CLIENT = "client"


def parse_namespace(value: str) -> Namespace:
    try:
        return Namespace(value)
    except ValueError:
        raise InvalidArgument(f"Invalid config type: {value}") from None


@dataclass(frozen=True)
class Identity:
    """Authenticated caller derived from a verified token."""

    user_id: int
    is_admin: bool = False


class OwnedResource(Protocol):
    """Anything created by a user and later approved by an admin."""

    @property
    def owner_user_id(self) -> int:
        ...

    @property
    def accepted(self) -> bool:
        ...
