"""
Token verification and identity resolution.

Tokens are issued elsewhere; this module only checks them. A token that
fails verification, or names an unknown user, yields no identity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from jose import JWTError, jwt

from blog_backend.db import DbClient
from blog_backend.types import Identity

logger = logging.getLogger(__name__)


class TokenVerifier(Protocol):
    def verify(self, token: str) -> Optional[dict]:
        ...


@dataclass
class JwtTokenVerifier:
    """Verifies HS256 tokens whose payload carries the user ``id``."""

    secret: str
    algorithm: str = "HS256"

    def verify(self, token: str) -> Optional[dict]:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            return None
        if payload.get("id") is None:
            return None
        return payload


def resolve_identity(
    token: Optional[str], verifier: TokenVerifier, db: DbClient
) -> Optional[Identity]:
    if not token:
        return None
    payload = verifier.verify(token)
    if not payload:
        return None
    try:
        user_id = int(payload["id"])
    except (KeyError, TypeError, ValueError):
        return None
    user = db.get_user(user_id)
    if user is None:
        logger.info("Token for unknown user %s", user_id)
        return None
    return Identity(user_id=user.id, is_admin=user.is_admin)
