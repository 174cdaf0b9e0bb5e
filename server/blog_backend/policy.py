"""
Authorization policy.

The ``can_*`` predicates are pure. The ``require_*`` helpers turn a
denial into ``Unauthenticated`` (no identity) or ``Forbidden`` (identity
without the needed privilege) so every refusal reaches the caller.
"""

from __future__ import annotations

from typing import Optional

from blog_backend.errors import Forbidden, Unauthenticated
from blog_backend.types import Identity, Namespace, OwnedResource


def can_read_server_config(identity: Optional[Identity]) -> bool:
    return identity is not None and identity.is_admin


def can_read_client_config(identity: Optional[Identity]) -> bool:
    return True


def can_read_config(namespace: Namespace, identity: Optional[Identity]) -> bool:
    if namespace is Namespace.SERVER:
        return can_read_server_config(identity)
    return can_read_client_config(identity)


def can_write_config(namespace: Namespace, identity: Optional[Identity]) -> bool:
    # Both namespaces are admin-only for writes.
    return identity is not None and identity.is_admin


def can_mutate_owned_resource(
    identity: Optional[Identity], resource: OwnedResource
) -> bool:
    if identity is None:
        return False
    return identity.is_admin or identity.user_id == resource.owner_user_id


def can_set_acceptance(identity: Optional[Identity]) -> bool:
    return identity is not None and identity.is_admin


def require_identity(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise Unauthenticated("Authentication required")
    return identity


def require_admin(identity: Optional[Identity]) -> Identity:
    identity = require_identity(identity)
    if not identity.is_admin:
        raise Forbidden("Admin permission required")
    return identity


def require_config_read(namespace: Namespace, identity: Optional[Identity]) -> None:
    if can_read_config(namespace, identity):
        return
    require_identity(identity)
    raise Forbidden(f"Reading {namespace} config requires admin permission")


def require_config_write(namespace: Namespace, identity: Optional[Identity]) -> None:
    if can_write_config(namespace, identity):
        return
    require_identity(identity)
    raise Forbidden(f"Writing {namespace} config requires admin permission")


def require_owner_or_admin(
    identity: Optional[Identity], resource: OwnedResource
) -> Identity:
    identity = require_identity(identity)
    if not can_mutate_owned_resource(identity, resource):
        raise Forbidden("Only the owner or an admin may modify this resource")
    return identity
