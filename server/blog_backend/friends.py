"""
Friend link directory.

Users apply with a link; admins accept it. A friend entry belongs to the
user who created it.
"""

from __future__ import annotations

import logging
from typing import Optional

from blog_backend.config_store import ConfigStore
from blog_backend.db import DbClient, FriendRecord
from blog_backend.errors import Forbidden, InvalidArgument, NotFound
from blog_backend.notify import notify
from blog_backend.policy import (
    can_set_acceptance,
    require_identity,
    require_owner_or_admin,
)
from blog_backend.schemas import FriendCreateRequest, FriendUpdateRequest
from blog_backend.types import Identity

logger = logging.getLogger(__name__)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class FriendService:
    def __init__(
        self, db: DbClient, client_config: ConfigStore, server_config: ConfigStore
    ):
        self.db = db
        self.client_config = client_config
        self.server_config = server_config

    def _notify(self, content: str) -> None:
        notify(self.server_config.get("webhook_url"), content)

    def _get(self, friend_id: int) -> FriendRecord:
        friend = self.db.get_friend(friend_id)
        if friend is None:
            raise NotFound(f"Friend {friend_id} not found")
        return friend

    def list_friends(
        self, identity: Optional[Identity]
    ) -> tuple[list[FriendRecord], Optional[list[FriendRecord]]]:
        """Returns the public list and, for signed-in users, their own entries."""
        is_admin = identity is not None and identity.is_admin
        friends = self.db.list_friends(accepted_only=not is_admin)
        apply_list = None
        if identity is not None:
            apply_list = self.db.list_friends_by_owner(identity.user_id)
        return friends, apply_list

    def create(
        self, identity: Optional[Identity], payload: FriendCreateRequest
    ) -> FriendRecord:
        identity = require_identity(identity)
        if not identity.is_admin:
            if not _as_bool(self.client_config.get_or_default("friend_apply_enable", True)):
                raise Forbidden("Friend applications are disabled")
            if self.db.list_friends_by_owner(identity.user_id):
                raise InvalidArgument("You have already submitted a friend link")

        friend = self.db.create_friend(
            name=payload.name,
            desc=payload.desc,
            avatar=payload.avatar,
            url=payload.url,
            uid=identity.user_id,
            accepted=identity.is_admin,
        )
        logger.info("User %s created friend %s", identity.user_id, friend.id)
        if not identity.is_admin:
            self._notify(f"New friend link application: {friend.name} {friend.url}")
        return friend

    def update(
        self,
        identity: Optional[Identity],
        friend_id: int,
        payload: FriendUpdateRequest,
    ) -> FriendRecord:
        identity = require_identity(identity)
        friend = self._get(friend_id)
        require_owner_or_admin(identity, friend)

        changes = {"name": payload.name, "desc": payload.desc, "url": payload.url}
        if payload.avatar:
            changes["avatar"] = payload.avatar
        if can_set_acceptance(identity):
            if payload.accepted is not None:
                changes["accepted"] = bool(payload.accepted)
            if payload.sort_order is not None:
                changes["sort_order"] = payload.sort_order
        else:
            # Edits by the owner need to be approved again.
            changes["accepted"] = False

        updated = self.db.update_friend(friend_id, changes)
        if updated is None:
            raise NotFound(f"Friend {friend_id} not found")
        logger.info("User %s updated friend %s", identity.user_id, friend_id)
        if not identity.is_admin:
            self._notify(f"Friend link updated: {updated.name} {updated.url}")
        return updated

    def delete(self, identity: Optional[Identity], friend_id: int) -> None:
        identity = require_identity(identity)
        friend = self._get(friend_id)
        require_owner_or_admin(identity, friend)
        if not self.db.delete_friend(friend_id):
            raise NotFound(f"Friend {friend_id} not found")
        logger.info("User %s deleted friend %s", identity.user_id, friend_id)
