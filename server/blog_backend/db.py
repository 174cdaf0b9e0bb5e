"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Protocol

from sqlalchemy import (
    JSON,
    Column,
    Float,
    Integer,
    String,
    create_engine,
    delete,
    select,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from blog_backend.errors import StorageError

logger = logging.getLogger(__name__)

ADMIN_PERMISSION = 1


class DbClient(Protocol):
    """Interface for database access."""

    def load_config(self, namespace: str) -> dict:
        ...

    def save_config(self, namespace: str, values: dict) -> None:
        ...

    def get_user(self, user_id: int) -> Optional["UserRecord"]:
        ...

    def create_user(
        self,
        username: str,
        openid: str,
        avatar: str = "",
        permission: int = 0,
        user_id: int | None = None,
    ) -> "UserRecord":
        ...

    def list_friends(self, *, accepted_only: bool = False) -> list["FriendRecord"]:
        ...

    def list_friends_by_owner(self, uid: int) -> list["FriendRecord"]:
        ...

    def get_friend(self, friend_id: int) -> Optional["FriendRecord"]:
        ...

    def create_friend(
        self,
        *,
        name: str,
        desc: str,
        avatar: str,
        url: str,
        uid: int,
        accepted: bool = False,
        sort_order: int = 0,
    ) -> "FriendRecord":
        ...

    def update_friend(self, friend_id: int, changes: dict) -> Optional["FriendRecord"]:
        ...

    def delete_friend(self, friend_id: int) -> bool:
        ...


@dataclass
class UserRecord:
    id: int
    username: str
    openid: str
    avatar: str = ""
    permission: int = 0
    created_at: float = field(default_factory=lambda: time.time())

    @property
    def is_admin(self) -> bool:
        return self.permission == ADMIN_PERMISSION


@dataclass
class FriendRecord:
    id: int
    name: str
    desc: str
    avatar: str
    url: str
    uid: int
    accepted: bool = False
    sort_order: int = 0
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    @property
    def owner_user_id(self) -> int:
        return self.uid

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "desc": self.desc,
            "avatar": self.avatar,
            "url": self.url,
            "uid": self.uid,
            "accepted": 1 if self.accepted else 0,
            "sort_order": self.sort_order,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


FRIEND_MUTABLE_FIELDS = ("name", "desc", "avatar", "url", "accepted", "sort_order")


def _friend_sort_key(friend: FriendRecord) -> tuple[int, int]:
    return (friend.sort_order, friend.id)


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.configs: Dict[str, Dict[str, Any]] = {}
        self.users: Dict[int, UserRecord] = {}
        self.friends: Dict[int, FriendRecord] = {}
        self._next_friend_id = 1
        self._next_user_id = 1
        self._lock = threading.Lock()

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.configs.clear()
            self.users.clear()
            self.friends.clear()
            self._next_friend_id = 1
            self._next_user_id = 1

    def load_config(self, namespace: str) -> dict:
        with self._lock:
            return dict(self.configs.get(namespace, {}))

    def save_config(self, namespace: str, values: dict) -> None:
        # The whole batch lands under one lock acquisition.
        with self._lock:
            self.configs.setdefault(namespace, {}).update(values)

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def create_user(
        self,
        username: str,
        openid: str,
        avatar: str = "",
        permission: int = 0,
        user_id: int | None = None,
    ) -> UserRecord:
        with self._lock:
            if user_id is None:
                user_id = self._next_user_id
            self._next_user_id = max(self._next_user_id, user_id + 1)
            record = UserRecord(
                id=user_id,
                username=username,
                openid=openid,
                avatar=avatar,
                permission=permission,
            )
            self.users[user_id] = record
            return record

    def list_friends(self, *, accepted_only: bool = False) -> list[FriendRecord]:
        friends = [
            f for f in self.friends.values() if f.accepted or not accepted_only
        ]
        return sorted(friends, key=_friend_sort_key)

    def list_friends_by_owner(self, uid: int) -> list[FriendRecord]:
        friends = [f for f in self.friends.values() if f.uid == uid]
        return sorted(friends, key=_friend_sort_key)

    def get_friend(self, friend_id: int) -> Optional[FriendRecord]:
        return self.friends.get(friend_id)

    def create_friend(
        self,
        *,
        name: str,
        desc: str,
        avatar: str,
        url: str,
        uid: int,
        accepted: bool = False,
        sort_order: int = 0,
    ) -> FriendRecord:
        with self._lock:
            record = FriendRecord(
                id=self._next_friend_id,
                name=name,
                desc=desc,
                avatar=avatar,
                url=url,
                uid=uid,
                accepted=accepted,
                sort_order=sort_order,
            )
            self.friends[record.id] = record
            self._next_friend_id += 1
            return record

    def update_friend(self, friend_id: int, changes: dict) -> Optional[FriendRecord]:
        with self._lock:
            friend = self.friends.get(friend_id)
            if not friend:
                return None
            for name, value in changes.items():
                if name in FRIEND_MUTABLE_FIELDS:
                    setattr(friend, name, value)
            friend.updated_at = time.time()
            return friend

    def delete_friend(self, friend_id: int) -> bool:
        with self._lock:
            return self.friends.pop(friend_id, None) is not None


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        engine_kwargs: dict[str, Any] = {"future": True, "pool_pre_ping": True}
        if database_url.startswith("sqlite") and ":memory:" in database_url:
            # One shared connection, otherwise every session sees an empty DB.
            from sqlalchemy.pool import StaticPool

            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs["pool_recycle"] = 1800
        self.engine = create_engine(database_url, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        try:
            with self.Session() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Database operation %s failed: %s", operation, type(exc).__name__)
            raise StorageError(f"Database operation {operation} failed") from exc

    def _to_user_record(self, row: "UserRow") -> UserRecord:
        return UserRecord(
            id=row.id,
            username=row.username,
            openid=row.openid,
            avatar=row.avatar or "",
            permission=row.permission,
            created_at=row.created_at,
        )

    def _to_friend_record(self, row: "FriendRow") -> FriendRecord:
        return FriendRecord(
            id=row.id,
            name=row.name,
            desc=row.desc,
            avatar=row.avatar,
            url=row.url,
            uid=row.uid,
            accepted=bool(row.accepted),
            sort_order=row.sort_order,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def load_config(self, namespace: str) -> dict:
        with self._session("load_config") as session:
            rows = session.execute(
                select(ConfigRow).where(ConfigRow.namespace == namespace)
            ).scalars()
            return {row.key: row.value for row in rows}

    def save_config(self, namespace: str, values: dict) -> None:
        # Single transaction: either every key of the batch commits or none.
        with self._session("save_config") as session:
            for key, value in values.items():
                row = session.get(ConfigRow, (namespace, key))
                if row:
                    row.value = value
                    row.updated_at = time.time()
                else:
                    session.add(
                        ConfigRow(
                            namespace=namespace,
                            key=key,
                            value=value,
                            updated_at=time.time(),
                        )
                    )
            session.commit()

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._session("get_user") as session:
            row = session.get(UserRow, user_id)
            return self._to_user_record(row) if row else None

    def create_user(
        self,
        username: str,
        openid: str,
        avatar: str = "",
        permission: int = 0,
        user_id: int | None = None,
    ) -> UserRecord:
        with self._session("create_user") as session:
            row = UserRow(
                id=user_id,
                username=username,
                openid=openid,
                avatar=avatar,
                permission=permission,
                created_at=time.time(),
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_user_record(row)

    def list_friends(self, *, accepted_only: bool = False) -> list[FriendRecord]:
        with self._session("list_friends") as session:
            stmt = select(FriendRow).order_by(
                FriendRow.sort_order.asc(), FriendRow.id.asc()
            )
            if accepted_only:
                stmt = stmt.where(FriendRow.accepted == 1)
            return [self._to_friend_record(row) for row in session.execute(stmt).scalars()]

    def list_friends_by_owner(self, uid: int) -> list[FriendRecord]:
        with self._session("list_friends_by_owner") as session:
            stmt = (
                select(FriendRow)
                .where(FriendRow.uid == uid)
                .order_by(FriendRow.sort_order.asc(), FriendRow.id.asc())
            )
            return [self._to_friend_record(row) for row in session.execute(stmt).scalars()]

    def get_friend(self, friend_id: int) -> Optional[FriendRecord]:
        with self._session("get_friend") as session:
            row = session.get(FriendRow, friend_id)
            return self._to_friend_record(row) if row else None

    def create_friend(
        self,
        *,
        name: str,
        desc: str,
        avatar: str,
        url: str,
        uid: int,
        accepted: bool = False,
        sort_order: int = 0,
    ) -> FriendRecord:
        now = time.time()
        with self._session("create_friend") as session:
            row = FriendRow(
                name=name,
                desc=desc,
                avatar=avatar,
                url=url,
                uid=uid,
                accepted=1 if accepted else 0,
                sort_order=sort_order,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_friend_record(row)

    def update_friend(self, friend_id: int, changes: dict) -> Optional[FriendRecord]:
        with self._session("update_friend") as session:
            row = session.get(FriendRow, friend_id)
            if not row:
                return None
            for name, value in changes.items():
                if name not in FRIEND_MUTABLE_FIELDS:
                    continue
                if name == "accepted":
                    value = 1 if value else 0
                setattr(row, name, value)
            row.updated_at = time.time()
            session.commit()
            session.refresh(row)
            return self._to_friend_record(row)

    def delete_friend(self, friend_id: int) -> bool:
        with self._session("delete_friend") as session:
            result = session.execute(delete(FriendRow).where(FriendRow.id == friend_id))
            session.commit()
            return (result.rowcount or 0) > 0


Base = declarative_base()


class ConfigRow(Base):
    __tablename__ = "configs"

    namespace = Column(String, primary_key=True)
    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(Float, nullable=False)


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False)
    openid = Column(String, nullable=False, unique=True)
    avatar = Column(String, nullable=True)
    permission = Column(Integer, nullable=False, default=0)
    created_at = Column(Float, nullable=False)


class FriendRow(Base):
    __tablename__ = "friends"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    desc = Column("desc", String, nullable=False)
    avatar = Column(String, nullable=False)
    url = Column(String, nullable=False)
    uid = Column(Integer, nullable=False, index=True)
    accepted = Column(Integer, nullable=False, default=0)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)
