"""
auth/store.py -- Persistence layer for user records.

Pattern: Repository + Data Mapper. UserStore is the interface the service
layer sees; SqlUserStore (SQLAlchemy Core) and InMemoryUserStore are the two
implementations. _row_to_user is the mapper. Service and route code never
touches SQL directly.

Which implementation runs is decided once at process start by
open_user_store(Settings.database_url). There is no module-level store.

Uniqueness:
  username and email are UNIQUE in SQL. Two concurrent registrations for the
  same name race on the index: one INSERT wins, the other gets IntegrityError,
  which is translated to ConflictError. No application-level locking.
  SQLite treats NULLs as distinct in UNIQUE constraints, so any number of
  users may omit an email.

  InMemoryUserStore performs its check-and-insert under a lock, which gives
  the same exactly-one-winner guarantee.

Errors:
  IntegrityError -> ConflictError. Any other SQLAlchemyError ->
  TransientStoreError. Callers never see driver exceptions.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or client/.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.models import User
from core.errors import ConflictError, TransientStoreError

logger = logging.getLogger("saltgate.store")

MEMORY_URL = "memory://"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), unique=True),  # NULL when not supplied
    Column("password_hash", Text, nullable=False),  # client hash, stored verbatim
    Column("salt", String(64), nullable=False),
    Column("is_active", Integer, nullable=False, server_default="1"),
    Column("created_at", String(32), nullable=False),
    Column("last_login", Text),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block on a writer.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _conflict_for(existing_username: bool) -> ConflictError:
    if existing_username:
        return ConflictError("Username already exists")
    return ConflictError("Email already registered")


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class UserStore(ABC):
    """Capabilities the auth service needs from storage."""

    @abstractmethod
    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned ID.

        Raises ConflictError if the username (or a non-null email) is taken.
        """

    @abstractmethod
    def get_by_username(self, username: str) -> User | None:
        """Exact, case-sensitive lookup. None if not found."""

    @abstractmethod
    def get_by_id(self, user_id: int) -> User | None: ...

    @abstractmethod
    def update_last_login(self, user_id: int) -> None: ...

    @abstractmethod
    def count_users(self) -> int: ...

    def ping(self) -> bool:
        """Return True if the backing storage answers a trivial query."""
        return True

    def close(self) -> None:
        """Release pooled resources. Safe to call more than once."""


# ---------------------------------------------------------------------------
# SQL repository
# ---------------------------------------------------------------------------


class SqlUserStore(UserStore):
    """SQLAlchemy Core repository for User records.

    Usage:
        store = SqlUserStore("sqlite:///auth.db")
        uid = store.create_user(User(username="alice", password_hash=h1, salt=derive_salt("alice")))
        user = store.get_by_username("alice")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite") and ":memory:" not in db_url and "mode=memory" not in db_url:
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def create_user(self, user: User) -> int:
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        username=user.username,
                        email=user.email,
                        password_hash=user.password_hash,
                        salt=user.salt,
                        is_active=1 if user.is_active else 0,
                        created_at=_now_iso(),
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise _conflict_for(self.get_by_username(user.username) is not None) from exc
        except SQLAlchemyError as exc:
            logger.error("User insert failed: %s", exc)
            raise TransientStoreError() from exc

    def get_by_username(self, username: str) -> User | None:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        except SQLAlchemyError as exc:
            logger.error("User lookup failed: %s", exc)
            raise TransientStoreError() from exc
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        except SQLAlchemyError as exc:
            logger.error("User lookup failed: %s", exc)
            raise TransientStoreError() from exc
        return _row_to_user(row) if row is not None else None

    def update_last_login(self, user_id: int) -> None:
        """Stamp the current UTC timestamp as last_login for the given user."""
        try:
            with self.engine.connect() as conn:
                conn.execute(_users.update().where(_users.c.id == user_id).values(last_login=_now_iso()))
                conn.commit()
        except SQLAlchemyError as exc:
            raise TransientStoreError() from exc

    def count_users(self) -> int:
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text("SELECT COUNT(*) FROM users")).scalar()
        except SQLAlchemyError as exc:
            raise TransientStoreError() from exc
        return result or 0

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# In-memory repository
# ---------------------------------------------------------------------------


class InMemoryUserStore(UserStore):
    """Dict-backed store for tests and throwaway dev servers.

    Records are copied on the way in and out so callers cannot mutate stored
    state through a returned object.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[int, User] = {}
        self._ids_by_username: dict[str, int] = {}
        self._next_id = 1

    def create_user(self, user: User) -> int:
        with self._lock:
            if user.username in self._ids_by_username:
                raise _conflict_for(True)
            if user.email is not None and any(u.email == user.email for u in self._by_id.values()):
                raise _conflict_for(False)
            user_id = self._next_id
            self._next_id += 1
            self._by_id[user_id] = replace(user, id=user_id, created_at=_now_iso())
            self._ids_by_username[user.username] = user_id
        return user_id

    def get_by_username(self, username: str) -> User | None:
        with self._lock:
            user_id = self._ids_by_username.get(username)
            return replace(self._by_id[user_id]) if user_id is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        with self._lock:
            user = self._by_id.get(user_id)
            return replace(user) if user is not None else None

    def update_last_login(self, user_id: int) -> None:
        with self._lock:
            user = self._by_id.get(user_id)
            if user is not None:
                user.last_login = _now_iso()

    def count_users(self) -> int:
        with self._lock:
            return len(self._by_id)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def open_user_store(db_url: str) -> UserStore:
    """Build the store selected by a connection descriptor.

    "memory://" gives an InMemoryUserStore; anything else is handed to
    SQLAlchemy's create_engine().
    """
    if db_url == MEMORY_URL:
        logger.info("Using in-memory user store")
        return InMemoryUserStore()
    return SqlUserStore(db_url)


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        salt=row.salt,
        is_active=bool(row.is_active),
        created_at=row.created_at,
        last_login=row.last_login,
    )
