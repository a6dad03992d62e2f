"""
auth/store.py -- SQLAlchemy Core persistence layer for user credentials.

Pattern: Repository + Data Mapper (same as todos/store.py).
CredentialStore is the repository; _row_to_record is the mapper.
Service and route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Username uniqueness is enforced by the UNIQUE constraint on users.username,
  not by a read-then-insert in Python. create() attempts the INSERT directly
  and translates IntegrityError into ConflictError, so two concurrent
  sign-ups for the same name cannot both succeed.

  Connectivity failures surface as StorageUnavailable. Nothing is retried
  here -- a retried INSERT could not tell "my first attempt landed" from
  "someone else took the name".

Layer rule: no imports from api/ or todos/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError

from auth.errors import ConflictError, StorageUnavailable
from auth.models import CredentialRecord, UserIdentity
from core.config import DEFAULT_DB_URL

logger = logging.getLogger("todovault.auth")

USERNAME_MAX_LENGTH = 30
NAME_MAX_LENGTH = 30

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(USERNAME_MAX_LENGTH), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("email", String(255), nullable=False),
    Column("name", String(NAME_MAX_LENGTH), nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and a busy timeout for concurrent writers.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def make_engine(db_url: str) -> Engine:
    """Create an Engine configured the same way for every store in the app."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CredentialStore:
    """Repository for CredentialRecord entities.

    Usage:
        store = CredentialStore()
        identity = store.create("alice", hasher.hash("password123"), "a@x.com", "Alice")
        record = store.find_by_username("alice")
        store.close()
    """

    def __init__(self, db_url: str = DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        try:
            _metadata.create_all(self.engine)
        except OperationalError as exc:
            raise StorageUnavailable() from exc

    def create(self, username: str, password_hash: str, email: str, name: str) -> UserIdentity:
        """Insert a new user and return its identity.

        created_at is always assigned here, at insert time.

        Raises:
            ConflictError:      username already taken (exact, case-sensitive).
            StorageUnavailable: the database could not be reached.
        """
        created_at = _now_iso()
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    _users.insert().values(
                        username=username,
                        password_hash=password_hash,
                        email=email,
                        name=name,
                        created_at=created_at,
                    )
                )
                user_id = result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise ConflictError() from exc
        except OperationalError as exc:
            logger.error("Credential store write failed: %s", exc.__class__.__name__)
            raise StorageUnavailable() from exc
        return UserIdentity(id=user_id, username=username, name=name, email=email, created_at=created_at)

    def find_by_username(self, username: str) -> CredentialRecord | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        return self._fetch_one(_users.select().where(_users.c.username == username))

    def find_by_id(self, user_id: int) -> CredentialRecord | None:
        """Look up a user by primary key. Returns None if not found."""
        return self._fetch_one(_users.select().where(_users.c.id == user_id))

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except OperationalError:
            logger.warning("Credential store ping failed")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()

    def _fetch_one(self, stmt) -> CredentialRecord | None:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).fetchone()
        except OperationalError as exc:
            logger.error("Credential store read failed: %s", exc.__class__.__name__)
            raise StorageUnavailable() from exc
        return _row_to_record(row) if row is not None else None


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_record(row) -> CredentialRecord:
    return CredentialRecord(
        identity=UserIdentity(
            id=row.id,
            username=row.username,
            name=row.name,
            email=row.email,
            created_at=row.created_at,
        ),
        password_hash=row.password_hash,
    )
