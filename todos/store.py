"""
todos/store.py -- SQLAlchemy-backed persistence layer for Todo items.

Uses SQLAlchemy Core (not ORM) so the dataclass in todos/models.py remains
the authoritative domain representation.

Pattern: Repository + Data Mapper. TodoStore is the repository; _row_to_todo
is the mapper. Route handlers never touch SQL directly.

owner_id is written once on insert. update() has no way to change it.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = TodoStore()
    todo = store.create(Todo(owner_id=1, title="Buy milk"))
    store.list_for_owner(1)
    store.update(todo.id, title="Buy oat milk")
    store.close()
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from auth.errors import StorageUnavailable
from auth.store import make_engine
from core.config import DEFAULT_DB_URL
from todos.models import Todo

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_todos = Table(
    "todos",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", Integer, nullable=False, index=True),
    Column("title", String(200), nullable=False),
    Column("content", Text, nullable=False, server_default=""),
    Column("completed", Boolean, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
)

# Fields a caller may change after creation. owner_id and created_at are not here.
_MUTABLE_FIELDS = frozenset({"title", "content", "completed"})


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def _storage_errors():
    """Surface connectivity failures as StorageUnavailable."""
    try:
        yield
    except OperationalError as exc:
        raise StorageUnavailable() from exc


class TodoStore:
    def __init__(self, db_url: str = DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        try:
            _metadata.create_all(self.engine)
        except OperationalError as exc:
            raise StorageUnavailable() from exc

    def create(self, todo: Todo) -> Todo:
        """Insert a new todo and return it with id and created_at filled in."""
        created_at = _now_iso()
        with _storage_errors(), self.engine.begin() as conn:
            result = conn.execute(
                _todos.insert().values(
                    owner_id=todo.owner_id,
                    title=todo.title,
                    content=todo.content,
                    completed=False,
                    created_at=created_at,
                )
            )
            todo_id = result.inserted_primary_key[0]
        return Todo(
            id=todo_id,
            owner_id=todo.owner_id,
            title=todo.title,
            content=todo.content,
            completed=False,
            created_at=created_at,
        )

    def get(self, todo_id: int) -> Optional[Todo]:
        """Return the todo with this id regardless of owner, or None."""
        with _storage_errors(), self.engine.connect() as conn:
            row = conn.execute(_todos.select().where(_todos.c.id == todo_id)).fetchone()
        return _row_to_todo(row) if row is not None else None

    def list_for_owner(self, owner_id: int) -> list[Todo]:
        """Return the owner's todos, oldest first."""
        with _storage_errors(), self.engine.connect() as conn:
            rows = conn.execute(
                _todos.select().where(_todos.c.owner_id == owner_id).order_by(_todos.c.id)
            ).fetchall()
        return [_row_to_todo(r) for r in rows]

    def update(self, todo_id: int, **fields) -> bool:
        """Update title, content and/or completed.

        Returns True if a row was updated, False if todo_id was not found.
        Unknown field names raise ValueError.
        """
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown todo fields: {sorted(unknown)!r}")
        if not fields:
            return self.get(todo_id) is not None
        with _storage_errors(), self.engine.begin() as conn:
            result = conn.execute(_todos.update().where(_todos.c.id == todo_id).values(**fields))
        return result.rowcount > 0

    def delete(self, todo_id: int) -> bool:
        """Permanently delete a todo. Returns True if deleted, False if not found."""
        with _storage_errors(), self.engine.begin() as conn:
            result = conn.execute(_todos.delete().where(_todos.c.id == todo_id))
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_todo(row) -> Todo:
    return Todo(
        id=row.id,
        owner_id=row.owner_id,
        title=row.title,
        content=row.content or "",
        completed=bool(row.completed),
        created_at=row.created_at,
    )
