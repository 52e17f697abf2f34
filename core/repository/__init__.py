"""SQLite-backed repository for persistent prompt storage.

Updates:
  v0.3.0 - 2026-09-20 - Add activity log mixin.
  v0.2.0 - 2026-09-15 - Group prompt and history writes in immediate transactions.
  v0.1.0 - 2026-09-04 - Compose repository from prompt, history, and maintenance mixins.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from .activity import ActivityStoreMixin
from .base import (
    PromptStore,
    PromptStoreTransaction,
    RepositoryConflictError,
    RepositoryError,
    RepositoryNotFoundError,
    ensure_directory as _ensure_directory,
    session as _session,
)
from .history import HistoryStoreMixin
from .maintenance import RepositoryMaintenanceMixin
from .memory import InMemoryPromptStore
from .prompts import PromptRecordMixin

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterator

    from models.prompt_model import HistoryEntry, Prompt


class _SQLiteTransaction:
    """Route transactional reads and writes through one open connection."""

    def __init__(self, repository: PromptRepository, conn: sqlite3.Connection) -> None:
        self._repository = repository
        self._conn = conn

    def get(self, prompt_id: uuid.UUID) -> Prompt | None:
        return self._repository._select_prompt(self._conn, prompt_id)

    def put(self, prompt: Prompt) -> None:
        self._repository._upsert_prompt(self._conn, prompt)

    def delete(self, prompt_id: uuid.UUID) -> None:
        self._repository._delete_prompt(self._conn, prompt_id)

    def delete_history(self, prompt_id: uuid.UUID) -> int:
        return self._repository._delete_history_rows(self._conn, prompt_id)

    def get_history(self, prompt_id: uuid.UUID, version: int) -> HistoryEntry | None:
        return self._repository._select_history(self._conn, prompt_id, version)

    def put_history(self, entry: HistoryEntry) -> None:
        self._repository._insert_history(self._conn, entry)


class PromptRepository(
    RepositoryMaintenanceMixin,
    PromptRecordMixin,
    HistoryStoreMixin,
    ActivityStoreMixin,
):
    """Compose repository mixins for SQLite-backed storage."""

    def __init__(self, db_path: str | Path) -> None:
        """Initialise repository storage and ensure the schema exists."""
        self._db_path = Path(db_path)
        _ensure_directory(self._db_path)
        try:
            with _session(self._db_path) as conn:
                self._ensure_schema(conn)
        except sqlite3.Error as exc:  # pragma: no cover - filesystem failure is env-specific
            raise RepositoryError("Failed to initialise SQLite schema") from exc

    @property
    def db_path(self) -> Path:
        """Return the SQLite database location."""
        return self._db_path

    @contextmanager
    def transaction(self) -> Iterator[_SQLiteTransaction]:
        """Yield a transaction holding the database write lock until it commits.

        Any exception raised inside the block rolls back every staged write;
        SQLite failures surface as :class:`RepositoryError`.
        """
        try:
            with _session(self._db_path, immediate=True) as conn:
                yield _SQLiteTransaction(self, conn)
        except RepositoryError:
            raise
        except sqlite3.Error as exc:
            raise RepositoryError("Prompt store transaction failed") from exc


__all__ = [
    "InMemoryPromptStore",
    "PromptRepository",
    "PromptStore",
    "PromptStoreTransaction",
    "RepositoryConflictError",
    "RepositoryError",
    "RepositoryNotFoundError",
]
