"""Shared repository helpers, store protocols, and error hierarchy.

Updates:
  v0.4.0 - 2026-10-19 - Add staged deletes to the transaction protocol.
  v0.3.0 - 2026-09-20 - Add activity log operations to the store protocol.
  v0.2.0 - 2026-09-15 - Define the abstract prompt store and transaction protocols.
  v0.1.0 - 2026-09-04 - Extract logger, helpers, and exceptions.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol, cast

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence
    from contextlib import AbstractContextManager
    from datetime import datetime
    from pathlib import Path

    from models.prompt_model import ActivityEvent, HistoryEntry, Prompt

logger = logging.getLogger("prompt_hive.repository")

_BUSY_TIMEOUT_SECONDS = 10.0


class RepositoryError(Exception):
    """Base exception for repository failures."""


class RepositoryNotFoundError(RepositoryError):
    """Raised when a requested record cannot be located."""


class RepositoryConflictError(RepositoryError):
    """Raised when a write would overwrite an immutable record."""


class PromptStoreTransaction(Protocol):
    """Reads and writes applied together when the transaction commits."""

    def get(self, prompt_id: uuid.UUID) -> Prompt | None:
        """Return the prompt as seen inside the transaction."""
        ...

    def put(self, prompt: Prompt) -> None:
        """Stage an insert-or-replace of *prompt*."""
        ...

    def delete(self, prompt_id: uuid.UUID) -> None:
        """Stage removal of a prompt; raises RepositoryNotFoundError when absent."""
        ...

    def delete_history(self, prompt_id: uuid.UUID) -> int:
        """Stage removal of every archived version; return how many exist."""
        ...

    def put_history(self, entry: HistoryEntry) -> None:
        """Stage a history entry; raises RepositoryConflictError when archived."""
        ...

    def get_history(self, prompt_id: uuid.UUID, version: int) -> HistoryEntry | None:
        """Return the archived entry for ``(prompt_id, version)`` if present."""
        ...


class PromptStore(Protocol):
    """Transactional key-value persistence the save coordinator writes through."""

    def get(self, prompt_id: uuid.UUID) -> Prompt | None:
        """Return the prompt stored under *prompt_id*, if any."""
        ...

    def put(self, prompt: Prompt) -> None:
        """Atomically insert or replace *prompt* keyed by its id."""
        ...

    def delete(self, prompt_id: uuid.UUID) -> None:
        """Remove a prompt; raises RepositoryNotFoundError when absent."""
        ...

    def list(self) -> list[Prompt]:
        """Return every stored prompt, most recently updated first."""
        ...

    def put_history(self, entry: HistoryEntry) -> None:
        """Persist a history entry; raises RepositoryConflictError when archived."""
        ...

    def get_history(self, prompt_id: uuid.UUID, version: int) -> HistoryEntry | None:
        """Return the archived entry for ``(prompt_id, version)`` if present."""
        ...

    def list_history(self, prompt_id: uuid.UUID) -> list[HistoryEntry]:
        """Return history entries for *prompt_id*, newest version first."""
        ...

    def delete_history(self, prompt_id: uuid.UUID) -> int:
        """Remove every history entry of *prompt_id*; return the count removed."""
        ...

    def transaction(self) -> AbstractContextManager[PromptStoreTransaction]:
        """Return a context manager grouping writes into one atomic unit."""
        ...

    def record_activity(self, event: ActivityEvent) -> None:
        """Append an entry to the activity log."""
        ...

    def list_activity(self, since: datetime | None = None) -> list[ActivityEvent]:
        """Return activity log entries, oldest first, optionally bounded by *since*."""
        ...


def ensure_directory(path: Path) -> None:
    """Ensure the directory for the SQLite database exists."""
    path.parent.mkdir(parents=True, exist_ok=True)


def connect(db_path: Path) -> sqlite3.Connection:
    """Return a configured SQLite connection."""
    conn = sqlite3.connect(str(db_path), timeout=_BUSY_TIMEOUT_SECONDS)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("PRAGMA journal_mode = WAL;")
    conn.execute("PRAGMA synchronous = NORMAL;")
    return conn


@contextmanager
def session(db_path: Path, *, immediate: bool = False) -> Iterator[sqlite3.Connection]:
    """Yield a connection whose work is committed on success and rolled back on error.

    ``immediate`` takes the database write lock up front so that a
    read-modify-write sequence cannot interleave with another writer.
    """
    conn = connect(db_path)
    try:
        if immediate:
            conn.execute("BEGIN IMMEDIATE;")
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def stringify_uuid(value: uuid.UUID | str) -> str:
    """Return a canonical UUID string for storage."""
    if isinstance(value, uuid.UUID):
        return str(value)
    return str(uuid.UUID(str(value)))


def json_dumps(value: Any | None) -> str | None:
    """Serialize arbitrary values to JSON strings (or None)."""
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def json_loads_list(value: str | None) -> list[str]:
    """Deserialize JSON-encoded lists stored in SQLite into Python lists."""
    if value is None:
        return []
    if value in ("", "null"):
        return []
    try:
        parsed: object = json.loads(value)
    except json.JSONDecodeError:
        return [str(value)]  # degraded fallback
    if isinstance(parsed, list):
        entries = cast("Sequence[object]", parsed)
        return [str(item) for item in entries]
    return [str(parsed)]


def json_loads_dict(value: str | None) -> dict[str, Any]:
    """Deserialize JSON strings into dictionaries."""
    if value is None or value in ("", "null"):
        return {}
    try:
        parsed_obj: object = json.loads(value)
    except json.JSONDecodeError:
        return {}
    if isinstance(parsed_obj, dict):
        parsed_map = cast("Mapping[str, Any]", parsed_obj)
        return {str(key): parsed_map[key] for key in parsed_map}
    return {}


__all__ = [
    "PromptStore",
    "PromptStoreTransaction",
    "RepositoryConflictError",
    "RepositoryError",
    "RepositoryNotFoundError",
    "connect",
    "ensure_directory",
    "json_dumps",
    "json_loads_dict",
    "json_loads_list",
    "logger",
    "session",
    "stringify_uuid",
]
