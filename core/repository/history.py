"""Prompt history ledger persistence for the SQLite repository.

Updates:
  v0.1.0 - 2026-09-15 - Add append-only history table helpers.
"""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any

from models.prompt_model import HistoryEntry

from .base import (
    RepositoryConflictError,
    RepositoryError,
    json_dumps as _json_dumps,
    json_loads_list as _json_loads_list,
    session as _session,
    stringify_uuid as _stringify_uuid,
)

if TYPE_CHECKING:
    import uuid
    from pathlib import Path


class HistoryStoreMixin:
    """Insert-only access to archived prompt versions."""

    _db_path: Path

    def put_history(self, entry: HistoryEntry) -> None:
        """Persist a history entry, refusing to overwrite an archived version."""
        try:
            with _session(self._db_path) as conn:
                self._insert_history(conn, entry)
        except RepositoryConflictError:
            raise
        except sqlite3.Error as exc:
            raise RepositoryError(
                f"Failed to archive version {entry.version} of prompt {entry.prompt_id}"
            ) from exc

    def get_history(self, prompt_id: uuid.UUID, version: int) -> HistoryEntry | None:
        """Return the archived entry for ``(prompt_id, version)`` if present."""
        try:
            with _session(self._db_path) as conn:
                return self._select_history(conn, prompt_id, version)
        except sqlite3.Error as exc:
            raise RepositoryError(
                f"Failed to load version {version} of prompt {prompt_id}"
            ) from exc

    def list_history(self, prompt_id: uuid.UUID) -> list[HistoryEntry]:
        """Return history entries for a prompt ordered by newest version first."""
        try:
            with _session(self._db_path) as conn:
                rows = conn.execute(
                    "SELECT * FROM prompt_history WHERE prompt_id = ? "
                    "ORDER BY version DESC, created_at DESC;",
                    (_stringify_uuid(prompt_id),),
                ).fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError(f"Failed to load history for prompt {prompt_id}") from exc
        return [self._row_to_history(row) for row in rows]

    def delete_history(self, prompt_id: uuid.UUID) -> int:
        """Remove every archived version of a prompt."""
        try:
            with _session(self._db_path) as conn:
                return self._delete_history_rows(conn, prompt_id)
        except sqlite3.Error as exc:
            raise RepositoryError(f"Failed to delete history for prompt {prompt_id}") from exc

    # Connection-level helpers ------------------------------------------- #

    def _delete_history_rows(self, conn: sqlite3.Connection, prompt_id: uuid.UUID) -> int:
        cursor = conn.execute(
            "DELETE FROM prompt_history WHERE prompt_id = ?;",
            (_stringify_uuid(prompt_id),),
        )
        return int(cursor.rowcount)

    def _insert_history(self, conn: sqlite3.Connection, entry: HistoryEntry) -> None:
        try:
            conn.execute(
                """
                INSERT INTO prompt_history (
                    history_id,
                    prompt_id,
                    version,
                    title,
                    text,
                    tags,
                    created_at,
                    original_date,
                    original_uses
                ) VALUES (
                    :history_id,
                    :prompt_id,
                    :version,
                    :title,
                    :text,
                    :tags,
                    :created_at,
                    :original_date,
                    :original_uses
                );
                """,
                self._history_to_row(entry),
            )
        except sqlite3.IntegrityError as exc:
            raise RepositoryConflictError(
                f"Version {entry.version} of prompt {entry.prompt_id} is already archived"
            ) from exc

    def _select_history(
        self,
        conn: sqlite3.Connection,
        prompt_id: uuid.UUID,
        version: int,
    ) -> HistoryEntry | None:
        row = conn.execute(
            "SELECT * FROM prompt_history WHERE prompt_id = ? AND version = ? "
            "ORDER BY created_at DESC LIMIT 1;",
            (_stringify_uuid(prompt_id), int(version)),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_history(row)

    def _history_to_row(self, entry: HistoryEntry) -> dict[str, Any]:
        return {
            "history_id": entry.history_id,
            "prompt_id": _stringify_uuid(entry.prompt_id),
            "version": entry.version,
            "title": entry.title,
            "text": entry.text,
            "tags": _json_dumps(list(entry.tags)),
            "created_at": entry.created_at.isoformat(),
            "original_date": entry.original_date,
            "original_uses": entry.original_uses,
        }

    def _row_to_history(self, row: sqlite3.Row) -> HistoryEntry:
        return HistoryEntry.from_record(
            {
                "history_id": row["history_id"],
                "prompt_id": row["prompt_id"],
                "version": row["version"],
                "title": row["title"],
                "text": row["text"],
                "tags": _json_loads_list(row["tags"]),
                "created_at": row["created_at"],
                "original_date": row["original_date"],
                "original_uses": row["original_uses"],
            }
        )


__all__ = ["HistoryStoreMixin"]
