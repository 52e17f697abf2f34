"""Prompt record persistence helpers for the SQLite repository.

Updates:
  v0.2.0 - 2026-09-15 - Switch writes to insert-or-replace keyed by prompt id.
  v0.1.0 - 2026-09-04 - Extract prompt CRUD helpers into mixin.
"""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any, ClassVar

from models.prompt_model import Prompt

from .base import (
    RepositoryError,
    RepositoryNotFoundError,
    json_dumps as _json_dumps,
    json_loads_list as _json_loads_list,
    session as _session,
    stringify_uuid as _stringify_uuid,
)

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence
    from pathlib import Path


class PromptRecordMixin:
    """Prompt get/put/delete/list persistence helpers."""

    _db_path: Path

    _COLUMNS: ClassVar[Sequence[str]] = (
        "id",
        "title",
        "text",
        "tags",
        "category",
        "uses",
        "version",
        "created_at",
        "updated_at",
        "date",
        "source",
    )

    # Prompt CRUD -------------------------------------------------------- #

    def get(self, prompt_id: uuid.UUID) -> Prompt | None:
        """Fetch a prompt by UUID, returning ``None`` when it does not exist."""
        try:
            with _session(self._db_path) as conn:
                return self._select_prompt(conn, prompt_id)
        except sqlite3.Error as exc:
            raise RepositoryError(f"Failed to load prompt {prompt_id}") from exc

    def put(self, prompt: Prompt) -> None:
        """Insert or replace a prompt record."""
        try:
            with _session(self._db_path) as conn:
                self._upsert_prompt(conn, prompt)
        except sqlite3.Error as exc:
            raise RepositoryError(f"Failed to persist prompt {prompt.id}") from exc

    def delete(self, prompt_id: uuid.UUID) -> None:
        """Delete a prompt by UUID."""
        try:
            with _session(self._db_path) as conn:
                self._delete_prompt(conn, prompt_id)
        except RepositoryNotFoundError:
            raise
        except sqlite3.Error as exc:
            raise RepositoryError(f"Failed to delete prompt {prompt_id}") from exc

    def list(self) -> list[Prompt]:
        """Return prompts ordered by most recently updated."""
        try:
            with _session(self._db_path) as conn:
                rows = conn.execute(
                    "SELECT * FROM prompts ORDER BY updated_at DESC, created_at DESC;"
                ).fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError("Failed to fetch prompt list") from exc
        return [self._row_to_prompt(row) for row in rows]

    # Connection-level helpers ------------------------------------------- #

    def _select_prompt(self, conn: sqlite3.Connection, prompt_id: uuid.UUID) -> Prompt | None:
        row = conn.execute(
            "SELECT * FROM prompts WHERE id = ?;",
            (_stringify_uuid(prompt_id),),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_prompt(row)

    def _delete_prompt(self, conn: sqlite3.Connection, prompt_id: uuid.UUID) -> None:
        cursor = conn.execute(
            "DELETE FROM prompts WHERE id = ?;",
            (_stringify_uuid(prompt_id),),
        )
        if cursor.rowcount == 0:
            raise RepositoryNotFoundError(f"Prompt {prompt_id} not found")

    def _upsert_prompt(self, conn: sqlite3.Connection, prompt: Prompt) -> None:
        payload = self._prompt_to_row(prompt)
        placeholders = ", ".join(f":{column}" for column in self._COLUMNS)
        assignments = ", ".join(
            f"{column} = excluded.{column}" for column in self._COLUMNS if column != "id"
        )
        conn.execute(
            f"INSERT INTO prompts ({', '.join(self._COLUMNS)}) VALUES ({placeholders}) "
            f"ON CONFLICT(id) DO UPDATE SET {assignments};",
            payload,
        )

    # Serialization helpers --------------------------------------------- #

    def _prompt_to_row(self, prompt: Prompt) -> dict[str, Any]:
        """Serialise Prompt into SQLite mapping."""
        return {
            "id": _stringify_uuid(prompt.id),
            "title": prompt.title,
            "text": prompt.text,
            "tags": _json_dumps(prompt.tags),
            "category": prompt.category.value,
            "uses": prompt.uses,
            "version": prompt.version,
            "created_at": prompt.created_at.isoformat(),
            "updated_at": prompt.updated_at.isoformat(),
            "date": prompt.date,
            "source": prompt.source,
        }

    def _row_to_prompt(self, row: sqlite3.Row) -> Prompt:
        """Hydrate Prompt from SQLite row."""
        payload: dict[str, Any] = {
            "id": row["id"],
            "title": row["title"],
            "text": row["text"],
            "tags": _json_loads_list(row["tags"]),
            "category": row["category"],
            "uses": row["uses"],
            "version": row["version"],
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
            "date": row["date"],
            "source": row["source"],
        }
        return Prompt.from_record(payload)


__all__ = ["PromptRecordMixin"]
