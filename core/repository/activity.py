"""Activity log persistence for the SQLite repository.

Updates:
  v0.1.0 - 2026-09-20 - Persist prompt activity events for usage statistics.
"""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any

from models.prompt_model import ActivityEvent

from .base import (
    RepositoryError,
    json_dumps as _json_dumps,
    json_loads_dict as _json_loads_dict,
    session as _session,
    stringify_uuid as _stringify_uuid,
)

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path


class ActivityStoreMixin:
    """Append and query the prompt activity log."""

    _db_path: Path

    def record_activity(self, event: ActivityEvent) -> None:
        """Append an activity event."""
        payload = {
            "id": _stringify_uuid(event.id),
            "action": event.action,
            "prompt_id": (
                _stringify_uuid(event.prompt_id) if event.prompt_id is not None else None
            ),
            "metadata": _json_dumps(dict(event.metadata)),
            "timestamp": event.timestamp.isoformat(),
        }
        try:
            with _session(self._db_path) as conn:
                conn.execute(
                    "INSERT INTO activity (id, action, prompt_id, metadata, timestamp) "
                    "VALUES (:id, :action, :prompt_id, :metadata, :timestamp);",
                    payload,
                )
        except sqlite3.Error as exc:
            raise RepositoryError(f"Failed to record activity {event.action}") from exc

    def list_activity(self, since: datetime | None = None) -> list[ActivityEvent]:
        """Return activity events oldest first, optionally from *since* onwards."""
        query = "SELECT * FROM activity"
        params: list[Any] = []
        if since is not None:
            query += " WHERE timestamp >= ?"
            params.append(since.isoformat())
        query += " ORDER BY timestamp ASC;"
        try:
            with _session(self._db_path) as conn:
                rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError("Failed to load activity log") from exc
        return [
            ActivityEvent.from_record(
                {
                    "id": row["id"],
                    "action": row["action"],
                    "prompt_id": row["prompt_id"],
                    "metadata": _json_loads_dict(row["metadata"]),
                    "timestamp": row["timestamp"],
                }
            )
            for row in rows
        ]


__all__ = ["ActivityStoreMixin"]
