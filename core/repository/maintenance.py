"""Schema bootstrap helpers for the repository.

Updates:
  v0.2.0 - 2026-09-20 - Add activity log table.
  v0.1.1 - 2026-09-15 - Enforce one archived row per prompt version.
  v0.1.0 - 2026-09-04 - Extract schema management.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import logger

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    import sqlite3
    from pathlib import Path


class RepositoryMaintenanceMixin:
    """Tasks that create and migrate repository storage."""

    _db_path: Path

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        """Create required tables if they do not exist."""
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS prompts (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                text TEXT NOT NULL,
                tags TEXT,
                category TEXT NOT NULL,
                uses INTEGER NOT NULL DEFAULT 0,
                version INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                date TEXT,
                source TEXT
            );
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_prompts_category ON prompts(category);")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_prompts_updated_at ON prompts(updated_at);")
        # No foreign key: history rows outlive their prompt.
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS prompt_history (
                history_id TEXT PRIMARY KEY,
                prompt_id TEXT NOT NULL,
                version INTEGER NOT NULL,
                title TEXT NOT NULL,
                text TEXT NOT NULL,
                tags TEXT,
                created_at TEXT NOT NULL,
                original_date TEXT,
                original_uses INTEGER NOT NULL DEFAULT 0,
                UNIQUE(prompt_id, version)
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_prompt_history_prompt_id "
            "ON prompt_history(prompt_id);"
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS activity (
                id TEXT PRIMARY KEY,
                action TEXT NOT NULL,
                prompt_id TEXT,
                metadata TEXT,
                timestamp TEXT NOT NULL
            );
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_activity_timestamp ON activity(timestamp);")
        logger.debug("Repository schema ensured", extra={"db_path": str(self._db_path)})


__all__ = ["RepositoryMaintenanceMixin"]
