"""Append-only version history for prompts.

Updates:
  v0.2.0 - 2026-09-22 - Add gap audit for maintenance checks.
  v0.1.0 - 2026-09-12 - Introduce ledger archive/list helpers over the prompt store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from models.prompt_model import HistoryEntry

from .exceptions import (
    PromptHistoryConflictError,
    PromptStorageError,
    PromptVersionNotFoundError,
)
from .repository import RepositoryConflictError, RepositoryError

if TYPE_CHECKING:
    import uuid
    from datetime import datetime

    from models.prompt_model import Prompt

    from .repository import PromptStore, PromptStoreTransaction

logger = logging.getLogger("prompt_hive.version_ledger")


class VersionLedger:
    """Archive pre-mutation prompt snapshots and read them back.

    Entries are keyed by ``(prompt_id, version)`` and never rewritten, so for a
    prompt at version *n* the ledger holds versions ``1 .. n - 1``.
    """

    def __init__(self, store: PromptStore) -> None:
        self._store = store

    @staticmethod
    def next_version(current: Prompt) -> int:
        """Return the version number the next committed mutation receives."""
        return current.version + 1

    def archive(
        self,
        snapshot: Prompt,
        *,
        transaction: PromptStoreTransaction | None = None,
        created_at: datetime | None = None,
    ) -> HistoryEntry:
        """Write an immutable entry for *snapshot* at its current version.

        When *transaction* is given the entry is staged there so it commits
        together with the updated live record.
        """
        entry = HistoryEntry.from_prompt(snapshot, created_at=created_at)
        target = transaction if transaction is not None else self._store
        try:
            target.put_history(entry)
        except RepositoryConflictError as exc:
            logger.error(
                "Refusing to archive prompt version twice",
                extra={"prompt_id": str(snapshot.id), "version": snapshot.version},
            )
            raise PromptHistoryConflictError(snapshot.id, snapshot.version) from exc
        except RepositoryError as exc:
            raise PromptStorageError(
                f"Failed to archive version {snapshot.version} of prompt {snapshot.id}"
            ) from exc
        logger.debug(
            "Prompt version archived",
            extra={"prompt_id": str(snapshot.id), "version": snapshot.version},
        )
        return entry

    def list(self, prompt_id: uuid.UUID) -> list[HistoryEntry]:
        """Return archived entries for *prompt_id*, highest version first."""
        try:
            entries = self._store.list_history(prompt_id)
        except RepositoryError as exc:
            raise PromptStorageError(f"Unable to load history for prompt {prompt_id}") from exc
        return sorted(entries, key=lambda entry: (entry.version, entry.created_at), reverse=True)

    def get(
        self,
        prompt_id: uuid.UUID,
        version: int,
        *,
        transaction: PromptStoreTransaction | None = None,
    ) -> HistoryEntry:
        """Return the entry archived for *version* of *prompt_id*."""
        source = transaction if transaction is not None else self._store
        try:
            entry = source.get_history(prompt_id, version)
        except RepositoryError as exc:
            raise PromptStorageError(
                f"Unable to load version {version} of prompt {prompt_id}"
            ) from exc
        if entry is None:
            raise PromptVersionNotFoundError(
                f"Version {version} of prompt {prompt_id} is not in its history"
            )
        return entry

    def verify(self, prompt: Prompt) -> list[int]:
        """Return versions below ``prompt.version`` that have no archived entry."""
        archived = {entry.version for entry in self.list(prompt.id)}
        return [version for version in range(1, prompt.version) if version not in archived]


__all__ = ["VersionLedger"]
