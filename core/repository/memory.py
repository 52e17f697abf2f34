"""In-memory prompt store used for ephemeral libraries and tests.

Updates:
  v0.2.0 - 2026-10-19 - Stage prompt and history deletes inside transactions.
  v0.1.0 - 2026-09-15 - Introduce lock-guarded in-memory store with staged transactions.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from models.prompt_model import ActivityEvent, HistoryEntry, Prompt

from .base import RepositoryConflictError, RepositoryNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

_HistoryKey = tuple[uuid.UUID, int]


class _MemoryTransaction:
    """Stage writes against an :class:`InMemoryPromptStore` until commit."""

    def __init__(self, store: InMemoryPromptStore) -> None:
        self._store = store
        self._prompts: dict[uuid.UUID, dict[str, Any]] = {}
        self._history: dict[_HistoryKey, dict[str, Any]] = {}
        self._deleted: set[uuid.UUID] = set()
        self._history_deleted: set[uuid.UUID] = set()

    def get(self, prompt_id: uuid.UUID) -> Prompt | None:
        if prompt_id in self._deleted:
            return None
        record = self._prompts.get(prompt_id) or self._store._prompts.get(prompt_id)
        return Prompt.from_record(record) if record is not None else None

    def put(self, prompt: Prompt) -> None:
        self._deleted.discard(prompt.id)
        self._prompts[prompt.id] = prompt.to_record()

    def delete(self, prompt_id: uuid.UUID) -> None:
        if self.get(prompt_id) is None:
            raise RepositoryNotFoundError(f"Prompt {prompt_id} not found")
        self._prompts.pop(prompt_id, None)
        self._deleted.add(prompt_id)

    def get_history(self, prompt_id: uuid.UUID, version: int) -> HistoryEntry | None:
        key = (prompt_id, int(version))
        record = self._history.get(key) or self._committed_history(key)
        return HistoryEntry.from_record(record) if record is not None else None

    def put_history(self, entry: HistoryEntry) -> None:
        key = (entry.prompt_id, entry.version)
        if key in self._history or self._committed_history(key) is not None:
            raise RepositoryConflictError(
                f"Version {entry.version} of prompt {entry.prompt_id} is already archived"
            )
        self._history[key] = entry.to_record()

    def delete_history(self, prompt_id: uuid.UUID) -> int:
        staged = [key for key in self._history if key[0] == prompt_id]
        for key in staged:
            del self._history[key]
        committed = 0
        if prompt_id not in self._history_deleted:
            committed = sum(1 for owner, _ in self._store._history if owner == prompt_id)
            self._history_deleted.add(prompt_id)
        return len(staged) + committed

    def _committed_history(self, key: _HistoryKey) -> dict[str, Any] | None:
        if key[0] in self._history_deleted:
            return None
        return self._store._history.get(key)

    def apply(self) -> None:
        for prompt_id in self._deleted:
            self._store._prompts.pop(prompt_id, None)
        if self._history_deleted:
            for key in [key for key in self._store._history if key[0] in self._history_deleted]:
                del self._store._history[key]
        self._store._prompts.update(self._prompts)
        self._store._history.update(self._history)


class InMemoryPromptStore:
    """Thread-safe prompt store holding serialised records in dictionaries.

    Records are stored as plain mappings and rehydrated on every read, so
    callers always receive independent snapshots they may mutate freely.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._prompts: dict[uuid.UUID, dict[str, Any]] = {}
        self._history: dict[_HistoryKey, dict[str, Any]] = {}
        self._activity: list[dict[str, Any]] = []

    def get(self, prompt_id: uuid.UUID) -> Prompt | None:
        with self._lock:
            record = self._prompts.get(prompt_id)
        return Prompt.from_record(record) if record is not None else None

    def put(self, prompt: Prompt) -> None:
        with self._lock:
            self._prompts[prompt.id] = prompt.to_record()

    def delete(self, prompt_id: uuid.UUID) -> None:
        with self._lock:
            if self._prompts.pop(prompt_id, None) is None:
                raise RepositoryNotFoundError(f"Prompt {prompt_id} not found")

    def list(self) -> list[Prompt]:
        with self._lock:
            records = list(self._prompts.values())
        prompts = [Prompt.from_record(record) for record in records]
        prompts.sort(key=lambda prompt: (prompt.updated_at, prompt.created_at), reverse=True)
        return prompts

    def put_history(self, entry: HistoryEntry) -> None:
        with self.transaction() as txn:
            txn.put_history(entry)

    def get_history(self, prompt_id: uuid.UUID, version: int) -> HistoryEntry | None:
        with self._lock:
            record = self._history.get((prompt_id, int(version)))
        return HistoryEntry.from_record(record) if record is not None else None

    def list_history(self, prompt_id: uuid.UUID) -> list[HistoryEntry]:
        with self._lock:
            records = [
                record for (owner, _), record in self._history.items() if owner == prompt_id
            ]
        entries = [HistoryEntry.from_record(record) for record in records]
        entries.sort(key=lambda entry: (entry.version, entry.created_at), reverse=True)
        return entries

    def delete_history(self, prompt_id: uuid.UUID) -> int:
        with self._lock:
            keys = [key for key in self._history if key[0] == prompt_id]
            for key in keys:
                del self._history[key]
        return len(keys)

    @contextmanager
    def transaction(self) -> Iterator[_MemoryTransaction]:
        """Hold the store lock and apply staged writes only if the block succeeds."""
        with self._lock:
            txn = _MemoryTransaction(self)
            yield txn
            txn.apply()

    def record_activity(self, event: ActivityEvent) -> None:
        with self._lock:
            self._activity.append(event.to_record())

    def list_activity(self, since: datetime | None = None) -> list[ActivityEvent]:
        with self._lock:
            records = list(self._activity)
        events = [ActivityEvent.from_record(record) for record in records]
        if since is not None:
            events = [event for event in events if event.timestamp >= since]
        events.sort(key=lambda event: event.timestamp)
        return events


__all__ = ["InMemoryPromptStore"]
