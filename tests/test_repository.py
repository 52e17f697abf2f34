"""Tests for the SQLite and in-memory prompt stores.

Updates:
  v0.4.0 - 2026-10-19 - Cover deletes staged inside transactions.
  v0.3.0 - 2026-09-20 - Cover activity log persistence.
  v0.2.0 - 2026-09-15 - Run store contract tests against both backends.
  v0.1.0 - 2026-09-04 - Introduce repository CRUD coverage.
"""

from __future__ import annotations

import sqlite3
import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from core.repository import (
    PromptRepository,
    RepositoryConflictError,
    RepositoryNotFoundError,
)
from models.prompt_model import ActivityEvent, HistoryEntry, Prompt

if TYPE_CHECKING:
    from pathlib import Path

    from core.repository import PromptStore


def _make_prompt(text: str = "Sample prompt text", **overrides: object) -> Prompt:
    prompt = Prompt.new(text, title="Sample", tags=["test", "storage"])
    for key, value in overrides.items():
        setattr(prompt, key, value)
    return prompt


def test_put_get_round_trip(store: PromptStore) -> None:
    prompt = _make_prompt()
    store.put(prompt)
    assert store.get(prompt.id) == prompt
    assert store.get(uuid.uuid4()) is None


def test_put_upserts_existing_prompt(store: PromptStore) -> None:
    prompt = _make_prompt()
    store.put(prompt)
    prompt.uses = 5
    prompt.title = "Renamed"
    store.put(prompt)
    loaded = store.get(prompt.id)
    assert loaded is not None
    assert loaded.uses == 5
    assert loaded.title == "Renamed"
    assert len(store.list()) == 1


def test_returned_prompts_are_independent_copies(store: PromptStore) -> None:
    prompt = _make_prompt()
    store.put(prompt)
    loaded = store.get(prompt.id)
    assert loaded is not None
    loaded.uses = 99
    reloaded = store.get(prompt.id)
    assert reloaded is not None
    assert reloaded.uses == 0


def test_list_orders_by_most_recent_update(store: PromptStore) -> None:
    base = datetime(2026, 9, 1, tzinfo=UTC)
    older = _make_prompt("older", updated_at=base)
    newer = _make_prompt("newer", updated_at=base + timedelta(hours=1))
    store.put(older)
    store.put(newer)
    assert [prompt.text for prompt in store.list()] == ["newer", "older"]


def test_delete_removes_prompt_and_reports_missing(store: PromptStore) -> None:
    prompt = _make_prompt()
    store.put(prompt)
    store.delete(prompt.id)
    assert store.get(prompt.id) is None
    with pytest.raises(RepositoryNotFoundError):
        store.delete(prompt.id)


def test_history_entries_are_unique_per_version(store: PromptStore) -> None:
    prompt = _make_prompt()
    entry = HistoryEntry.from_prompt(prompt)
    store.put_history(entry)
    assert store.get_history(prompt.id, 1) == entry
    with pytest.raises(RepositoryConflictError):
        store.put_history(HistoryEntry.from_prompt(prompt))
    assert store.list_history(prompt.id) == [entry]


def test_list_history_is_descending_and_scoped(store: PromptStore) -> None:
    prompt = _make_prompt()
    other = _make_prompt("other")
    for version in (1, 2, 3):
        prompt.version = version
        store.put_history(HistoryEntry.from_prompt(prompt))
    store.put_history(HistoryEntry.from_prompt(other))
    assert [entry.version for entry in store.list_history(prompt.id)] == [3, 2, 1]
    assert store.get_history(prompt.id, 7) is None


def test_delete_history_returns_removed_count(store: PromptStore) -> None:
    prompt = _make_prompt()
    for version in (1, 2):
        prompt.version = version
        store.put_history(HistoryEntry.from_prompt(prompt))
    assert store.delete_history(prompt.id) == 2
    assert store.list_history(prompt.id) == []
    assert store.delete_history(prompt.id) == 0


def test_transaction_commits_prompt_and_history_together(store: PromptStore) -> None:
    prompt = _make_prompt()
    store.put(prompt)
    with store.transaction() as txn:
        current = txn.get(prompt.id)
        assert current is not None
        txn.put_history(HistoryEntry.from_prompt(current))
        current.version = 2
        txn.put(current)
        assert txn.get(prompt.id) == current
        assert txn.get_history(prompt.id, 1) is not None
    loaded = store.get(prompt.id)
    assert loaded is not None
    assert loaded.version == 2
    assert [entry.version for entry in store.list_history(prompt.id)] == [1]


def test_transaction_rolls_back_on_error(store: PromptStore) -> None:
    prompt = _make_prompt()
    store.put(prompt)
    with pytest.raises(RuntimeError), store.transaction() as txn:
        current = txn.get(prompt.id)
        assert current is not None
        txn.put_history(HistoryEntry.from_prompt(current))
        current.version = 2
        txn.put(current)
        raise RuntimeError("abort")
    loaded = store.get(prompt.id)
    assert loaded is not None
    assert loaded.version == 1
    assert store.list_history(prompt.id) == []


def test_transaction_deletes_prompt_and_history_together(store: PromptStore) -> None:
    prompt = _make_prompt()
    store.put(prompt)
    store.put_history(HistoryEntry.from_prompt(prompt))
    with store.transaction() as txn:
        txn.delete(prompt.id)
        assert txn.get(prompt.id) is None
        assert txn.delete_history(prompt.id) == 1
        assert txn.get_history(prompt.id, 1) is None
        with pytest.raises(RepositoryNotFoundError):
            txn.delete(prompt.id)
    assert store.get(prompt.id) is None
    assert store.list_history(prompt.id) == []


def test_transaction_delete_rolls_back_on_error(store: PromptStore) -> None:
    prompt = _make_prompt()
    store.put(prompt)
    store.put_history(HistoryEntry.from_prompt(prompt))
    with pytest.raises(RuntimeError), store.transaction() as txn:
        txn.delete(prompt.id)
        txn.delete_history(prompt.id)
        raise RuntimeError("abort")
    assert store.get(prompt.id) == prompt
    assert [entry.version for entry in store.list_history(prompt.id)] == [1]


def test_transaction_rejects_double_archival(store: PromptStore) -> None:
    prompt = _make_prompt()
    store.put(prompt)
    store.put_history(HistoryEntry.from_prompt(prompt))
    with pytest.raises(RepositoryConflictError), store.transaction() as txn:
        txn.put_history(HistoryEntry.from_prompt(prompt))
        prompt.version = 2
        txn.put(prompt)
    loaded = store.get(prompt.id)
    assert loaded is not None
    assert loaded.version == 1


def test_activity_log_filters_by_time(store: PromptStore) -> None:
    now = datetime.now(UTC)
    old = ActivityEvent(action="prompt_used", timestamp=now - timedelta(days=30))
    recent = ActivityEvent(action="prompt_created", prompt_id=uuid.uuid4(), metadata={"a": 1})
    store.record_activity(recent)
    store.record_activity(old)
    assert [event.action for event in store.list_activity()] == ["prompt_used", "prompt_created"]
    since = store.list_activity(now - timedelta(days=7))
    assert since == [recent]


def test_sqlite_schema_enforces_history_uniqueness(tmp_path: Path) -> None:
    repository = PromptRepository(tmp_path / "nested" / "prompts.db")
    assert repository.db_path.exists()
    with sqlite3.connect(repository.db_path) as conn:
        tables = {
            row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
    assert {"prompts", "prompt_history", "activity"} <= tables


def test_sqlite_history_survives_prompt_delete(sqlite_store: PromptRepository) -> None:
    prompt = _make_prompt()
    sqlite_store.put(prompt)
    sqlite_store.put_history(HistoryEntry.from_prompt(prompt))
    sqlite_store.delete(prompt.id)
    assert len(sqlite_store.list_history(prompt.id)) == 1


def test_sqlite_reopen_keeps_data(tmp_path: Path) -> None:
    path = tmp_path / "prompts.db"
    prompt = _make_prompt()
    PromptRepository(path).put(prompt)
    assert PromptRepository(path).get(prompt.id) == prompt
