"""Tests for building prompt libraries from settings.

Updates:
  v0.1.0 - 2026-09-08 - Cover backend selection and settings wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from config import PromptHiveSettings
from core import (
    InMemoryPromptStore,
    PromptRepository,
    SaveStatus,
    build_prompt_library,
    build_store,
)

if TYPE_CHECKING:
    from pathlib import Path

    from models.prompt_model import Prompt


def test_build_store_selects_backend(tmp_path: Path) -> None:
    memory = build_store(PromptHiveSettings(storage_backend="memory"))
    assert isinstance(memory, InMemoryPromptStore)
    sqlite = build_store(PromptHiveSettings(db_path=tmp_path / "lib.db"))
    assert isinstance(sqlite, PromptRepository)
    assert sqlite.db_path == (tmp_path / "lib.db").resolve()


def test_build_prompt_library_applies_settings(tmp_path: Path) -> None:
    settings = PromptHiveSettings(
        db_path=tmp_path / "lib.db",
        similarity_threshold=1.0,
        cascade_history_delete=True,
    )
    library = build_prompt_library(settings)
    first = library.create_prompt("Explain recursion with a simple example.")
    second = library.create_prompt("Explain recursion with a simple example!")
    assert first.status is SaveStatus.CREATED
    assert second.status is SaveStatus.CREATED
    assert library.coordinator.threshold == 1.0
    assert first.prompt is not None
    library.edit_prompt(first.prompt.id, None, "Changed body", [])
    library.delete_prompt(first.prompt.id)
    assert library.get_history(first.prompt.id) == []


def test_explicit_store_and_backup_channel() -> None:
    class _Channel:
        def __init__(self) -> None:
            self.sent: list[Prompt] = []

        def send(self, prompt: Prompt) -> bool:
            self.sent.append(prompt)
            return True

    store = InMemoryPromptStore()
    channel = _Channel()
    library = build_prompt_library(
        PromptHiveSettings(storage_backend="sqlite"),
        store=store,
        backup_channel=channel,
    )
    result = library.create_prompt("Back me up")
    assert library.store is store
    assert result.backup_delivered is True
    assert [prompt.text for prompt in channel.sent] == ["Back me up"]
