"""Pytest configuration for shared prompt store fixtures.

Updates:
  v0.2.0 - 2026-09-15 - Parametrise store fixtures over SQLite and in-memory backends.
  v0.1.0 - 2026-09-04 - Isolate tests from PROMPT_HIVE_* environment settings.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from core import InMemoryPromptStore, PromptLibrary, PromptRepository

if TYPE_CHECKING:
    from pathlib import Path

    from core import PromptStore


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop Prompt Hive variables inherited from the developer shell."""
    for key in list(os.environ):
        if key.upper().startswith("PROMPT_HIVE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def sqlite_store(tmp_path: Path) -> PromptRepository:
    return PromptRepository(tmp_path / "prompts.db")


@pytest.fixture
def memory_store() -> InMemoryPromptStore:
    return InMemoryPromptStore()


@pytest.fixture(params=["memory", "sqlite"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> PromptStore:
    """Yield each shipped store implementation in turn."""
    if request.param == "memory":
        return InMemoryPromptStore()
    return PromptRepository(tmp_path / "prompts.db")


@pytest.fixture
def library(store: PromptStore) -> PromptLibrary:
    return PromptLibrary(store)
