"""Tests for the prompt version ledger.

Updates:
  v0.1.0 - 2026-09-12 - Cover archive conflicts, lookups, and gap verification.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from core.exceptions import (
    PromptHistoryConflictError,
    PromptVersionError,
    PromptVersionNotFoundError,
)
from core.version_ledger import VersionLedger
from models.prompt_model import Prompt

if TYPE_CHECKING:
    from core.repository import PromptStore


def test_archive_and_get(store: PromptStore) -> None:
    ledger = VersionLedger(store)
    prompt = Prompt.new("First draft", title="Draft")
    entry = ledger.archive(prompt)
    assert ledger.get(prompt.id, 1) == entry
    assert ledger.next_version(prompt) == 2


def test_archive_twice_raises_conflict(store: PromptStore) -> None:
    ledger = VersionLedger(store)
    prompt = Prompt.new("First draft")
    ledger.archive(prompt)
    with pytest.raises(PromptHistoryConflictError) as excinfo:
        ledger.archive(prompt)
    assert excinfo.value.version == 1
    assert isinstance(excinfo.value, PromptVersionError)


def test_get_missing_version(store: PromptStore) -> None:
    ledger = VersionLedger(store)
    with pytest.raises(PromptVersionNotFoundError):
        ledger.get(Prompt.new("x").id, 1)


def test_list_is_descending(store: PromptStore) -> None:
    ledger = VersionLedger(store)
    prompt = Prompt.new("Draft")
    for version in (2, 1, 3):
        prompt.version = version
        ledger.archive(prompt)
    assert [entry.version for entry in ledger.list(prompt.id)] == [3, 2, 1]


def test_verify_reports_gaps(store: PromptStore) -> None:
    ledger = VersionLedger(store)
    prompt = Prompt.new("Draft")
    prompt.version = 1
    ledger.archive(prompt)
    prompt.version = 3
    ledger.archive(prompt)
    prompt.version = 5
    assert ledger.verify(prompt) == [2, 4]
