"""Tests for the PromptLibrary façade.

Updates:
  v0.4.0 - 2026-10-19 - Cover edits that keep the current tags.
  v0.3.0 - 2026-09-25 - Cover imports, stats, search, and activity logging.
  v0.2.0 - 2026-09-20 - Cover restore, diff, and delete retention behaviour.
  v0.1.0 - 2026-09-08 - Cover create, edit, and duplicate flows.
"""

from __future__ import annotations

import threading
import uuid
from typing import TYPE_CHECKING

import pytest

from core import (
    CaptureMetadata,
    InMemoryPromptStore,
    PromptLibrary,
    PromptNotFoundError,
    PromptVersionNotFoundError,
    SaveStatus,
)
from core.repository import RepositoryError
from models.category_model import PromptCategory

if TYPE_CHECKING:
    from models.prompt_model import ActivityEvent, Prompt

QUANTUM = "Explain quantum entanglement in simple terms"


def _create(library: PromptLibrary, text: str, **metadata: object) -> Prompt:
    result = library.create_prompt(text, CaptureMetadata(**metadata))  # type: ignore[arg-type]
    assert result.status is SaveStatus.CREATED
    assert result.prompt is not None
    return result.prompt


def _actions(library: PromptLibrary) -> list[str]:
    return [event.action for event in library.list_activity()]


def test_identical_resubmission_is_duplicate_content(library: PromptLibrary) -> None:
    first = _create(library, QUANTUM)
    second = library.create_prompt(QUANTUM)
    assert second.status is SaveStatus.DUPLICATE_CONTENT
    assert second.prompt is not None
    assert second.prompt.id == first.id
    assert [prompt.text for prompt in library.list_prompts()] == [QUANTUM]
    assert _actions(library) == ["prompt_created", "duplicate_detected"]


def test_edit_archives_pre_edit_state(library: PromptLibrary) -> None:
    prompt = _create(library, "Original text", title="Original", tags=["one"])
    updated = library.edit_prompt(prompt.id, "Edited", "Edited text", ["two", "Two"])
    assert updated.version == 2
    assert updated.tags == ["two"]
    history = library.get_history(prompt.id)
    assert len(history) == 1
    entry = history[0]
    assert (entry.version, entry.title, entry.text, entry.tags) == (
        1,
        "Original",
        "Original text",
        ("one",),
    )
    assert library.get_prompt(prompt.id).version == 2


def test_edit_accepts_comma_separated_tags(library: PromptLibrary) -> None:
    prompt = _create(library, "Tag parsing")
    updated = library.edit_prompt(prompt.id, None, "Tag parsing body", "alpha, beta ,alpha")
    assert updated.tags == ["alpha", "beta"]
    assert updated.title == prompt.title


def test_edit_without_tags_keeps_title_and_tags(library: PromptLibrary) -> None:
    prompt = _create(library, "Keep my labels", title="Labelled", tags=["one", "two"])
    updated = library.edit_prompt(prompt.id, None, "Keep my labels, revised")
    assert (updated.title, updated.tags) == ("Labelled", ["one", "two"])
    cleared = library.edit_prompt(prompt.id, None, "Keep my labels, cleared", [])
    assert cleared.tags == []
    assert [entry.tags for entry in library.get_history(prompt.id)] == [
        ("one", "two"),
        ("one", "two"),
    ]


def test_edit_missing_prompt_raises(library: PromptLibrary) -> None:
    with pytest.raises(PromptNotFoundError):
        library.edit_prompt(uuid.uuid4(), "t", "text", [])


def test_restore_version_one_from_version_three(library: PromptLibrary) -> None:
    prompt = _create(library, "First body", title="First", tags=["v1"])
    library.edit_prompt(prompt.id, "Second", "Second body", ["v2"])
    library.edit_prompt(prompt.id, "Third", "Third body", ["v3"])

    restored = library.restore_prompt(prompt.id, 1)

    assert restored.version == 4
    assert (restored.title, restored.text, restored.tags) == ("First", "First body", ["v1"])
    history = library.get_history(prompt.id)
    assert [entry.version for entry in history] == [3, 2, 1]
    assert (history[0].title, history[0].text, history[0].tags) == ("Third", "Third body", ("v3",))
    assert history[-1].text == "First body"
    assert library.verify_history(prompt.id) == []
    assert _actions(library)[-1] == "prompt_restored"


def test_restore_unknown_version(library: PromptLibrary) -> None:
    prompt = _create(library, "Only version")
    with pytest.raises(PromptVersionNotFoundError):
        library.restore_prompt(prompt.id, 1)
    assert library.get_prompt(prompt.id).version == 1
    assert library.get_history(prompt.id) == []


def test_record_use_only_touches_usage(library: PromptLibrary) -> None:
    prompt = _create(library, "Copy me often")
    used = library.record_use(prompt.id)
    assert used.uses == 1
    assert used.version == prompt.version
    assert used.text == prompt.text
    assert used.updated_at >= prompt.updated_at
    assert library.get_history(prompt.id) == []


def test_delete_keeps_history_by_default(library: PromptLibrary) -> None:
    prompt = _create(library, "Soon deleted")
    library.edit_prompt(prompt.id, "t", "Soon deleted, edited", [])
    library.delete_prompt(prompt.id)
    assert library.list_prompts() == []
    assert [entry.version for entry in library.get_history(prompt.id)] == [1]
    with pytest.raises(PromptNotFoundError):
        library.get_prompt(prompt.id)
    with pytest.raises(PromptNotFoundError):
        library.delete_prompt(prompt.id)


def test_delete_with_cascade_removes_history(store: object) -> None:
    library = PromptLibrary(store, cascade_history_delete=True)  # type: ignore[arg-type]
    prompt = _create(library, "Reclaim me")
    library.edit_prompt(prompt.id, "t", "Reclaim me again", [])
    library.delete_prompt(prompt.id)
    assert library.get_history(prompt.id) == []


def test_concurrent_identical_creates_commit_once() -> None:
    class _SlowListStore(InMemoryPromptStore):
        def __init__(self) -> None:
            super().__init__()
            self.gate = threading.Event()
            self.entered = threading.Event()

        def list(self) -> list[Prompt]:
            self.entered.set()
            self.gate.wait(timeout=5)
            return super().list()

    store = _SlowListStore()
    library = PromptLibrary(store)
    results = []
    worker = threading.Thread(target=lambda: results.append(library.create_prompt(QUANTUM)))
    worker.start()
    try:
        assert store.entered.wait(timeout=5)
        second = library.create_prompt(QUANTUM)
    finally:
        store.gate.set()
        worker.join(timeout=5)

    assert second.status is SaveStatus.DUPLICATE_IN_FLIGHT
    assert [result.status for result in results] == [SaveStatus.CREATED]
    assert len(library.list_prompts()) == 1


def test_capture_selection_defaults(library: PromptLibrary) -> None:
    result = library.capture_selection(
        "Refactor this python function",
        source="https://github.com/org/repo",
        page_title="A repository page",
    )
    prompt = result.prompt
    assert prompt is not None
    assert prompt.title == "Saved from A repository page"
    assert prompt.tags == ["auto-saved", "github"]
    assert prompt.category is PromptCategory.CODING
    assert prompt.source == "https://github.com/org/repo"


def test_capture_response_defaults(library: PromptLibrary) -> None:
    result = library.capture_response(
        "Here is a short story about a lighthouse keeper.",
        title="Claude Response",
        source="https://claude.ai/chat/1",
    )
    prompt = result.prompt
    assert prompt is not None
    assert prompt.title == "Claude Response"
    assert prompt.tags == ["ai-response", "claude"]
    assert prompt.category is PromptCategory.WRITING


def test_search_prompts(library: PromptLibrary) -> None:
    _create(library, "Write a python function to sort", tags=["snippets"])
    _create(library, "Brainstorm gift ideas for a friend", title="Gifts")
    _create(library, "Analyze the survey data carefully", tags=["Work"])
    assert {prompt.title for prompt in library.search_prompts("gifts")} == {"Gifts"}
    assert len(library.search_prompts("work")) == 1
    assert len(library.search_prompts("")) == 3
    coding = library.search_prompts("", category="coding")
    assert [prompt.category for prompt in coding] == [PromptCategory.CODING]
    assert library.search_prompts("python", category=PromptCategory.CREATIVE) == []


def test_diff_history(library: PromptLibrary) -> None:
    prompt = _create(library, "line one\nline two", title="Diff")
    library.edit_prompt(prompt.id, "Diff", "line one\nline 2", [])
    diff = library.diff_history(prompt.id, 1)
    assert diff.has_changes
    assert set(diff.changed_fields) == {"text"}
    assert (diff.base_version, diff.target_version) == (1, 2)
    assert "-line two" in diff.body_diff
    assert "+line 2" in diff.body_diff


def test_import_prompts_skips_duplicates(library: PromptLibrary) -> None:
    _create(library, QUANTUM)
    records = [
        {"id": "1700000000000abc", "title": "Legacy", "text": "Old capture", "tags": ["x"]},
        {"text": QUANTUM},
        {"text": "Another legacy record", "version": 7, "uses": 3},
    ]
    results = library.import_prompts(records)
    assert [result.status for result in results] == [
        SaveStatus.CREATED,
        SaveStatus.DUPLICATE_CONTENT,
        SaveStatus.CREATED,
    ]
    imported = results[2].prompt
    assert imported is not None
    assert imported.version == 1
    assert len(library.list_prompts()) == 3
    assert _actions(library)[-1] == "prompts_imported"


def test_get_stats(library: PromptLibrary) -> None:
    first = _create(library, "Write a python function", tags=["code", "daily"])
    second = _create(library, "Draft a blog post", tags=["daily"])
    _create(library, "Hello there")
    for _ in range(3):
        library.record_use(first.id)
    library.record_use(second.id)

    stats = library.get_stats()
    assert stats.total_prompts == 3
    assert stats.total_tags == 2
    assert stats.total_uses == 4
    assert stats.average_uses == pytest.approx(1.3)
    assert stats.reuse_rate == 33
    assert [prompt.id for prompt in stats.most_used] == [first.id, second.id]
    assert stats.category_breakdown == {"coding": 1, "writing": 1, "general": 1}
    assert stats.popular_tags[0] == ("daily", 2)
    assert stats.recent_activity == 7


def test_get_stats_on_empty_library(library: PromptLibrary) -> None:
    stats = library.get_stats()
    assert stats.total_prompts == 0
    assert stats.average_uses == 0.0
    assert stats.reuse_rate == 0
    assert stats.most_used == []


def test_activity_failures_do_not_fail_operations(caplog: pytest.LogCaptureFixture) -> None:
    class _NoActivityStore(InMemoryPromptStore):
        def record_activity(self, event: ActivityEvent) -> None:
            raise RepositoryError("activity table locked")

    library = PromptLibrary(_NoActivityStore())
    with caplog.at_level("WARNING", logger="prompt_hive.library"):
        result = library.create_prompt("Still saved")
    assert result.status is SaveStatus.CREATED
    assert "Failed to record prompt activity" in caplog.text
