"""Prompt history, restore, and diff helpers for the prompt library.

Updates:
  v0.2.0 - 2026-09-22 - Add history gap verification.
  v0.1.0 - 2026-09-12 - Extract history listing, restore, and diff APIs into mixin.
"""

from __future__ import annotations

import difflib
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from models.prompt_model import HistoryEntry, Prompt

    from ..save_coordinator import SaveCoordinator
    from ..version_ledger import VersionLedger

__all__ = ["PromptHistoryDiff", "PromptVersioningMixin"]


@dataclass(slots=True)
class PromptHistoryDiff:
    """Differences between an archived version and the live prompt."""

    prompt_id: uuid.UUID
    base_version: int
    target_version: int
    changed_fields: dict[str, dict[str, Any]]
    body_diff: str

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_fields)


class PromptVersioningMixin:
    """Read, compare, and restore archived prompt versions."""

    _ledger: VersionLedger
    _coordinator: SaveCoordinator

    def get_history(self, prompt_id: uuid.UUID) -> list[HistoryEntry]:
        """Return archived versions of *prompt_id*, newest first.

        History outlives its prompt, so this works for deleted prompts too.
        """
        return self._ledger.list(prompt_id)

    def restore_prompt(self, prompt_id: uuid.UUID, history_version: int) -> Prompt:
        """Make the content of *history_version* current as a new version."""
        prompt = self._coordinator.restore(prompt_id, history_version)
        cast("Any", self)._log_activity(
            "prompt_restored",
            prompt.id,
            restored_from=history_version,
            version=prompt.version,
        )
        return prompt

    def diff_history(self, prompt_id: uuid.UUID, version: int) -> PromptHistoryDiff:
        """Compare archived *version* with the live prompt."""
        current = cast("Any", self).get_prompt(prompt_id)
        entry = self._ledger.get(prompt_id, version)
        base = {"title": entry.title, "text": entry.text, "tags": list(entry.tags)}
        target = {"title": current.title, "text": current.text, "tags": list(current.tags)}
        changed_fields = {
            key: {"from": base[key], "to": target[key]}
            for key in base
            if base[key] != target[key]
        }
        body_diff = self._render_text_diff(
            entry.text,
            current.text,
            label_a=f"v{entry.version}",
            label_b=f"v{current.version}",
        )
        return PromptHistoryDiff(
            prompt_id=prompt_id,
            base_version=entry.version,
            target_version=current.version,
            changed_fields=changed_fields,
            body_diff=body_diff,
        )

    def verify_history(self, prompt_id: uuid.UUID) -> list[int]:
        """Return versions missing from the history of *prompt_id* (empty when intact)."""
        current = cast("Any", self).get_prompt(prompt_id)
        return self._ledger.verify(current)

    @staticmethod
    def _render_text_diff(
        before: str,
        after: str,
        *,
        label_a: str = "before",
        label_b: str = "after",
    ) -> str:
        """Return a unified diff for the provided text blocks."""
        diff = difflib.unified_diff(
            before.splitlines(),
            after.splitlines(),
            fromfile=label_a,
            tofile=label_b,
            lineterm="",
        )
        return "\n".join(diff)
