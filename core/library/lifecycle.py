"""Prompt capture, editing, and removal helpers for the prompt library.

Updates:
  v0.3.0 - 2026-10-19 - Keep current tags when an edit passes none.
  v0.2.0 - 2026-09-25 - Add bulk import of exported prompt records.
  v0.1.0 - 2026-09-08 - Extract create/edit/use/delete APIs into mixin.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from models.prompt_model import Prompt

from ..classification import (
    RESPONSE_TAG,
    SELECTION_TAG,
    capture_tags,
    selection_title,
    truncate_title,
)
from ..exceptions import PromptNotFoundError, PromptStorageError, PromptValidationError
from ..repository import RepositoryError
from ..save_coordinator import CaptureMetadata, SaveStatus

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    import uuid
    from collections.abc import Sequence

    from ..repository import PromptStore
    from ..save_coordinator import SaveCoordinator, SaveResult

logger = logging.getLogger("prompt_hive.library")

DEFAULT_RESPONSE_TITLE = "AI Response"

__all__ = ["DEFAULT_RESPONSE_TITLE", "PromptLifecycleMixin"]


class PromptLifecycleMixin:
    """Capture, edit, use, and delete prompts through the save coordinator."""

    _store: PromptStore
    _coordinator: SaveCoordinator
    _cascade_history_delete: bool

    def create_prompt(
        self,
        text: str,
        metadata: CaptureMetadata | None = None,
    ) -> SaveResult:
        """Save *text* as a new prompt unless it duplicates a stored or in-flight one."""
        result = self._coordinator.submit(text, metadata)
        if result.status is SaveStatus.CREATED and result.prompt is not None:
            self._log_activity(
                "prompt_created",
                result.prompt.id,
                category=result.prompt.category.value,
                text_length=len(result.prompt.text),
                source=result.prompt.source,
            )
        elif result.status is SaveStatus.DUPLICATE_CONTENT and result.prompt is not None:
            self._log_activity("duplicate_detected", result.prompt.id, fingerprint=result.fingerprint)
        return result

    def capture_selection(
        self,
        text: str,
        *,
        source: str | None = None,
        page_title: str | None = None,
    ) -> SaveResult:
        """Save text selected on a page using the default capture title and tags."""
        metadata = CaptureMetadata(
            title=selection_title(page_title),
            tags=capture_tags(SELECTION_TAG, source),
            source=source,
        )
        return self.create_prompt(text, metadata)

    def capture_response(
        self,
        content: str,
        *,
        title: str | None = None,
        source: str | None = None,
    ) -> SaveResult:
        """Save an assistant response; the title also scopes the fingerprint."""
        label = truncate_title(title) or DEFAULT_RESPONSE_TITLE
        metadata = CaptureMetadata(
            title=label,
            tags=capture_tags(RESPONSE_TAG, source),
            source=source,
            context=label,
        )
        return self.create_prompt(content, metadata)

    def edit_prompt(
        self,
        prompt_id: uuid.UUID,
        title: str | None,
        text: str,
        tags: Sequence[str] | str | None = None,
    ) -> Prompt:
        """Commit new content for *prompt_id*, archiving the current version first.

        A ``None`` *title* or *tags* keeps the current value; an empty list
        clears the tags. *tags* may also be a comma-separated string.
        """
        tag_values: Sequence[str] | None
        if isinstance(tags, str):
            tag_values = tags.split(",")
        elif tags is None:
            tag_values = None
        else:
            tag_values = list(tags)
        metadata = CaptureMetadata(title=title, tags=tag_values)
        while True:
            result = self._coordinator.submit(
                text,
                metadata,
                is_edit=True,
                existing_id=prompt_id,
            )
            if result.prompt is not None:
                break
            # Identical edit already committing; wait for it and apply ours after it.
            self._coordinator.inflight.wait(result.fingerprint)
        prompt = result.prompt
        self._log_activity("prompt_edited", prompt.id, version=prompt.version)
        return prompt

    def record_use(self, prompt_id: uuid.UUID) -> Prompt:
        """Increment the usage counter, as when a prompt is copied for reuse."""
        prompt = self._coordinator.record_use(prompt_id)
        self._log_activity("prompt_used", prompt.id, uses=prompt.uses)
        return prompt

    def delete_prompt(self, prompt_id: uuid.UUID) -> None:
        """Remove the live prompt; its history is kept unless cascading is enabled."""
        removed = self._coordinator.delete(
            prompt_id,
            cascade_history=self._cascade_history_delete,
        )
        self._log_activity("prompt_deleted", prompt_id, history_removed=removed)

    def get_prompt(self, prompt_id: uuid.UUID) -> Prompt:
        """Return the live prompt for *prompt_id*."""
        try:
            prompt = self._store.get(prompt_id)
        except RepositoryError as exc:
            raise PromptStorageError(f"Unable to load prompt {prompt_id}") from exc
        if prompt is None:
            raise PromptNotFoundError(f"Prompt {prompt_id} not found")
        return prompt

    def list_prompts(self) -> list[Prompt]:
        """Return every live prompt, most recently updated first."""
        try:
            return self._store.list()
        except RepositoryError as exc:
            raise PromptStorageError("Unable to list prompts") from exc

    def import_prompts(self, records: Iterable[Mapping[str, Any]]) -> list[SaveResult]:
        """Import exported prompt records, skipping duplicates of stored content.

        Each record is saved as a fresh version-1 prompt; missing fields take
        the same defaults as legacy records.
        """
        results: list[SaveResult] = []
        for record in records:
            try:
                candidate = Prompt.from_record(record)
            except (TypeError, ValueError) as exc:
                raise PromptValidationError("Imported prompt record is malformed") from exc
            metadata = CaptureMetadata(
                title=candidate.title,
                tags=candidate.tags,
                source=candidate.source,
            )
            results.append(self._coordinator.submit(candidate.text, metadata))
        created = sum(1 for result in results if result.status is SaveStatus.CREATED)
        self._log_activity(
            "prompts_imported",
            None,
            received=len(results),
            created_count=created,
        )
        logger.info(
            "Prompts imported",
            extra={"received": len(results), "created_count": created},
        )
        return results

    # Provided by PromptLibrary
    def _log_activity(
        self,
        action: str,
        prompt_id: uuid.UUID | None,
        **metadata: Any,
    ) -> None:  # pragma: no cover - overridden
        raise NotImplementedError
