"""Save orchestration: fingerprinting, duplicate suppression, and versioned commits.

Updates:
  v0.4.0 - 2026-10-19 - Delete live record and history in one transaction.
  v0.3.0 - 2026-09-24 - Hand committed prompts to the optional backup dispatcher.
  v0.2.0 - 2026-09-17 - Serialise edits and restores per prompt identity.
  v0.1.0 - 2026-09-06 - Introduce coordinator replacing ambient save queues.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from models.prompt_model import Prompt, normalise_tags

from .exceptions import (
    PromptNotFoundError,
    PromptStorageError,
    PromptValidationError,
)
from .fingerprint import fingerprint
from .inflight import InFlightRegistry, KeyedLocks
from .repository import RepositoryError, RepositoryNotFoundError
from .similarity import DEFAULT_DUPLICATE_THRESHOLD, is_duplicate

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from .backup import BackupDispatcher
    from .repository import PromptStore
    from .version_ledger import VersionLedger

logger = logging.getLogger("prompt_hive.save_coordinator")

__all__ = ["CaptureMetadata", "SaveCoordinator", "SaveResult", "SaveStatus"]


class SaveStatus(str, Enum):
    """Outcome of a save submission."""

    CREATED = "created"
    UPDATED = "updated"
    DUPLICATE_CONTENT = "duplicate_content"
    DUPLICATE_IN_FLIGHT = "duplicate_in_flight"


@dataclass(slots=True)
class CaptureMetadata:
    """Descriptive fields accompanying captured text.

    On edits, a ``None`` title or tags keeps the value of the current version.
    """

    title: str | None = None
    tags: Sequence[str] | None = None
    source: str | None = None
    context: str | None = None

    @property
    def context_key(self) -> str:
        """Return the fingerprint context: source plus any extra context."""
        return f"{self.source or ''}{self.context or ''}"


@dataclass(slots=True)
class SaveResult:
    """Outcome of :meth:`SaveCoordinator.submit`.

    ``prompt`` holds the committed prompt, the existing duplicate for
    ``DUPLICATE_CONTENT``, or ``None`` when another save was in flight.
    ``backup_delivered`` is ``None`` when no backup channel is configured.
    """

    status: SaveStatus
    prompt: Prompt | None
    fingerprint: str
    backup_delivered: bool | None = None

    @property
    def saved(self) -> bool:
        """Return ``True`` when this submission committed a prompt."""
        return self.status in (SaveStatus.CREATED, SaveStatus.UPDATED)

    @property
    def is_duplicate(self) -> bool:
        """Return ``True`` when the submission was suppressed as a duplicate."""
        return not self.saved


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SaveCoordinator:
    """Run each save as one logical operation against a :class:`PromptStore`.

    The coordinator owns its in-flight registry and per-prompt locks, so two
    coordinators never share suppression state.
    """

    def __init__(
        self,
        store: PromptStore,
        *,
        ledger: VersionLedger,
        threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
        length_prefilter: bool = True,
        backup: BackupDispatcher | None = None,
        inflight: InFlightRegistry | None = None,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._threshold = threshold
        self._length_prefilter = length_prefilter
        self._backup = backup
        self._inflight = inflight or InFlightRegistry()
        self._identity_locks = KeyedLocks()

    @property
    def inflight(self) -> InFlightRegistry:
        """Return the registry of fingerprints currently being committed."""
        return self._inflight

    @property
    def threshold(self) -> float:
        """Return the similarity ratio above which content counts as duplicate."""
        return self._threshold

    # Submission ------------------------------------------------------- #

    def submit(
        self,
        raw_text: str,
        metadata: CaptureMetadata | None = None,
        *,
        is_edit: bool = False,
        existing_id: uuid.UUID | None = None,
    ) -> SaveResult:
        """Create a prompt from *raw_text* or, for edits, commit a new version.

        Raises:
            PromptValidationError: *raw_text* is blank or an edit lacks an id.
            PromptNotFoundError: the edited prompt does not exist.
            PromptStorageError: the store failed; nothing was committed.
        """
        metadata = metadata or CaptureMetadata()
        text = (raw_text or "").strip()
        if not text:
            raise PromptValidationError("Prompt text must not be empty")
        edit_id: uuid.UUID | None = None
        if is_edit:
            if existing_id is None:
                raise PromptValidationError("An edit requires the id of the prompt to update")
            edit_id = existing_id

        token = fingerprint(text, metadata.context_key)
        with self._inflight.claim(token) as owned:
            if not owned:
                logger.info("Skipping save already in flight", extra={"fingerprint": token})
                return SaveResult(SaveStatus.DUPLICATE_IN_FLIGHT, None, token)

            if edit_id is not None:
                prompt = self._commit_edit(
                    edit_id,
                    title=metadata.title,
                    text=text,
                    tags=metadata.tags,
                )
                status = SaveStatus.UPDATED
            else:
                duplicate = self.find_duplicate(text)
                if duplicate is not None:
                    logger.info(
                        "Duplicate prompt content detected",
                        extra={"fingerprint": token, "prompt_id": str(duplicate.id)},
                    )
                    return SaveResult(SaveStatus.DUPLICATE_CONTENT, duplicate, token)
                prompt = self._commit_create(text, metadata)
                status = SaveStatus.CREATED

        return SaveResult(status, prompt, token, backup_delivered=self._send_backup(prompt))

    def find_duplicate(self, text: str) -> Prompt | None:
        """Return the first persisted prompt that *text* duplicates, if any."""
        try:
            candidates = self._store.list()
        except RepositoryError as exc:
            raise PromptStorageError("Unable to load prompts for duplicate check") from exc
        for candidate in candidates:
            if is_duplicate(
                text,
                candidate.text,
                self._threshold,
                prefilter=self._length_prefilter,
            ):
                return candidate
        return None

    # Mutations -------------------------------------------------------- #

    def restore(self, prompt_id: uuid.UUID, history_version: int) -> Prompt:
        """Commit the content archived at *history_version* as a new version.

        The live state is archived first, so restoring never loses a version.
        """
        with self._identity_locks.hold(prompt_id):
            try:
                with self._store.transaction() as txn:
                    current = txn.get(prompt_id)
                    if current is None:
                        raise PromptNotFoundError(f"Prompt {prompt_id} not found")
                    entry = self._ledger.get(prompt_id, history_version, transaction=txn)
                    self._ledger.archive(current, transaction=txn)
                    restored = current.with_content(
                        title=entry.title,
                        text=entry.text,
                        tags=entry.tags,
                        version=self._ledger.next_version(current),
                    )
                    txn.put(restored)
            except RepositoryError as exc:
                raise PromptStorageError(f"Failed to restore prompt {prompt_id}") from exc
        logger.info(
            "Prompt restored",
            extra={
                "prompt_id": str(prompt_id),
                "restored_from": history_version,
                "version": restored.version,
            },
        )
        self._send_backup(restored)
        return restored

    def record_use(self, prompt_id: uuid.UUID) -> Prompt:
        """Increment the usage counter of *prompt_id* without creating a version."""
        with self._identity_locks.hold(prompt_id):
            try:
                with self._store.transaction() as txn:
                    current = txn.get(prompt_id)
                    if current is None:
                        raise PromptNotFoundError(f"Prompt {prompt_id} not found")
                    current.uses += 1
                    current.updated_at = _utc_now()
                    txn.put(current)
            except RepositoryError as exc:
                raise PromptStorageError(f"Failed to record use of prompt {prompt_id}") from exc
        return current

    def delete(self, prompt_id: uuid.UUID, *, cascade_history: bool = False) -> int:
        """Remove the live record; return the number of history entries removed.

        History is kept unless *cascade_history* is set.
        """
        with self._identity_locks.hold(prompt_id):
            try:
                with self._store.transaction() as txn:
                    if txn.get(prompt_id) is None:
                        raise PromptNotFoundError(f"Prompt {prompt_id} not found")
                    txn.delete(prompt_id)
                    removed = txn.delete_history(prompt_id) if cascade_history else 0
            except RepositoryNotFoundError as exc:
                raise PromptNotFoundError(f"Prompt {prompt_id} not found") from exc
            except RepositoryError as exc:
                raise PromptStorageError(f"Failed to delete prompt {prompt_id}") from exc
        logger.info(
            "Prompt deleted",
            extra={"prompt_id": str(prompt_id), "history_removed": removed},
        )
        return removed

    # Internal helpers ------------------------------------------------- #

    def _commit_create(self, text: str, metadata: CaptureMetadata) -> Prompt:
        prompt = Prompt.new(
            text,
            title=metadata.title,
            tags=metadata.tags,
            source=metadata.source,
        )
        try:
            self._store.put(prompt)
        except RepositoryError as exc:
            raise PromptStorageError(f"Failed to persist prompt {prompt.id}") from exc
        logger.info(
            "Prompt created",
            extra={"prompt_id": str(prompt.id), "category": prompt.category.value},
        )
        return prompt

    def _commit_edit(
        self,
        prompt_id: uuid.UUID,
        *,
        title: str | None,
        text: str,
        tags: Sequence[str] | None,
    ) -> Prompt:
        with self._identity_locks.hold(prompt_id):
            try:
                with self._store.transaction() as txn:
                    current = txn.get(prompt_id)
                    if current is None:
                        raise PromptNotFoundError(f"Prompt {prompt_id} not found")
                    self._ledger.archive(current, transaction=txn)
                    updated = current.with_content(
                        title=title if title is not None else current.title,
                        text=text,
                        tags=normalise_tags(tags) if tags is not None else current.tags,
                        version=self._ledger.next_version(current),
                    )
                    txn.put(updated)
            except RepositoryError as exc:
                raise PromptStorageError(f"Failed to update prompt {prompt_id}") from exc
        logger.info(
            "Prompt edited",
            extra={"prompt_id": str(prompt_id), "version": updated.version},
        )
        return updated

    def _send_backup(self, prompt: Prompt) -> bool | None:
        if self._backup is None:
            return None
        return self._backup.dispatch(prompt)
