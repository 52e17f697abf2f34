"""Prompt library façade composed from lifecycle, versioning, search, and analytics mixins.

Updates:
  v0.3.0 - 2026-09-25 - Record activity events for every committed operation.
  v0.2.0 - 2026-09-20 - Add analytics and search mixins.
  v0.1.0 - 2026-09-08 - Compose library façade over the save coordinator.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from models.prompt_model import ActivityEvent

from ..backup import DEFAULT_BACKUP_TIMEOUT_SECONDS, BackupDispatcher
from ..repository import RepositoryError
from ..save_coordinator import SaveCoordinator
from ..similarity import DEFAULT_DUPLICATE_THRESHOLD
from ..version_ledger import VersionLedger
from .analytics import AnalyticsMixin, LibraryStats
from .lifecycle import PromptLifecycleMixin
from .search import PromptSearchMixin
from .versioning import PromptHistoryDiff, PromptVersioningMixin

if TYPE_CHECKING:  # pragma: no cover - typing only
    import uuid
    from datetime import datetime

    from ..backup import BackupChannel
    from ..repository import PromptStore

logger = logging.getLogger("prompt_hive.library")

__all__ = ["LibraryStats", "PromptHistoryDiff", "PromptLibrary"]


class PromptLibrary(
    PromptLifecycleMixin,
    PromptVersioningMixin,
    PromptSearchMixin,
    AnalyticsMixin,
):
    """Caller-facing operations over a prompt store.

    One library owns one save coordinator, so in-flight suppression and
    per-prompt edit ordering apply to every caller sharing the instance.
    """

    def __init__(
        self,
        store: PromptStore,
        *,
        similarity_threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
        length_prefilter: bool = True,
        backup_channel: BackupChannel | None = None,
        backup_timeout_seconds: float = DEFAULT_BACKUP_TIMEOUT_SECONDS,
        cascade_history_delete: bool = False,
    ) -> None:
        self._store = store
        self._ledger = VersionLedger(store)
        backup = (
            BackupDispatcher(backup_channel, timeout_seconds=backup_timeout_seconds)
            if backup_channel is not None
            else None
        )
        self._coordinator = SaveCoordinator(
            store,
            ledger=self._ledger,
            threshold=similarity_threshold,
            length_prefilter=length_prefilter,
            backup=backup,
        )
        self._cascade_history_delete = cascade_history_delete

    @property
    def store(self) -> PromptStore:
        """Return the backing prompt store."""
        return self._store

    @property
    def coordinator(self) -> SaveCoordinator:
        """Return the save coordinator used for every mutation."""
        return self._coordinator

    def list_activity(self, since: datetime | None = None) -> list[ActivityEvent]:
        """Return the activity log, oldest first."""
        try:
            return self._store.list_activity(since)
        except RepositoryError:
            logger.warning("Unable to read activity log", exc_info=True)
            return []

    def _log_activity(
        self,
        action: str,
        prompt_id: uuid.UUID | None,
        **metadata: Any,
    ) -> None:
        """Append an activity event; failures are logged and otherwise ignored."""
        event = ActivityEvent(action=action, prompt_id=prompt_id, metadata=metadata)
        try:
            self._store.record_activity(event)
        except RepositoryError:
            logger.warning(
                "Failed to record prompt activity",
                exc_info=True,
                extra={"action": action},
            )
