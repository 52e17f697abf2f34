"""Factories for constructing PromptLibrary instances from validated settings.

Updates:
  v0.2.0 - 2026-09-24 - Accept an optional backup channel.
  v0.1.0 - 2026-09-08 - Build SQLite or in-memory libraries from settings.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config import PromptHiveSettings, load_settings

from .exceptions import PromptStorageError
from .library import PromptLibrary
from .repository import InMemoryPromptStore, PromptRepository, RepositoryError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .backup import BackupChannel
    from .repository import PromptStore

factory_logger = logging.getLogger("prompt_hive.factory")


def build_store(settings: PromptHiveSettings) -> PromptStore:
    """Return the prompt store selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        factory_logger.debug("Using in-memory prompt store")
        return InMemoryPromptStore()
    try:
        repository = PromptRepository(settings.db_path)
    except RepositoryError as exc:
        raise PromptStorageError(f"Unable to open prompt database {settings.db_path}") from exc
    factory_logger.debug("Using SQLite prompt store", extra={"db_path": str(settings.db_path)})
    return repository


def build_prompt_library(
    settings: PromptHiveSettings | None = None,
    *,
    store: PromptStore | None = None,
    backup_channel: BackupChannel | None = None,
) -> PromptLibrary:
    """Return a PromptLibrary wired from *settings*.

    Settings are loaded from the environment when omitted. An explicit *store*
    takes precedence over ``storage_backend``.
    """
    resolved = settings or load_settings()
    prompt_store = store if store is not None else build_store(resolved)
    factory_logger.info(
        "Prompt library configured",
        extra={
            "storage_backend": resolved.storage_backend if store is None else "custom",
            "similarity_threshold": resolved.similarity_threshold,
            "cascade_history_delete": resolved.cascade_history_delete,
        },
    )
    return PromptLibrary(
        prompt_store,
        similarity_threshold=resolved.similarity_threshold,
        length_prefilter=resolved.length_prefilter,
        backup_channel=backup_channel,
        backup_timeout_seconds=resolved.backup_timeout_seconds,
        cascade_history_delete=resolved.cascade_history_delete,
    )


__all__ = ["build_prompt_library", "build_store"]
