"""Core service layer for Prompt Hive.

Updates:
  v0.3.0 - 2026-09-25 - Export activity, stats, and diff types from the library façade.
  v0.2.0 - 2026-09-24 - Export backup channel protocol and build_prompt_library factory.
  v0.1.0 - 2026-09-08 - Surface PromptLibrary, the save coordinator, and prompt stores.
"""

from models.category_model import PromptCategory
from models.prompt_model import ActivityEvent, HistoryEntry, Prompt

from .backup import BackupChannel, BackupDispatcher
from .exceptions import (
    PromptHistoryConflictError,
    PromptHiveError,
    PromptNotFoundError,
    PromptStorageError,
    PromptValidationError,
    PromptVersionError,
    PromptVersionNotFoundError,
)
from .factory import build_prompt_library, build_store
from .fingerprint import fingerprint
from .library import LibraryStats, PromptHistoryDiff, PromptLibrary
from .repository import (
    InMemoryPromptStore,
    PromptRepository,
    PromptStore,
    RepositoryConflictError,
    RepositoryError,
    RepositoryNotFoundError,
)
from .save_coordinator import CaptureMetadata, SaveCoordinator, SaveResult, SaveStatus
from .similarity import is_duplicate, levenshtein_distance, similarity
from .version_ledger import VersionLedger

__all__ = [
    "ActivityEvent",
    "BackupChannel",
    "BackupDispatcher",
    "CaptureMetadata",
    "HistoryEntry",
    "InMemoryPromptStore",
    "LibraryStats",
    "Prompt",
    "PromptCategory",
    "PromptHistoryConflictError",
    "PromptHistoryDiff",
    "PromptHiveError",
    "PromptLibrary",
    "PromptNotFoundError",
    "PromptRepository",
    "PromptStorageError",
    "PromptStore",
    "PromptValidationError",
    "PromptVersionError",
    "PromptVersionNotFoundError",
    "RepositoryConflictError",
    "RepositoryError",
    "RepositoryNotFoundError",
    "SaveCoordinator",
    "SaveResult",
    "SaveStatus",
    "VersionLedger",
    "build_prompt_library",
    "build_store",
    "fingerprint",
    "is_duplicate",
    "levenshtein_distance",
    "similarity",
]
