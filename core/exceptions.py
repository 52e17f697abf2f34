"""Common exception classes for the core package.

All exceptions ultimately inherit from :class:`PromptHiveError`, allowing
callers to catch a single base class for any library failure while still
distinguishing individual error categories when needed.

Duplicate captures are not errors; they are reported through
:class:`core.save_coordinator.SaveResult` instead.

Updates:
  v0.3.0 - 2026-09-19 - Add history conflict error for double archival.
  v0.2.0 - 2026-09-12 - Add prompt versioning exception hierarchy.
  v0.1.0 - 2026-09-02 - Created module.
"""

from __future__ import annotations


class PromptHiveError(Exception):
    """Base exception for Prompt Hive failures."""


class PromptValidationError(PromptHiveError):
    """Raised when submitted prompt content is unusable (e.g. blank text)."""


class PromptNotFoundError(PromptHiveError):
    """Raised when a prompt cannot be located in the backing store."""


class PromptStorageError(PromptHiveError):
    """Raised when interactions with the persistent store fail."""


class PromptVersionError(PromptHiveError):
    """Base class for prompt versioning workflow failures."""


class PromptVersionNotFoundError(PromptVersionError):
    """Raised when the requested history version does not exist."""


class PromptHistoryConflictError(PromptVersionError):
    """Raised when a prompt version has already been archived."""

    def __init__(self, prompt_id: object, version: int) -> None:
        super().__init__(f"Version {version} of prompt {prompt_id} is already archived")
        self.prompt_id = prompt_id
        self.version = version


__all__ = [
    "PromptHiveError",
    "PromptHistoryConflictError",
    "PromptNotFoundError",
    "PromptStorageError",
    "PromptValidationError",
    "PromptVersionError",
    "PromptVersionNotFoundError",
]
