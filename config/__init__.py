"""Configuration helpers for Prompt Hive.

Updates: v0.1.1 - 2026-09-19 - Expose default duplicate threshold and backup timeout.
Updates: v0.1.0 - 2026-09-04 - Expose settings loader and configuration error types.
"""

from .settings import (
    DEFAULT_BACKUP_TIMEOUT_SECONDS,
    DEFAULT_DB_PATH,
    DEFAULT_SIMILARITY_THRESHOLD,
    PromptHiveSettings,
    SettingsError,
    load_settings,
)

__all__ = [
    "DEFAULT_BACKUP_TIMEOUT_SECONDS",
    "DEFAULT_DB_PATH",
    "DEFAULT_SIMILARITY_THRESHOLD",
    "PromptHiveSettings",
    "SettingsError",
    "load_settings",
]
