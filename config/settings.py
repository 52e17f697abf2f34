"""Settings management utilities for Prompt Hive configuration.

Updates:
  v0.2.1 - 2026-09-27 - Read .env values through python-dotenv only.
  v0.2.0 - 2026-09-19 - Add duplicate detection, backup, and history retention settings.
  v0.1.0 - 2026-09-04 - Introduce environment and JSON file settings sources.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, cast

from dotenv import dotenv_values
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

_DOTENV_FALLBACK_PATH = ".env"
_ENV_PREFIX = "PROMPT_HIVE_"

DEFAULT_DB_PATH = Path("data") / "prompt_hive.db"
DEFAULT_SIMILARITY_THRESHOLD = 0.9
DEFAULT_BACKUP_TIMEOUT_SECONDS = 2.0

StorageBackend = Literal["sqlite", "memory"]

# Settings that may be provided through the environment, .env, or the JSON file.
_SETTING_KEYS: tuple[str, ...] = (
    "db_path",
    "storage_backend",
    "similarity_threshold",
    "length_prefilter",
    "backup_timeout_seconds",
    "cascade_history_delete",
)


def _read_dotenv_values() -> dict[str, str]:
    """Load ``.env`` entries into a mapping without mutating ``os.environ``."""
    env_file_override = os.getenv(f"{_ENV_PREFIX}ENV_FILE")
    if env_file_override is not None:
        candidate = env_file_override.strip()
        if not candidate:
            return {}
        path = Path(candidate).expanduser()
    else:
        path = Path(_DOTENV_FALLBACK_PATH).expanduser()
    if not path.is_file():
        return {}
    raw_values = dotenv_values(str(path))
    return {str(key): str(value) for key, value in raw_values.items() if value is not None}


class SettingsError(Exception):
    """Raised when Prompt Hive configuration cannot be loaded or validated."""


class PromptHiveSettings(BaseSettings):
    """Library configuration sourced from environment variables or JSON files."""

    db_path: Path = Field(default=DEFAULT_DB_PATH)
    storage_backend: StorageBackend = Field(
        default="sqlite",
        description="Prompt store implementation: persistent SQLite or process memory.",
    )
    similarity_threshold: float = Field(
        default=DEFAULT_SIMILARITY_THRESHOLD,
        description="Similarity ratio above which captured text counts as a duplicate.",
    )
    length_prefilter: bool = Field(
        default=True,
        description="Skip edit-distance work for pairs whose lengths rule out a match.",
    )
    backup_timeout_seconds: float = Field(
        default=DEFAULT_BACKUP_TIMEOUT_SECONDS,
        description="Maximum wait for the backup channel after each commit.",
    )
    cascade_history_delete: bool = Field(
        default=False,
        description="Remove archived versions together with a deleted prompt.",
    )

    model_config = cast(
        "SettingsConfigDict",
        {
            "env_prefix": _ENV_PREFIX,
            "case_sensitive": False,
            "extra": "ignore",
        },
    )

    @field_validator("db_path", mode="before")
    def _normalise_path(cls, value: Any) -> Path:
        """Expand user-relative paths and coerce values to Path instances."""
        if value is None or not str(value).strip():
            raise ValueError("a filesystem path is required")
        path = Path(str(value).strip()).expanduser()
        return path.resolve()

    @field_validator("storage_backend", mode="before")
    def _normalise_backend(cls, value: Any) -> str:
        """Accept backend names regardless of case or surrounding whitespace."""
        if value is None:
            return "sqlite"
        return str(value).strip().lower()

    @field_validator("similarity_threshold")
    def _validate_threshold(cls, value: float) -> float:
        """Ensure the duplicate threshold is a ratio in ``(0, 1]``."""
        if not 0.0 < value <= 1.0:
            raise ValueError("similarity_threshold must be greater than 0 and at most 1")
        return value

    @field_validator("backup_timeout_seconds")
    def _validate_backup_timeout(cls, value: float) -> float:
        """Ensure the backup wait is positive."""
        if value <= 0:
            raise ValueError("backup_timeout_seconds must be greater than zero")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        """Define configuration source precedence.

        Order (highest → lowest):
            1. Explicit keyword arguments (e.g. load_settings(storage_backend="memory")).
            2. JSON configuration file.
            3. Environment variables, then ``.env`` entries.
            4. File secrets.
        """

        def env_with_dotenv(_: BaseSettings | None = None) -> dict[str, Any]:
            data: dict[str, Any] = {}
            dotenv_data = _read_dotenv_values()

            def _lookup(candidate: str) -> str | None:
                value = os.getenv(candidate)
                if value is None:
                    value = dotenv_data.get(candidate)
                if value is None:
                    return None
                stripped_value = str(value).strip()
                return stripped_value or None

            for key in _SETTING_KEYS:
                for candidate in (f"{_ENV_PREFIX}{key.upper()}", f"{_ENV_PREFIX}{key}"):
                    value = _lookup(candidate)
                    if value is not None:
                        data[key] = value
                        break
            return data

        return (
            init_settings,
            cls._json_config_settings_source(settings_cls),
            cast("PydanticBaseSettingsSource", env_with_dotenv),
            file_secret_settings,
        )

    @classmethod
    def _json_config_settings_source(
        cls,
        _: type[BaseSettings],
    ) -> PydanticBaseSettingsSource:
        """Return settings extracted from an optional JSON config file."""

        def _loader(_: BaseSettings | None = None) -> dict[str, Any]:
            explicit_path = os.getenv(f"{_ENV_PREFIX}CONFIG_JSON")
            if explicit_path:
                path = Path(explicit_path).expanduser()
                if not path.exists():
                    raise SettingsError(f"Configuration file not found: {path}")
            else:
                path = Path("config") / "config.json"
                if not path.exists():
                    return {}
            try:
                raw_contents = path.read_text(encoding="utf-8")
            except OSError as exc:  # pragma: no cover - filesystem failure is env-specific
                raise SettingsError(f"Unable to read configuration file: {path}") from exc
            try:
                data = json.loads(raw_contents)
            except json.JSONDecodeError as exc:
                raise SettingsError(f"Invalid JSON in configuration file: {path}") from exc
            if not isinstance(data, dict):
                message = f"Configuration file {path} must contain a JSON object"
                raise SettingsError(message)
            mapping_data = cast("Mapping[object, Any]", data)
            data_dict: dict[str, Any] = {str(key): value for key, value in mapping_data.items()}
            mapped = {key: data_dict[key] for key in _SETTING_KEYS if key in data_dict}
            if "database_path" in data_dict and "db_path" not in mapped:
                mapped["db_path"] = data_dict["database_path"]
            unknown = sorted(set(data_dict) - set(_SETTING_KEYS) - {"database_path"})
            if unknown:
                logger.warning(
                    "Ignoring unknown key(s) %s in configuration file %s",
                    ", ".join(unknown),
                    path,
                )
            return mapped

        return cast("PydanticBaseSettingsSource", _loader)


def load_settings(**overrides: Any) -> PromptHiveSettings:
    """Return validated settings, raising SettingsError on failure."""
    try:
        return PromptHiveSettings(**overrides)
    except SettingsError:
        raise
    except ValidationError as exc:
        raise SettingsError("Invalid Prompt Hive configuration") from exc


logger = logging.getLogger("prompt_hive.settings")
