"""Prompt, history, and activity data model definitions.

Updates: v0.4.0 - 2026-09-21 - Add activity events mirroring the capture analytics log.
Updates: v0.3.0 - 2026-09-18 - Apply legacy record defaults once at load time.
Updates: v0.2.0 - 2026-09-14 - Add immutable history entries for the version ledger.
Updates: v0.1.0 - 2026-09-02 - Initial Prompt schema with serialization helpers.
"""
from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping, MutableMapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from .category_model import PromptCategory, detect_category, parse_category

DEFAULT_PROMPT_TITLE = "Untitled Prompt"

# Legacy identifiers (timestamp + random suffix strings) map onto stable UUIDs.
_LEGACY_ID_NAMESPACE = uuid.UUID("5b0c8c5e-2f4a-4f4e-9a57-6f1f0d7d3c21")


def _utc_now() -> datetime:
    """Return an aware UTC timestamp."""
    return datetime.now(UTC)


def _ensure_uuid(value: Any) -> uuid.UUID:
    """Parse arbitrary identifier representations into a uuid.UUID instance."""
    if isinstance(value, uuid.UUID):
        return value
    text = str(value).strip()
    try:
        return uuid.UUID(text)
    except ValueError:
        return uuid.uuid5(_LEGACY_ID_NAMESPACE, text)


def _ensure_datetime(value: Any, default: datetime | None = None) -> datetime:
    """Parse incoming datetime values (isoformat strings, epoch millis, or datetime)."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if value is None or value == "":
        return default or _utc_now()
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(float(value) / 1000.0, tz=UTC)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def normalise_tags(items: Iterable[Any] | str | None) -> list[str]:
    """Return trimmed tags deduplicated case-insensitively in insertion order."""
    if items is None:
        return []
    if isinstance(items, str):
        items = items.split(",")
    tags: list[str] = []
    seen: set[str] = set()
    for raw in items:
        text = str(raw).strip()
        if not text:
            continue
        key = text.lower()
        if key in seen:
            continue
        seen.add(key)
        tags.append(text)
    return tags


def _normalise_version(value: Any) -> int:
    """Return a positive integer version derived from mixed inputs."""
    if value is None or value == "":
        return 1
    try:
        number = int(float(str(value).strip()))
    except ValueError:
        return 1
    return max(1, number)


def _normalise_title(value: Any) -> str:
    text = str(value or "").strip()
    return text or DEFAULT_PROMPT_TITLE


def _capture_date(moment: datetime) -> str:
    return moment.date().isoformat()


@dataclass(slots=True)
class Prompt:
    """Live prompt record owned by the prompt store."""

    id: uuid.UUID
    title: str
    text: str
    tags: list[str] = field(default_factory=list)
    category: PromptCategory = PromptCategory.GENERAL
    uses: int = 0
    version: int = 1
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)
    date: str | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        """Normalise tags, title, version, and category values."""
        self.title = _normalise_title(self.title)
        self.tags = normalise_tags(self.tags)
        self.version = _normalise_version(self.version)
        self.uses = max(0, int(self.uses or 0))
        self.category = parse_category(self.category, text=self.text)
        if self.date is None:
            self.date = _capture_date(self.created_at)

    @classmethod
    def new(
        cls,
        text: str,
        *,
        title: str | None = None,
        tags: Iterable[str] | None = None,
        source: str | None = None,
        now: datetime | None = None,
    ) -> Prompt:
        """Return a fresh version-1 prompt for the provided content."""
        timestamp = now or _utc_now()
        body = text.strip()
        return cls(
            id=uuid.uuid4(),
            title=title or "",
            text=body,
            tags=list(tags or []),
            category=detect_category(body),
            uses=0,
            version=1,
            created_at=timestamp,
            updated_at=timestamp,
            date=_capture_date(timestamp),
            source=source or None,
        )

    def with_content(
        self,
        *,
        title: str,
        text: str,
        tags: Iterable[str],
        version: int,
        updated_at: datetime | None = None,
    ) -> Prompt:
        """Return a copy carrying new content at *version*; identity fields are kept."""
        body = text.strip()
        return replace(
            self,
            title=title,
            text=body,
            tags=list(tags),
            category=detect_category(body),
            version=version,
            updated_at=updated_at or _utc_now(),
        )

    def to_record(self) -> dict[str, Any]:
        """Return a plain dictionary representation for persistence."""
        return {
            "id": str(self.id),
            "title": self.title,
            "text": self.text,
            "tags": list(self.tags),
            "category": self.category.value,
            "uses": self.uses,
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "date": self.date,
            "source": self.source,
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> Prompt:
        """Create a Prompt from a stored mapping, filling fields older records lack.

        Both the snake_case layout and the camelCase layout written by earlier
        capture clients (``createdAt``/``updatedAt``) are accepted.
        """
        text = str(data.get("text") or "").strip()
        created_at = _ensure_datetime(data.get("created_at") or data.get("createdAt"))
        updated_at = _ensure_datetime(
            data.get("updated_at") or data.get("updatedAt"),
            default=created_at,
        )
        raw_id = data.get("id")
        return cls(
            id=_ensure_uuid(raw_id) if raw_id not in (None, "") else uuid.uuid4(),
            title=str(data.get("title") or ""),
            text=text,
            tags=normalise_tags(data.get("tags")),
            category=parse_category(data.get("category"), text=text),
            uses=int(data.get("uses") or 0),
            version=_normalise_version(data.get("version")),
            created_at=created_at,
            updated_at=updated_at,
            date=str(data["date"]) if data.get("date") else None,
            source=str(data["source"]) if data.get("source") else None,
        )


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    """Immutable snapshot of a prompt taken before a mutation was applied."""

    history_id: str
    prompt_id: uuid.UUID
    version: int
    title: str
    text: str
    tags: tuple[str, ...]
    created_at: datetime
    original_date: str | None = None
    original_uses: int = 0

    @classmethod
    def from_prompt(cls, prompt: Prompt, *, created_at: datetime | None = None) -> HistoryEntry:
        """Snapshot *prompt* at its current version."""
        timestamp = created_at or _utc_now()
        epoch_ms = int(timestamp.timestamp() * 1000)
        return cls(
            history_id=f"{prompt.id}_v{prompt.version}_{epoch_ms}",
            prompt_id=prompt.id,
            version=prompt.version,
            title=prompt.title,
            text=prompt.text,
            tags=tuple(prompt.tags),
            created_at=timestamp,
            original_date=prompt.date,
            original_uses=prompt.uses,
        )

    def to_record(self) -> dict[str, Any]:
        """Return a dictionary representation suitable for persistence."""
        return {
            "history_id": self.history_id,
            "prompt_id": str(self.prompt_id),
            "version": self.version,
            "title": self.title,
            "text": self.text,
            "tags": list(self.tags),
            "created_at": self.created_at.isoformat(),
            "original_date": self.original_date,
            "original_uses": self.original_uses,
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> HistoryEntry:
        """Hydrate a HistoryEntry from a mapping."""
        prompt_id = _ensure_uuid(data.get("prompt_id") or data.get("promptId"))
        version = _normalise_version(data.get("version"))
        created_at = _ensure_datetime(data.get("created_at") or data.get("createdAt"))
        history_id = data.get("history_id") or data.get("historyId")
        if not history_id:
            history_id = f"{prompt_id}_v{version}_{int(created_at.timestamp() * 1000)}"
        original_uses = data.get("original_uses", data.get("originalUses"))
        original_date = data.get("original_date") or data.get("originalDate")
        return cls(
            history_id=str(history_id),
            prompt_id=prompt_id,
            version=version,
            title=_normalise_title(data.get("title")),
            text=str(data.get("text") or ""),
            tags=tuple(normalise_tags(data.get("tags"))),
            created_at=created_at,
            original_date=str(original_date) if original_date else None,
            original_uses=int(original_uses or 0),
        )


@dataclass(slots=True)
class ActivityEvent:
    """Single entry of the prompt activity log."""

    action: str
    prompt_id: uuid.UUID | None = None
    metadata: MutableMapping[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utc_now)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def to_record(self) -> dict[str, Any]:
        """Return a dictionary representation suitable for persistence."""
        return {
            "id": str(self.id),
            "action": self.action,
            "prompt_id": str(self.prompt_id) if self.prompt_id is not None else None,
            "metadata": dict(self.metadata),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> ActivityEvent:
        """Hydrate an ActivityEvent from a mapping."""
        metadata = data.get("metadata")
        prompt_id = data.get("prompt_id")
        return cls(
            id=_ensure_uuid(data.get("id") or uuid.uuid4()),
            action=str(data.get("action") or ""),
            prompt_id=_ensure_uuid(prompt_id) if prompt_id else None,
            metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
            timestamp=_ensure_datetime(data.get("timestamp")),
        )


__all__ = [
    "ActivityEvent",
    "DEFAULT_PROMPT_TITLE",
    "HistoryEntry",
    "Prompt",
    "normalise_tags",
]
