"""Source detection and capture defaults for prompts saved from web pages.

Updates:
  v0.1.0 - 2026-09-10 - Detect capture source types and build default titles/tags.
"""

from __future__ import annotations

from urllib.parse import urlparse

from models.category_model import PromptCategory, detect_category

SELECTION_TAG = "auto-saved"
RESPONSE_TAG = "ai-response"
_MAX_TITLE_LENGTH = 50

# Hostname fragments checked in order; the first match names the source type.
_SOURCE_HOSTS: tuple[tuple[str, str], ...] = (
    ("openai.com", "chatgpt"),
    ("chat.openai", "chatgpt"),
    ("claude.ai", "claude"),
    ("bard.google", "bard"),
    ("github.com", "github"),
    ("stackoverflow.com", "stackoverflow"),
    ("medium.com", "medium"),
    ("perplexity.ai", "perplexity"),
    ("gemini.google", "gemini"),
)


def detect_source_type(source: str | None) -> str:
    """Return a short label for the site a prompt was captured from."""
    if not source:
        return "web"
    url = source.strip().lower()
    hostname = urlparse(url).hostname or ""
    for fragment, label in _SOURCE_HOSTS:
        if fragment in hostname:
            return label
    if "reddit.com" in url:
        return "reddit"
    return "web"


def truncate_title(value: str | None, limit: int = _MAX_TITLE_LENGTH) -> str:
    """Return *value* trimmed to *limit* characters with an ellipsis."""
    text = (value or "").strip()
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def selection_title(page_title: str | None) -> str:
    """Return the default title for text selected on a page."""
    title = truncate_title(page_title)
    return f"Saved from {title}" if title else "Saved selection"


def capture_tags(marker: str, source: str | None) -> list[str]:
    """Return default tags for an automated capture."""
    return [marker, detect_source_type(source)]


__all__ = [
    "PromptCategory",
    "RESPONSE_TAG",
    "SELECTION_TAG",
    "capture_tags",
    "detect_category",
    "detect_source_type",
    "selection_title",
    "truncate_title",
]
