"""Prompt category taxonomy and keyword-based detection.

Updates: v0.2.0 - 2026-09-14 - Replace editable category records with a fixed enumeration.
Updates: v0.1.0 - 2026-09-02 - Introduce category keyword rules.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any


class PromptCategory(str, Enum):
    """Fixed set of categories a prompt can be filed under."""

    CODING = "coding"
    WRITING = "writing"
    ANALYSIS = "analysis"
    CREATIVE = "creative"
    GENERAL = "general"


# Rules are evaluated in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: Sequence[tuple[PromptCategory, tuple[str, ...]]] = (
    (
        PromptCategory.CODING,
        (
            "code",
            "function",
            "javascript",
            "python",
            "react",
            "api",
            "debug",
            "programming",
            "algorithm",
            "database",
        ),
    ),
    (
        PromptCategory.WRITING,
        ("write", "article", "blog", "content", "essay", "story", "copywriting", "marketing"),
    ),
    (
        PromptCategory.ANALYSIS,
        ("analyze", "research", "data", "study", "report", "statistics", "insights", "trends"),
    ),
    (
        PromptCategory.CREATIVE,
        ("creative", "design", "art", "music", "brainstorm", "innovative", "imagination"),
    ),
)


def detect_category(text: str | None) -> PromptCategory:
    """Return the category whose keywords first appear in *text*.

    Matching is case-insensitive substring search, so ``"debugging"`` counts as
    ``"debug"``. Text without any keyword falls back to :attr:`PromptCategory.GENERAL`.
    """
    lowered = (text or "").lower()
    if not lowered:
        return PromptCategory.GENERAL
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return PromptCategory.GENERAL


def parse_category(value: Any, *, text: str | None = None) -> PromptCategory:
    """Coerce stored category values, deriving one from *text* when unknown."""
    if isinstance(value, PromptCategory):
        return value
    candidate = str(value or "").strip().lower()
    if candidate:
        try:
            return PromptCategory(candidate)
        except ValueError:
            pass
    return detect_category(text)


__all__ = ["CATEGORY_KEYWORDS", "PromptCategory", "detect_category", "parse_category"]
