"""Data models for Prompt Hive.

Updates: v0.2.0 - 2026-09-21 - Export HistoryEntry and ActivityEvent dataclasses.
Updates: v0.1.0 - 2026-09-02 - Export Prompt dataclass and category enumeration.
"""

from .category_model import PromptCategory, detect_category
from .prompt_model import ActivityEvent, HistoryEntry, Prompt

__all__ = [
    "ActivityEvent",
    "HistoryEntry",
    "Prompt",
    "PromptCategory",
    "detect_category",
]
