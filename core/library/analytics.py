"""Usage statistics for the prompt library.

Updates:
  v0.1.0 - 2026-09-20 - Add collection stats and recent activity counts.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, cast

from ..repository import RepositoryError

if TYPE_CHECKING:
    from models.prompt_model import Prompt

    from ..repository import PromptStore

logger = logging.getLogger("prompt_hive.library.analytics")

RECENT_ACTIVITY_WINDOW = timedelta(days=7)
POPULAR_TAG_LIMIT = 10
MOST_USED_LIMIT = 5

__all__ = ["AnalyticsMixin", "LibraryStats"]


@dataclass(slots=True)
class LibraryStats:
    """Aggregated usage metrics across every live prompt."""

    total_prompts: int
    total_tags: int
    total_uses: int
    average_uses: float
    reuse_rate: int
    most_used: list[Prompt] = field(default_factory=list)
    category_breakdown: dict[str, int] = field(default_factory=dict)
    popular_tags: list[tuple[str, int]] = field(default_factory=list)
    recent_activity: int = 0


class AnalyticsMixin:
    """Compute collection statistics from the live prompts and activity log."""

    _store: PromptStore

    def get_stats(self) -> LibraryStats:
        """Return usage metrics for the library.

        ``reuse_rate`` is the percentage of prompts used more than once and
        ``recent_activity`` counts log entries from the last seven days.
        """
        prompts: list[Prompt] = cast("Any", self).list_prompts()
        total = len(prompts)
        total_uses = sum(prompt.uses for prompt in prompts)
        tag_counts: Counter[str] = Counter(tag for prompt in prompts for tag in prompt.tags)
        categories: Counter[str] = Counter(prompt.category.value for prompt in prompts)
        reused = sum(1 for prompt in prompts if prompt.uses > 1)
        most_used = sorted(
            (prompt for prompt in prompts if prompt.uses > 0),
            key=lambda prompt: prompt.uses,
            reverse=True,
        )[:MOST_USED_LIMIT]

        return LibraryStats(
            total_prompts=total,
            total_tags=len(tag_counts),
            total_uses=total_uses,
            average_uses=round(total_uses / total, 1) if total else 0.0,
            reuse_rate=round(reused / total * 100) if total else 0,
            most_used=most_used,
            category_breakdown=dict(categories),
            popular_tags=tag_counts.most_common(POPULAR_TAG_LIMIT),
            recent_activity=self._count_recent_activity(),
        )

    def _count_recent_activity(self) -> int:
        since = datetime.now(UTC) - RECENT_ACTIVITY_WINDOW
        try:
            return len(self._store.list_activity(since))
        except RepositoryError:
            logger.warning("Unable to read activity log", exc_info=True)
            return 0
