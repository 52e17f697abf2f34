"""Keyword search over stored prompts.

Updates:
  v0.1.0 - 2026-09-13 - Add substring search across titles, text, and tags.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from models.category_model import PromptCategory

if TYPE_CHECKING:
    from models.prompt_model import Prompt

__all__ = ["PromptSearchMixin"]


def _matches(prompt: Prompt, needle: str) -> bool:
    if needle in prompt.title.lower() or needle in prompt.text.lower():
        return True
    return any(needle in tag.lower() for tag in prompt.tags)


class PromptSearchMixin:
    """Case-insensitive filtering of the prompt collection."""

    def search_prompts(
        self,
        query: str,
        category: PromptCategory | str | None = None,
    ) -> list[Prompt]:
        """Return prompts whose title, text, or tags contain *query*.

        A blank query matches everything; *category* narrows the result.
        """
        prompts: list[Prompt] = cast("Any", self).list_prompts()
        if category is not None:
            wanted = PromptCategory(str(getattr(category, "value", category)).lower())
            prompts = [prompt for prompt in prompts if prompt.category is wanted]
        needle = (query or "").strip().lower()
        if not needle:
            return prompts
        return [prompt for prompt in prompts if _matches(prompt, needle)]
