"""Edit-distance similarity used to detect near-duplicate prompts.

Updates:
  v0.2.0 - 2026-09-16 - Add exact length-ratio pre-filter for duplicate scans.
  v0.1.0 - 2026-09-03 - Introduce Levenshtein ratio and duplicate predicate.
"""

from __future__ import annotations

DEFAULT_DUPLICATE_THRESHOLD = 0.9


def levenshtein_distance(first: str, second: str) -> int:
    """Return the unit-cost edit distance between *first* and *second*.

    Only two rows of the dynamic-programming table are kept, sized by the
    shorter string, so memory stays O(min(len(first), len(second))).
    """
    if first == second:
        return 0
    if len(first) < len(second):
        first, second = second, first
    if not second:
        return len(first)

    previous = list(range(len(second) + 1))
    for row, char_a in enumerate(first, start=1):
        current = [row]
        for column, char_b in enumerate(second, start=1):
            if char_a == char_b:
                current.append(previous[column - 1])
            else:
                current.append(
                    min(
                        previous[column - 1] + 1,  # substitution
                        current[column - 1] + 1,  # insertion
                        previous[column] + 1,  # deletion
                    )
                )
        previous = current
    return previous[-1]


def similarity(first: str, second: str) -> float:
    """Return ``(max_len - distance) / max_len``; ``1.0`` when both are empty."""
    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    distance = levenshtein_distance(first, second)
    return (longest - distance) / longest


def within_length_ratio(
    first: str,
    second: str,
    threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
) -> bool:
    """Return ``True`` when the pair could still exceed *threshold*.

    The edit distance is at least the length difference, so a pair whose
    shorter length is not above ``threshold * longer`` cannot be similar
    enough and the distance computation can be skipped.
    """
    longest = max(len(first), len(second))
    if longest == 0:
        return True
    shortest = min(len(first), len(second))
    return shortest > threshold * longest


def is_duplicate(
    first: str,
    second: str,
    threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
    *,
    prefilter: bool = True,
) -> bool:
    """Return ``True`` for identical-after-trim text or similarity above *threshold*."""
    if first.strip() == second.strip():
        return True
    if prefilter and not within_length_ratio(first, second, threshold):
        return False
    return similarity(first, second) > threshold


__all__ = [
    "DEFAULT_DUPLICATE_THRESHOLD",
    "is_duplicate",
    "levenshtein_distance",
    "similarity",
    "within_length_ratio",
]
