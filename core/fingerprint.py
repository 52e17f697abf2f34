"""Content fingerprints for suppressing repeated in-flight saves.

Updates:
  v0.1.0 - 2026-09-03 - Introduce 32-bit rolling hash fingerprints.
"""

from __future__ import annotations

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _to_int32(value: int) -> int:
    value &= _INT32_MASK
    return value - (1 << 32) if value & _INT32_SIGN else value


def rolling_hash(value: str) -> int:
    """Return the signed 32-bit ``h * 31 + code`` hash of *value*."""
    result = 0
    for char in value:
        result = _to_int32((result << 5) - result + ord(char))
    return result


def fingerprint(text: str, context_key: str | None = "") -> str:
    """Return a deterministic token for *text* captured within *context_key*.

    Not collision free and not a storage key; only used to spot the same
    content being saved twice at once.
    """
    return str(rolling_hash(text.strip() + (context_key or "")))


__all__ = ["fingerprint", "rolling_hash"]
