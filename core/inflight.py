"""Process-local guards that serialise concurrent prompt saves.

Updates:
  v0.2.0 - 2026-09-17 - Add per-identity locks for edits of the same prompt.
  v0.1.0 - 2026-09-05 - Replace ambient save queues with an owned in-flight registry.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterator

logger = logging.getLogger("prompt_hive.inflight")


class InFlightRegistry:
    """Track fingerprints whose save is currently running.

    Each claimed fingerprint maps to an :class:`threading.Event` that is set
    when the owning save finishes, so other callers can wait for it instead of
    polling. The registry is advisory and scoped to the instance that owns it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: dict[str, threading.Event] = {}

    def __contains__(self, fingerprint: object) -> bool:
        with self._lock:
            return fingerprint in self._pending

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def try_claim(self, fingerprint: str) -> bool:
        """Register *fingerprint*; return ``False`` when it is already in flight."""
        with self._lock:
            if fingerprint in self._pending:
                return False
            self._pending[fingerprint] = threading.Event()
            return True

    def release(self, fingerprint: str) -> None:
        """Drop *fingerprint* and wake anyone waiting on it."""
        with self._lock:
            signal = self._pending.pop(fingerprint, None)
        if signal is not None:
            signal.set()

    @contextmanager
    def claim(self, fingerprint: str) -> Iterator[bool]:
        """Claim *fingerprint* for the duration of the block.

        Yields ``True`` when this caller owns the claim. The claim is released
        on every exit path; a caller that did not obtain it releases nothing.
        """
        owned = self.try_claim(fingerprint)
        if not owned:
            logger.debug("Save already in flight", extra={"fingerprint": fingerprint})
        try:
            yield owned
        finally:
            if owned:
                self.release(fingerprint)

    def wait(self, fingerprint: str, timeout: float | None = None) -> bool:
        """Block until *fingerprint* is no longer in flight.

        Returns ``True`` when the save finished (or was never running) and
        ``False`` when *timeout* elapsed first.
        """
        with self._lock:
            signal = self._pending.get(fingerprint)
        if signal is None:
            return True
        return signal.wait(timeout)


class KeyedLocks:
    """Hand out one re-entrant lock per key, dropping it once nobody holds it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, tuple[threading.RLock, int]] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Acquire the lock for *key*, waiting for any current holder."""
        with self._guard:
            lock, users = self._locks.get(key, (threading.RLock(), 0))
            self._locks[key] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._guard:
                lock, users = self._locks[key]
                if users <= 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)


__all__ = ["InFlightRegistry", "KeyedLocks"]
