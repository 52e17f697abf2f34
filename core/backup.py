"""Best-effort secondary delivery of committed prompts.

Updates:
  v0.1.0 - 2026-09-18 - Add backup channel dispatch with a bounded wait.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from models.prompt_model import Prompt

logger = logging.getLogger("prompt_hive.backup")

DEFAULT_BACKUP_TIMEOUT_SECONDS = 2.0


class BackupChannel(Protocol):
    """Secondary sink that receives a copy of every committed prompt."""

    def send(self, prompt: Prompt) -> bool:
        """Deliver *prompt*; return ``True`` when the receiver acknowledged it."""
        ...


class BackupDispatcher:
    """Hand prompts to a :class:`BackupChannel` without blocking the caller for long.

    Each delivery runs on a daemon thread. The caller waits at most
    ``timeout_seconds``; a slow, failing, or silent channel is reported as an
    unsuccessful delivery and never raises.
    """

    def __init__(
        self,
        channel: BackupChannel,
        *,
        timeout_seconds: float = DEFAULT_BACKUP_TIMEOUT_SECONDS,
    ) -> None:
        self._channel = channel
        self._timeout_seconds = max(0.0, float(timeout_seconds))

    @property
    def timeout_seconds(self) -> float:
        """Return the maximum time a dispatch waits for the channel."""
        return self._timeout_seconds

    def dispatch(self, prompt: Prompt) -> bool:
        """Send *prompt* and return whether the channel confirmed in time."""
        outcome: dict[str, bool] = {}
        finished = threading.Event()

        def _deliver() -> None:
            try:
                outcome["delivered"] = bool(self._channel.send(prompt))
            except Exception:  # noqa: BLE001 - secondary channel failures are reported, not raised
                logger.warning(
                    "Backup channel raised while delivering prompt",
                    exc_info=True,
                    extra={"prompt_id": str(prompt.id)},
                )
                outcome["delivered"] = False
            finally:
                finished.set()

        worker = threading.Thread(
            target=_deliver,
            name=f"prompt-backup-{prompt.id}",
            daemon=True,
        )
        worker.start()
        if not finished.wait(self._timeout_seconds):
            logger.warning(
                "Backup channel timed out",
                extra={"prompt_id": str(prompt.id), "timeout_seconds": self._timeout_seconds},
            )
            return False
        delivered = outcome.get("delivered", False)
        if not delivered:
            logger.info("Backup channel declined prompt", extra={"prompt_id": str(prompt.id)})
        return delivered


__all__ = ["DEFAULT_BACKUP_TIMEOUT_SECONDS", "BackupChannel", "BackupDispatcher"]
