"""Tests for best-effort backup delivery.

Updates:
  v0.1.0 - 2026-09-18 - Cover acknowledged, declined, failing, and slow channels.
"""

from __future__ import annotations

import threading
import time

from core.backup import BackupDispatcher
from models.prompt_model import Prompt


class _RecordingChannel:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.sent: list[Prompt] = []

    def send(self, prompt: Prompt) -> bool:
        self.sent.append(prompt)
        return self.result


class _FailingChannel:
    def send(self, prompt: Prompt) -> bool:
        raise ConnectionError("receiver unavailable")


class _BlockingChannel:
    def __init__(self) -> None:
        self.release = threading.Event()

    def send(self, prompt: Prompt) -> bool:
        self.release.wait(timeout=5)
        return True


def test_dispatch_reports_acknowledgement() -> None:
    channel = _RecordingChannel()
    prompt = Prompt.new("Backup me")
    assert BackupDispatcher(channel).dispatch(prompt) is True
    assert channel.sent == [prompt]


def test_dispatch_reports_declined_delivery() -> None:
    assert BackupDispatcher(_RecordingChannel(result=False)).dispatch(Prompt.new("x")) is False


def test_dispatch_swallows_channel_errors() -> None:
    assert BackupDispatcher(_FailingChannel()).dispatch(Prompt.new("x")) is False


def test_dispatch_gives_up_after_timeout() -> None:
    channel = _BlockingChannel()
    dispatcher = BackupDispatcher(channel, timeout_seconds=0.05)
    started = time.monotonic()
    try:
        assert dispatcher.dispatch(Prompt.new("slow")) is False
        assert time.monotonic() - started < 2
    finally:
        channel.release.set()
