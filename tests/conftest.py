from __future__ import annotations

from typing import Callable

import pytest


class FakeTicks:
    """Manually advanced stand-in for the UI event loop's one-second timer."""

    def __init__(self) -> None:
        self.callback: Callable[[], None] | None = None
        self.running = False
        self.starts = 0

    def start(self, callback: Callable[[], None], interval_s: float) -> None:
        assert interval_s == 1.0
        self.callback = callback
        self.running = True
        self.starts += 1

    def stop(self) -> None:
        self.running = False

    def advance(self, seconds: int = 1) -> None:
        for _ in range(seconds):
            if self.running and self.callback is not None:
                self.callback()


@pytest.fixture
def ticks() -> FakeTicks:
    return FakeTicks()
