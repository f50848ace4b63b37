"""Inactivity auto-close countdown."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from ..config import DEFAULT_TIMEOUT_S

LOW_TIME_S = 5


@dataclass(frozen=True)
class CountdownUpdate:
    remaining_s: int
    active: bool
    paused: bool

    @property
    def low_time(self) -> bool:
        return self.active and self.remaining_s <= LOW_TIME_S


class TickSource(Protocol):
    """Schedules `callback` every `interval_s` seconds until stopped."""

    def start(self, callback: Callable[[], None], interval_s: float) -> None:
        ...

    def stop(self) -> None:
        ...


class SessionTimer:
    """Counts down once per tick and fires `expired` a single time at zero.

    Pausing suspends the countdown entirely: ticks are ignored and resets
    triggered by user activity are dropped until the timer is resumed.
    """

    def __init__(self, tick_source: TickSource, timeout_s: int = DEFAULT_TIMEOUT_S) -> None:
        self.tick_source = tick_source
        self.timeout_s = timeout_s
        self.remaining_s = 0
        self.paused = False
        self.active = False
        self._ticking = False
        self._countdown_listeners: list[Callable[[CountdownUpdate], None]] = []
        self._expired_listeners: list[Callable[[], None]] = []

    def on_countdown(self, listener: Callable[[CountdownUpdate], None]) -> None:
        self._countdown_listeners.append(listener)

    def on_expired(self, listener: Callable[[], None]) -> None:
        self._expired_listeners.append(listener)

    def snapshot(self) -> CountdownUpdate:
        return CountdownUpdate(remaining_s=self.remaining_s, active=self.active, paused=self.paused)

    def start(self, timeout_s: int | None = None) -> None:
        timeout = self.timeout_s if timeout_s is None else timeout_s
        if timeout <= 0:
            raise ValueError("timeout_s must be positive")
        self._halt()
        self.timeout_s = timeout
        self.remaining_s = timeout
        self.active = True
        self.paused = False
        self._resume()
        self._emit_countdown()

    def stop(self) -> None:
        self._halt()
        self.active = False
        self.remaining_s = 0
        self._emit_countdown()

    def reset(self, timeout_s: int | None = None) -> bool:
        if self.paused:
            return False
        self.start(timeout_s)
        return True

    def toggle_pause(self) -> bool:
        self.paused = not self.paused
        if self.paused:
            self._halt()
        elif self.active and self.remaining_s > 0:
            self._resume()
        self._emit_countdown()
        return self.paused

    def should_be_active(self, has_text: bool) -> bool:
        return not has_text and not self.paused

    def tick(self) -> None:
        if not self.active or self.paused:
            return
        self.remaining_s = max(0, self.remaining_s - 1)
        if self.remaining_s > 0:
            self._emit_countdown()
            return
        self.stop()
        for listener in list(self._expired_listeners):
            listener()

    def _resume(self) -> None:
        if self._ticking:
            return
        self.tick_source.start(self.tick, 1.0)
        self._ticking = True

    def _halt(self) -> None:
        if not self._ticking:
            return
        self.tick_source.stop()
        self._ticking = False

    def _emit_countdown(self) -> None:
        update = self.snapshot()
        for listener in list(self._countdown_listeners):
            listener(update)
