"""Append-only lifecycle events for one launched session."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

from ..utils import monotonic_ms, now_utc_iso


@dataclass
class SessionEventLog:
    """Records launcher milestones; with no `path` events are built but not persisted."""

    path: Path | None
    session_id: str
    started_ms: int = field(default_factory=monotonic_ms, init=False)
    emitted: list[dict[str, Any]] = field(default_factory=list, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, init=False)

    def emit(self, event_type: str, **payload: Any) -> dict[str, Any]:
        event = {
            "type": event_type,
            "session_id": self.session_id,
            "ts": now_utc_iso(),
            "elapsed_ms": monotonic_ms() - self.started_ms,
        }
        event.update(payload)
        with self._lock:
            self.emitted.append(event)
            if self.path is not None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(f"{json.dumps(event)}\n")
        return event

    def types(self) -> list[str]:
        with self._lock:
            return [event["type"] for event in self.emitted]
