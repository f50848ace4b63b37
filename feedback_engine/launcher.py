"""Runs a feedback session as a child process and recovers its result file."""

from __future__ import annotations

import logging
import subprocess
import threading
import time
import uuid
from pathlib import Path
from typing import IO, Callable, Sequence

from .config import LauncherConfig
from .errors import EmptyResultError, MalformedResultError, ResultWriteError, SpawnFailureError
from .runs.events import SessionEventLog
from .runs.result import ResultPayload, fallback_result, read_result, write_result
from .utils import ensure_dir

logger = logging.getLogger(__name__)

_READY = "ready"
_EMPTY = "empty"
_MISSING = "missing"


def new_result_path(results_dir: Path) -> Path:
    ensure_dir(results_dir)
    stamp = int(time.time() * 1000)
    return results_dir / f"feedback_{stamp}_{uuid.uuid4().hex[:8]}.json"


class SessionLauncher:
    """Spawns the session process and reads back the JSON it leaves behind.

    The child is never timed out from here; its own inactivity countdown bounds
    the session. The only bounded wait is the post-exit polling window, which
    covers the gap between the child finishing its write and the file becoming
    visible to this process.
    """

    def __init__(
        self,
        config: LauncherConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or LauncherConfig()
        self.sleep = sleep
        self.last_events: SessionEventLog | None = None

    def run(self, args: Sequence[str], expected_path: Path) -> ResultPayload:
        events = SessionEventLog(self.config.events_path, expected_path.stem)
        self.last_events = events
        command = [*self.config.command, *[str(arg) for arg in args]]
        logger.info("launching feedback session: %s", command)
        try:
            proc = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except (OSError, ValueError) as exc:
            events.emit("result_failed", reason="spawn", error=str(exc))
            raise SpawnFailureError(f"Error launching feedback session: {exc}") from exc
        events.emit("session_spawned", pid=proc.pid, result_path=str(expected_path))

        drainers = [
            self._start_drainer(proc.stdout, "stdout"),
            self._start_drainer(proc.stderr, "stderr"),
        ]
        returncode = proc.wait()
        for drainer in drainers:
            if drainer is not None:
                drainer.join(timeout=1.0)
        logger.info("feedback session exited with code %s", returncode)
        events.emit("session_exited", returncode=returncode)

        self.sleep(self.config.settle_delay_s)
        state = self._await_result_file(expected_path)

        if state == _MISSING:
            fallback = fallback_result()
            try:
                write_result(fallback, expected_path)
            except ResultWriteError as exc:
                logger.warning("could not write fallback result: %s", exc)
            events.emit("result_fallback_written", result_path=str(expected_path))
            logger.info("no feedback submitted; returning fallback result")
            return fallback

        if state == _EMPTY:
            events.emit("result_failed", reason="empty", result_path=str(expected_path))
            raise EmptyResultError(expected_path)

        try:
            result = read_result(expected_path)
        except MalformedResultError as exc:
            events.emit("result_failed", reason="malformed", error=exc.reason)
            raise
        events.emit(
            "result_recovered",
            action_type=result.action_type,
            image_count=result.image_count,
        )
        return result

    def _await_result_file(self, path: Path) -> str:
        state = _MISSING
        attempts = max(1, self.config.poll_attempts)
        for attempt in range(1, attempts + 1):
            state = _result_file_state(path)
            if state == _READY:
                logger.debug("result file ready on attempt %s", attempt)
                return state
            logger.debug("result file %s on attempt %s", state, attempt)
            if attempt < attempts:
                self.sleep(self.config.poll_interval_s)
        return state

    def _start_drainer(self, stream: IO[str] | None, label: str) -> threading.Thread | None:
        if stream is None:
            return None
        thread = threading.Thread(target=_drain, args=(stream, label), name=f"feedback-session-{label}", daemon=True)
        thread.start()
        return thread


def _result_file_state(path: Path) -> str:
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return _MISSING
    except OSError:
        # Present but not readable yet (e.g. still locked by the writer).
        return _EMPTY if path.exists() else _MISSING
    return _READY if content.strip() else _EMPTY


def _drain(stream: IO[str], label: str) -> None:
    with stream:
        for line in stream:
            text = line.rstrip()
            if text:
                logger.info("session %s: %s", label, text)
