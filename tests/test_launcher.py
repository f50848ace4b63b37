from __future__ import annotations

import json
import sys
import textwrap
from pathlib import Path

import pytest

from feedback_engine.config import LauncherConfig
from feedback_engine.errors import EmptyResultError, MalformedResultError, SpawnFailureError
from feedback_engine.launcher import SessionLauncher, new_result_path
from feedback_engine.session.messages import WINDOW_CLOSED_MESSAGE


def _child(tmp_path: Path, body: str) -> list[str]:
    script = tmp_path / "child_session.py"
    script.write_text(textwrap.dedent(body), encoding="utf-8")
    return [sys.executable, str(script)]


def _launcher(command: list[str], sleeps: list[float], events_path: Path | None = None) -> SessionLauncher:
    config = LauncherConfig(
        settle_delay_s=1.0,
        poll_attempts=15,
        poll_interval_s=0.5,
        command=command,
        events_path=events_path,
    )
    return SessionLauncher(config, sleep=sleeps.append)


def test_missing_result_returns_written_fallback(tmp_path: Path) -> None:
    command = _child(
        tmp_path,
        """
        import sys
        print("window closed by user", file=sys.stderr)
        """,
    )
    sleeps: list[float] = []
    expected = tmp_path / "result.json"
    result = _launcher(command, sleeps).run(["Title", "Prompt", str(expected)], expected)

    assert result.action_type is None
    assert result.text == WINDOW_CLOSED_MESSAGE
    assert result.has_images is False
    assert sleeps[0] == 1.0
    assert len(sleeps) == 15
    assert sum(sleeps) == pytest.approx(1.0 + 14 * 0.5)

    written = json.loads(expected.read_text(encoding="utf-8"))
    assert written["text"] == WINDOW_CLOSED_MESSAGE
    assert "actionType" not in written


def test_result_written_by_child_is_returned(tmp_path: Path) -> None:
    command = _child(
        tmp_path,
        """
        import json, sys
        payload = {"text": "ok", "hasImages": False, "imageCount": 0, "images": [],
                   "actionType": "approve", "timestamp": "2024-01-01T00:00:00Z"}
        with open(sys.argv[3], "w", encoding="utf-8") as handle:
            json.dump(payload, handle)
        """,
    )
    sleeps: list[float] = []
    expected = tmp_path / "result.json"
    result = _launcher(command, sleeps).run(["Title", "Prompt", str(expected)], expected)

    assert result.action_type == "approve"
    assert result.text == "ok"
    assert result.images == []
    assert sleeps == [1.0]


def test_arguments_are_passed_positionally(tmp_path: Path) -> None:
    command = _child(
        tmp_path,
        """
        import json, sys
        title, prompt, out = sys.argv[1:4]
        with open(out, "w", encoding="utf-8") as handle:
            json.dump({"text": f"{title}|{prompt}", "hasImages": False, "imageCount": 0,
                       "images": [], "actionType": "submit", "timestamp": "t"}, handle)
        """,
    )
    expected = tmp_path / "result.json"
    result = _launcher(command, []).run(["My Title", "Say something", str(expected)], expected)
    assert result.text == "My Title|Say something"


def test_result_that_appears_late_is_recovered(tmp_path: Path) -> None:
    command = _child(tmp_path, "pass\n")
    expected = tmp_path / "result.json"
    sleeps: list[float] = []

    def slow_filesystem(seconds: float) -> None:
        sleeps.append(seconds)
        if len(sleeps) == 4:
            expected.write_text(
                json.dumps({"text": "late", "hasImages": False, "imageCount": 0, "images": [],
                            "actionType": "reject", "timestamp": "t"}),
                encoding="utf-8",
            )

    config = LauncherConfig(command=command, settle_delay_s=1.0, poll_attempts=15, poll_interval_s=0.5)
    result = SessionLauncher(config, sleep=slow_filesystem).run(["t", "p", str(expected)], expected)
    assert result.action_type == "reject"
    assert len(sleeps) == 4


def test_empty_result_file_fails(tmp_path: Path) -> None:
    command = _child(
        tmp_path,
        """
        import sys
        open(sys.argv[3], "w").close()
        """,
    )
    expected = tmp_path / "result.json"
    sleeps: list[float] = []
    with pytest.raises(EmptyResultError):
        _launcher(command, sleeps).run(["t", "p", str(expected)], expected)
    assert len(sleeps) == 15


def test_malformed_result_file_fails(tmp_path: Path) -> None:
    command = _child(
        tmp_path,
        """
        import sys
        with open(sys.argv[3], "w", encoding="utf-8") as handle:
            handle.write("{truncated")
        """,
    )
    expected = tmp_path / "result.json"
    with pytest.raises(MalformedResultError):
        _launcher(command, []).run(["t", "p", str(expected)], expected)


def test_spawn_failure_is_raised(tmp_path: Path) -> None:
    expected = tmp_path / "result.json"
    launcher = _launcher([str(tmp_path / "no-such-session-binary")], [])
    with pytest.raises(SpawnFailureError):
        launcher.run(["t", "p", str(expected)], expected)
    assert not expected.exists()


def test_lifecycle_events_are_recorded(tmp_path: Path) -> None:
    command = _child(tmp_path, "print('hello from the session')\n")
    events_path = tmp_path / "events.jsonl"
    expected = tmp_path / "result.json"
    launcher = _launcher(command, [], events_path=events_path)
    launcher.run(["t", "p", str(expected)], expected)

    lines = [json.loads(line) for line in events_path.read_text(encoding="utf-8").splitlines()]
    assert [event["type"] for event in lines] == ["session_spawned", "session_exited", "result_fallback_written"]
    assert all(event["session_id"] == "result" for event in lines)
    assert lines[1]["returncode"] == 0
    assert launcher.last_events is not None
    assert launcher.last_events.types() == [event["type"] for event in lines]


def test_new_result_path_is_unique_inside_results_dir(tmp_path: Path) -> None:
    first = new_result_path(tmp_path / "feedback_data")
    second = new_result_path(tmp_path / "feedback_data")
    assert first.parent == tmp_path / "feedback_data"
    assert first.parent.is_dir()
    assert first != second
