"""Runtime configuration for the session window and the launcher."""

from __future__ import annotations

import os
import shlex
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .utils import getenv_float, getenv_int

DEFAULT_WINDOW_TITLE = "AI Feedback Collection"
DEFAULT_PROMPT_TEXT = "Please provide your feedback or describe your issue:"
DEFAULT_TIMEOUT_S = 30
DEFAULT_MAX_IMAGES = 5


def _default_temp_image_dir() -> Path:
    return Path(tempfile.gettempdir()) / "feedback_relay_images"


def _default_snippets_path() -> Path:
    return Path.home() / ".feedback_relay" / "snippets.json"


def _default_command() -> list[str]:
    return [sys.executable, "-m", "feedback_engine.session.app"]


@dataclass
class SessionConfig:
    window_title: str = DEFAULT_WINDOW_TITLE
    prompt_text: str = DEFAULT_PROMPT_TEXT
    output_path: Path | None = None
    timeout_s: int = DEFAULT_TIMEOUT_S
    max_images: int = DEFAULT_MAX_IMAGES
    temp_image_dir: Path = field(default_factory=_default_temp_image_dir)
    snippets_path: Path = field(default_factory=_default_snippets_path)

    @classmethod
    def from_env(cls) -> "SessionConfig":
        config = cls()
        config.timeout_s = max(1, getenv_int("FEEDBACK_TIMEOUT_S", DEFAULT_TIMEOUT_S))
        config.max_images = max(1, getenv_int("FEEDBACK_MAX_IMAGES", DEFAULT_MAX_IMAGES))
        temp_dir = os.getenv("FEEDBACK_TEMP_IMAGE_DIR")
        if temp_dir:
            config.temp_image_dir = Path(temp_dir)
        snippets = os.getenv("FEEDBACK_SNIPPETS_PATH")
        if snippets:
            config.snippets_path = Path(snippets)
        return config

    def update_from_argv(self, argv: Sequence[str]) -> "SessionConfig":
        # argv[0] is the executable; [1] title, [2] prompt, [3] result path.
        if len(argv) >= 2 and argv[1]:
            self.window_title = argv[1]
        if len(argv) >= 3 and argv[2]:
            self.prompt_text = argv[2]
        if len(argv) >= 4 and argv[3]:
            self.output_path = Path(argv[3])
        return self


@dataclass
class LauncherConfig:
    settle_delay_s: float = 1.0
    poll_attempts: int = 15
    poll_interval_s: float = 0.5
    command: list[str] = field(default_factory=_default_command)
    results_dir: Path = field(default_factory=lambda: Path.cwd() / "feedback_data")
    events_path: Path | None = None

    @classmethod
    def from_env(cls) -> "LauncherConfig":
        config = cls()
        config.settle_delay_s = max(0.0, getenv_float("FEEDBACK_SETTLE_DELAY_S", config.settle_delay_s))
        config.poll_attempts = max(1, getenv_int("FEEDBACK_POLL_ATTEMPTS", config.poll_attempts))
        config.poll_interval_s = max(0.0, getenv_float("FEEDBACK_POLL_INTERVAL_S", config.poll_interval_s))
        command = os.getenv("FEEDBACK_APP_COMMAND")
        if command and command.strip():
            config.command = shlex.split(command)
        results_dir = os.getenv("FEEDBACK_RESULTS_DIR")
        if results_dir:
            config.results_dir = Path(results_dir)
        events_path = os.getenv("FEEDBACK_EVENTS_PATH")
        if events_path:
            config.events_path = Path(events_path)
        return config
