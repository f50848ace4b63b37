"""Session process entrypoint: `python -m feedback_engine.session.app [title] [prompt] [result_path]`."""

from __future__ import annotations

import logging
import sys
import tkinter as tk
from typing import Sequence

from ..config import SessionConfig
from ..ui.window import FeedbackWindow, TkTickSource
from ..utils import configure_logging, load_dotenv
from .controller import SessionController

logger = logging.getLogger(__name__)


def build_config(argv: Sequence[str]) -> SessionConfig:
    return SessionConfig.from_env().update_from_argv(argv)


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    configure_logging()
    config = build_config(list(sys.argv if argv is None else argv))
    try:
        root = tk.Tk()
    except tk.TclError as exc:
        logger.error("cannot open feedback window: %s", exc)
        return 1
    controller = SessionController(config, TkTickSource(root))
    FeedbackWindow(root, controller).run()
    # The window may be torn down without a terminal action (e.g. killed by the WM).
    controller.shutdown()
    if controller.result_path is not None:
        logger.info("feedback saved to %s", controller.result_path)
    return 1 if controller.shutdown_notice is not None else 0


if __name__ == "__main__":
    raise SystemExit(main())
