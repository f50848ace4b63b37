"""feedback-relay CLI entrypoints."""

from __future__ import annotations

import argparse
import json
import sys

from mcp.types import ImageContent

from .config import DEFAULT_PROMPT_TEXT, DEFAULT_WINDOW_TITLE, LauncherConfig
from .launcher import SessionLauncher
from .tool import ToolAdapter
from .utils import configure_logging, load_dotenv


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="feedback-relay", description="Human feedback relay for tool-calling agents")
    parser.add_argument("--log-level", dest="log_level", help="Diagnostic log level (default INFO)")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Run the MCP stdio server")

    collect = sub.add_parser("collect", help="Collect feedback once and print the response blocks")
    collect.add_argument("--title", default=DEFAULT_WINDOW_TITLE)
    collect.add_argument("--prompt", default=DEFAULT_PROMPT_TEXT)
    collect.add_argument("--time-format", dest="time_format", default="full")
    collect.add_argument("--timezone")

    session = sub.add_parser("session", help="Open the feedback window directly")
    session.add_argument("title", nargs="?")
    session.add_argument("prompt", nargs="?")
    session.add_argument("output", nargs="?", help="Result file path")

    return parser


def _handle_serve(args: argparse.Namespace) -> int:
    from .server import main as serve_main

    serve_main()
    return 0


def _handle_collect(args: argparse.Namespace) -> int:
    adapter = ToolAdapter(SessionLauncher(LauncherConfig.from_env()))
    response = adapter.collect_feedback(
        title=args.title,
        prompt=args.prompt,
        time_format=args.time_format,
        timezone=args.timezone,
    )
    blocks = []
    for block in response.content:
        if isinstance(block, ImageContent):
            wire = block.model_dump(by_alias=True)
            blocks.append({"type": "image", "mimeType": wire["mimeType"], "data_length": len(block.data)})
        else:
            blocks.append({"type": "text", "text": block.text})
    print(json.dumps({"isError": response.is_error, "content": blocks}, indent=2))
    return 1 if response.is_error else 0


def _handle_session(args: argparse.Namespace) -> int:
    from .session.app import main as session_main

    argv = [sys.argv[0], args.title or "", args.prompt or "", args.output or ""]
    return session_main(argv)


def main() -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args()
    configure_logging(args.log_level)
    if args.command == "serve":
        raise SystemExit(_handle_serve(args))
    if args.command == "collect":
        raise SystemExit(_handle_collect(args))
    if args.command == "session":
        raise SystemExit(_handle_session(args))
    parser.print_help()
    raise SystemExit(1)


if __name__ == "__main__":
    main()
