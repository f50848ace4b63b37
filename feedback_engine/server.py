"""MCP stdio server exposing the `collect_feedback` tool."""

from __future__ import annotations

import asyncio
import logging
import shutil
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from .config import DEFAULT_PROMPT_TEXT, DEFAULT_WINDOW_TITLE, LauncherConfig
from .launcher import SessionLauncher
from .tool import ToolAdapter

logger = logging.getLogger(__name__)

SERVER_NAME = "feedback-relay"


def _warn_if_session_command_missing(config: LauncherConfig) -> None:
    if not config.command:
        logger.warning("no session command configured; collect_feedback will fail")
        return
    executable = config.command[0]
    if shutil.which(executable) is None:
        logger.warning("session executable not found: %s (set FEEDBACK_APP_COMMAND)", executable)


def build_server(adapter: ToolAdapter | None = None) -> FastMCP:
    if adapter is None:
        config = LauncherConfig.from_env()
        _warn_if_session_command_missing(config)
        adapter = ToolAdapter(SessionLauncher(config))
    server = FastMCP(SERVER_NAME)

    @server.tool(name="collect_feedback")
    async def collect_feedback(
        title: Annotated[str, Field(description="The title of the feedback window.")] = DEFAULT_WINDOW_TITLE,
        prompt: Annotated[
            str, Field(description="The message displayed to the user in the feedback window.")
        ] = DEFAULT_PROMPT_TEXT,
        timeFormat: Annotated[
            str, Field(description="Format for the time information: 'full', 'iso', 'date', 'time' or 'unix'.")
        ] = "full",
        timezone: Annotated[
            str | None, Field(description="Timezone for the time information (e.g. 'America/New_York').")
        ] = None,
    ) -> Any:
        """Open a feedback window and return the user's text, attached images and the current time."""
        response = await asyncio.to_thread(
            adapter.collect_feedback,
            title=title,
            prompt=prompt,
            time_format=timeFormat,
            timezone=timezone,
        )
        if response.is_error:
            raise ToolError(response.error_text())
        return response.content

    return server


def main() -> None:
    server = build_server()
    logger.info("MCP server started and listening on stdio")
    server.run()
