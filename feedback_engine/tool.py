"""Shapes a launched session's result into tool-call content blocks."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from mcp.types import ImageContent, TextContent

from .config import DEFAULT_PROMPT_TEXT, DEFAULT_WINDOW_TITLE
from .launcher import SessionLauncher, new_result_path
from .runs.result import ResultImage, ResultPayload
from .timeinfo import get_time_info

logger = logging.getLogger(__name__)

ContentBlock = Union[TextContent, ImageContent]


@dataclass
class ToolResponse:
    content: list[ContentBlock] = field(default_factory=list)
    is_error: bool = False

    def texts(self) -> list[str]:
        return [block.text for block in self.content if isinstance(block, TextContent)]

    def error_text(self) -> str:
        return "\n".join(self.texts())


def _text(text: str) -> TextContent:
    return TextContent(type="text", text=text)


def _inline_image(image: ResultImage) -> ContentBlock:
    try:
        data = Path(image.path).read_bytes()
    except (OSError, ValueError) as exc:
        logger.warning("could not read attached image %s: %s", image.path, exc)
        return _text(f"Note: User attached an image ({image.path}), but it could not be processed. Error: {exc}")
    return ImageContent(
        type="image",
        data=base64.b64encode(data).decode("ascii"),
        mimeType=image.type or "image/png",
    )


class ToolAdapter:
    def __init__(self, launcher: SessionLauncher, results_dir: Path | None = None) -> None:
        self.launcher = launcher
        self.results_dir = results_dir or launcher.config.results_dir

    def collect_feedback(
        self,
        title: str | None = None,
        prompt: str | None = None,
        time_format: str = "full",
        timezone: str | None = None,
    ) -> ToolResponse:
        try:
            result_path = new_result_path(self.results_dir)
            logger.info("feedback will be saved to %s", result_path)
            result = self.launcher.run(
                [title or DEFAULT_WINDOW_TITLE, prompt or DEFAULT_PROMPT_TEXT, str(result_path)],
                result_path,
            )
        except Exception as exc:
            logger.exception("feedback collection failed")
            return ToolResponse(content=[_text(f"Error collecting feedback: {exc}")], is_error=True)
        return self.build_response(result, time_format=time_format, timezone=timezone)

    def build_response(
        self,
        result: ResultPayload,
        time_format: str = "full",
        timezone: str | None = None,
    ) -> ToolResponse:
        content: list[ContentBlock] = [_text(result.text)]
        for image in result.images:
            content.append(_inline_image(image))
        info = get_time_info(time_format, timezone)
        content.append(_text(f"Current time: {info.formatted}"))
        content.append(_text(info.details_text()))
        return ToolResponse(content=content)
