"""Result hand-off file shared by the session process and the launcher."""

from __future__ import annotations

import json
import logging
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

from ..errors import MalformedResultError, ResultWriteError
from ..session.messages import WINDOW_CLOSED_MESSAGE
from ..session.state import FeedbackSession
from ..utils import now_utc_iso, write_json_atomic

logger = logging.getLogger(__name__)


@dataclass
class ResultImage:
    path: str
    type: str = "image/png"


@dataclass
class ResultPayload:
    text: str
    images: list[ResultImage] = field(default_factory=list)
    action_type: str | None = None
    timestamp: str = field(default_factory=now_utc_iso)

    @property
    def has_images(self) -> bool:
        return self.image_count > 0

    @property
    def image_count(self) -> int:
        return len(self.images)

    @classmethod
    def from_session(cls, session: FeedbackSession) -> "ResultPayload":
        if not session.terminal or not session.succeeded:
            raise ValueError("Only a successfully completed session produces a result.")
        return cls(
            text=session.text or "",
            images=[ResultImage(path=str(item.file_path), type=item.mime_type) for item in session.images],
            action_type=session.action_type.value if session.action_type else None,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "text": self.text,
            "hasImages": self.has_images,
            "imageCount": self.image_count,
            "images": [{"path": image.path, "type": image.type} for image in self.images],
        }
        if self.action_type is not None:
            payload["actionType"] = self.action_type
        payload["timestamp"] = self.timestamp
        return payload

    @classmethod
    def from_dict(cls, payload: Any) -> "ResultPayload":
        if not isinstance(payload, Mapping):
            raise ValueError("result must be a JSON object")
        text = payload.get("text")
        if not isinstance(text, str):
            raise ValueError("result is missing 'text'")
        images = _parse_images(payload)
        action_type = payload.get("actionType")
        return cls(
            text=text,
            images=images,
            action_type=str(action_type) if action_type is not None else None,
            timestamp=str(payload.get("timestamp") or ""),
        )


def _parse_images(payload: Mapping[str, Any]) -> list[ResultImage]:
    raw_images = payload.get("images")
    if isinstance(raw_images, list) and raw_images:
        images: list[ResultImage] = []
        for item in raw_images:
            if not isinstance(item, Mapping) or not item.get("path"):
                continue
            images.append(ResultImage(path=str(item["path"]), type=str(item.get("type") or "image/png")))
        return images
    # Single-image shape written by older session builds.
    if payload.get("hasImage") and payload.get("imagePath"):
        return [ResultImage(path=str(payload["imagePath"]), type=str(payload.get("imageType") or "image/png"))]
    return []


def fallback_result() -> ResultPayload:
    return ResultPayload(text=WINDOW_CLOSED_MESSAGE)


def default_result_path(directory: Path | None = None) -> Path:
    base = directory or Path(tempfile.gettempdir())
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    return base / f"feedback_{stamp}.json"


def write_result(result: ResultPayload | FeedbackSession, destination: Path | None = None) -> Path:
    payload = result if isinstance(result, ResultPayload) else ResultPayload.from_session(result)
    path = destination or default_result_path()
    try:
        write_json_atomic(path, payload.to_dict())
    except OSError as exc:
        raise ResultWriteError(path, str(exc)) from exc
    logger.info("feedback result written to %s", path)
    return path


def read_result(path: Path) -> ResultPayload:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedResultError(path, str(exc)) from exc
    try:
        return ResultPayload.from_dict(json.loads(content))
    except (json.JSONDecodeError, ValueError) as exc:
        raise MalformedResultError(path, str(exc)) from exc
