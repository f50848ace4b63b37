"""Feedback session state machine.

A session is Open until exactly one terminal action resolves it. Terminal
actions fired after that (for example a timer expiry racing a button click)
are ignored and the first outcome is kept.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from ..config import DEFAULT_MAX_IMAGES
from ..errors import CapacityExceededError, SessionClosedError
from .images import ImageAttachment, filter_image_files
from .messages import (
    AI_DECIDE_MESSAGE,
    APPROVAL_MESSAGE,
    AUTO_CLOSE_MESSAGE,
    NO_FEEDBACK_MESSAGE,
    REJECTION_MESSAGE,
    ActionType,
)


@dataclass
class FeedbackSession:
    max_images: int = DEFAULT_MAX_IMAGES
    text: str | None = None
    action_type: ActionType | None = None
    images: list[ImageAttachment] = field(default_factory=list)
    terminal: bool = False
    succeeded: bool = False

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def available_slots(self) -> int:
        return max(0, self.max_images - len(self.images))

    def set_text(self, text: str) -> None:
        self._require_open("edit feedback")
        self.text = text

    def insert_snippet(self, content: str) -> None:
        self._require_open("insert a snippet")
        current = self.text or ""
        if current and not current.endswith("\n"):
            current += "\n"
        self.text = current + content

    def attach(self, path: str | Path, temporary: bool = False) -> ImageAttachment:
        self._require_open("attach an image")
        attachment = ImageAttachment.from_path(path, temporary=temporary)
        return self.add_attachment(attachment)

    def add_attachment(self, attachment: ImageAttachment) -> ImageAttachment:
        self._require_open("attach an image")
        if len(self.images) >= self.max_images:
            raise CapacityExceededError(self.max_images, self.available_slots)
        self.images.append(attachment)
        return attachment

    def attach_many(self, paths: Iterable[str | Path]) -> list[ImageAttachment]:
        """Attach dropped files: unsupported types are skipped, extras beyond capacity are dropped."""
        self._require_open("attach images")
        candidates = filter_image_files(paths)
        if not candidates:
            return []
        if self.available_slots <= 0:
            raise CapacityExceededError(self.max_images, 0)
        added: list[ImageAttachment] = []
        for path in candidates[: self.available_slots]:
            added.append(self.add_attachment(ImageAttachment.from_path(path)))
        return added

    def remove(self, attachment: ImageAttachment) -> bool:
        self._require_open("remove an image")
        if attachment not in self.images:
            return False
        self.images.remove(attachment)
        return True

    def submit(self) -> bool:
        if self.has_text:
            return self._finish(ActionType.SUBMIT, self.text or "")
        return self._finish(ActionType.NO_FEEDBACK, NO_FEEDBACK_MESSAGE)

    def approve(self) -> bool:
        return self._finish(ActionType.APPROVE, self._text_or(APPROVAL_MESSAGE))

    def reject(self) -> bool:
        return self._finish(ActionType.REJECT, self._text_or(REJECTION_MESSAGE))

    def ai_decide(self) -> bool:
        return self._finish(ActionType.AI_DECIDE, self._text_or(AI_DECIDE_MESSAGE))

    def timer_expired(self) -> bool:
        return self._finish(ActionType.NO_FEEDBACK, AUTO_CLOSE_MESSAGE)

    def cancel(self) -> bool:
        if self.terminal:
            return False
        self.terminal = True
        self.succeeded = False
        return True

    def _text_or(self, default: str) -> str:
        return (self.text or "") if self.has_text else default

    def _finish(self, action_type: ActionType, text: str) -> bool:
        if self.terminal:
            return False
        self.text = text
        self.action_type = action_type
        self.succeeded = True
        self.terminal = True
        return True

    def _require_open(self, operation: str) -> None:
        if self.terminal:
            raise SessionClosedError(operation)
