"""Error types raised by the session and the launcher."""

from __future__ import annotations

from pathlib import Path


class FeedbackError(RuntimeError):
    pass


class SessionClosedError(FeedbackError):
    def __init__(self, operation: str) -> None:
        super().__init__(f"Cannot {operation}: the feedback session has already ended.")
        self.operation = operation


class CapacityExceededError(FeedbackError):
    def __init__(self, max_images: int, available: int = 0) -> None:
        super().__init__(f"You can attach a maximum of {max_images} images.")
        self.max_images = max_images
        self.available = available


class InvalidImageFormatError(FeedbackError, ValueError):
    def __init__(self, path: str | Path) -> None:
        super().__init__(f"Unsupported image type: {Path(path).name}")
        self.path = str(path)


class ResultWriteError(FeedbackError):
    def __init__(self, path: str | Path, reason: str) -> None:
        super().__init__(f"Failed to save feedback to {path}: {reason}")
        self.path = str(path)


class SpawnFailureError(FeedbackError):
    pass


class EmptyResultError(FeedbackError):
    def __init__(self, path: str | Path) -> None:
        super().__init__(f"Feedback file was created but is empty: {path}")
        self.path = str(path)


class MalformedResultError(FeedbackError):
    def __init__(self, path: str | Path, reason: str) -> None:
        super().__init__(f"Error reading feedback data from {path}: {reason}")
        self.path = str(path)
        self.reason = reason
