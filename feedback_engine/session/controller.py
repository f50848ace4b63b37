"""Event handlers for the session window, kept free of any widget toolkit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from ..config import SessionConfig
from ..errors import CapacityExceededError, FeedbackError, InvalidImageFormatError, ResultWriteError
from ..runs.result import write_result
from .images import ImageAttachment, ImageStore, filter_image_files
from .messages import MAX_IMAGES_MESSAGE, MAX_IMAGES_NO_MORE_MESSAGE, PARTIAL_DROP_MESSAGE
from .snippets import Snippet, SnippetStore
from .state import FeedbackSession
from .timer import SessionTimer, TickSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    title: str
    message: str
    level: str = "info"


def _error(prefix: str, exc: Exception) -> Notice:
    return Notice(title="Error", message=f"{prefix}: {exc}", level="error")


class SessionController:
    """Owns one FeedbackSession and its timer; every handler returns a Notice or None."""

    def __init__(
        self,
        config: SessionConfig,
        tick_source: TickSource,
        image_store: ImageStore | None = None,
        snippet_store: SnippetStore | None = None,
    ) -> None:
        self.config = config
        self.session = FeedbackSession(max_images=config.max_images)
        self.timer = SessionTimer(tick_source, config.timeout_s)
        self.timer.on_expired(self._on_timer_expired)
        self.image_store = image_store or ImageStore(config.temp_image_dir)
        self.snippet_store = snippet_store or SnippetStore(config.snippets_path)
        self.result_path: Path | None = None
        self.shutdown_notice: Notice | None = None
        self._close_listeners: list[Callable[[], None]] = []
        self._dialog_paused = False
        self._shut_down = False

    def on_close(self, listener: Callable[[], None]) -> None:
        self._close_listeners.append(listener)

    def start(self) -> list[Snippet]:
        snippets = self.snippet_store.load()
        self.timer.start(self.config.timeout_s)
        return snippets

    # Text and activity

    def text_changed(self, text: str) -> None:
        if self.session.terminal:
            return
        self.session.set_text(text)
        if self.session.has_text:
            if self.timer.active:
                self.timer.stop()
        elif self.timer.should_be_active(False):
            self.timer.start(self.config.timeout_s)

    def activity(self) -> None:
        if self.session.terminal:
            return
        if self.timer.should_be_active(self.session.has_text):
            self.timer.reset(self.config.timeout_s)

    def toggle_pause(self) -> bool:
        paused = self.timer.toggle_pause()
        if not paused and not self.timer.active and not self.session.terminal:
            if self.timer.should_be_active(self.session.has_text):
                self.timer.start(self.config.timeout_s)
        return paused

    def begin_dialog(self) -> None:
        if not self.timer.paused:
            self.timer.toggle_pause()
            self._dialog_paused = True

    def end_dialog(self) -> None:
        if self._dialog_paused:
            self._dialog_paused = False
            if self.timer.paused:
                self.toggle_pause()

    # Snippets

    def insert_snippet(self, snippet: Snippet) -> str:
        self.session.insert_snippet(snippet.content)
        text = self.session.text or ""
        self.text_changed(text)
        return text

    def add_snippet(self, title: str, content: str) -> Notice | None:
        try:
            self.snippet_store.add(title, content)
        except (ValueError, OSError) as exc:
            return _error("Failed to add snippet", exc)
        return None

    def update_snippet(self, snippet: Snippet, title: str, content: str) -> Notice | None:
        try:
            self.snippet_store.update(snippet, title, content)
        except (ValueError, OSError) as exc:
            return _error("Failed to update snippet", exc)
        return None

    def remove_snippet(self, snippet: Snippet) -> Notice | None:
        try:
            self.snippet_store.remove(snippet)
        except OSError as exc:
            return _error("Failed to remove snippet", exc)
        return None

    # Images

    def attach_file(self, path: str | Path) -> Notice | None:
        try:
            self.session.attach(path)
        except CapacityExceededError as exc:
            return Notice("Maximum Reached", MAX_IMAGES_MESSAGE.format(max_images=exc.max_images))
        except (InvalidImageFormatError, FeedbackError, OSError) as exc:
            return _error("Failed to add image", exc)
        return None

    def paste_image(self) -> Notice | None:
        try:
            image = self.image_store.grab_clipboard()
            if image is None:
                return None
            if self.session.available_slots <= 0:
                return Notice("Maximum Reached", MAX_IMAGES_MESSAGE.format(max_images=self.session.max_images))
            attachment = self.image_store.save_clipboard_image(image)
            self.session.add_attachment(attachment)
        except (FeedbackError, OSError, ValueError) as exc:
            return _error("Failed to paste image", exc)
        return None

    def drop_files(self, paths: Iterable[str | Path]) -> Notice | None:
        candidates = filter_image_files(paths)
        available = self.session.available_slots
        try:
            self.session.attach_many(candidates)
        except CapacityExceededError as exc:
            return Notice("Maximum Reached", MAX_IMAGES_NO_MORE_MESSAGE.format(max_images=exc.max_images))
        except (FeedbackError, OSError) as exc:
            return _error("Failed to add dropped images", exc)
        if len(candidates) > available:
            return Notice(
                "Maximum Reached",
                PARTIAL_DROP_MESSAGE.format(
                    added=available,
                    skipped=len(candidates) - available,
                    max_images=self.session.max_images,
                ),
            )
        return None

    def remove_image(self, attachment: ImageAttachment) -> Notice | None:
        try:
            self.session.remove(attachment)
        except FeedbackError as exc:
            return _error("Failed to remove image", exc)
        return None

    # Terminal actions

    def submit(self) -> None:
        self._finish(self.session.submit())

    def approve(self) -> None:
        self._finish(self.session.approve())

    def reject(self) -> None:
        self._finish(self.session.reject())

    def ai_decide(self) -> None:
        self._finish(self.session.ai_decide())

    def cancel(self) -> None:
        self._finish(self.session.cancel())

    def _on_timer_expired(self) -> None:
        logger.info("auto-close timer expired")
        self._finish(self.session.timer_expired())

    def _finish(self, transitioned: bool) -> None:
        if not transitioned:
            return
        self.shutdown()
        for listener in list(self._close_listeners):
            listener()

    def shutdown(self) -> Path | None:
        """Persist the result (if any), then drop unused temp images. Runs once."""
        if self._shut_down:
            return self.result_path
        self._shut_down = True
        if self.timer.active:
            self.timer.stop()
        if self.session.succeeded:
            try:
                self.result_path = write_result(self.session, self.config.output_path)
            except ResultWriteError as exc:
                logger.error("%s", exc)
                self.shutdown_notice = _error("Failed to save feedback", exc)
        keep = self.session.images if self.session.succeeded else []
        self.image_store.cleanup(keep)
        return self.result_path
