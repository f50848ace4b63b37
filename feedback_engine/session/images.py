"""Image attachments and the temp directory that backs pasted images."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from PIL import Image, ImageGrab

from ..errors import InvalidImageFormatError
from ..utils import ensure_dir

logger = logging.getLogger(__name__)

_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".bmp": "image/bmp",
    ".gif": "image/gif",
}
ACCEPTED_EXTENSIONS = frozenset(_MIME_TYPES)


def is_image_file(path: str | Path) -> bool:
    return Path(path).suffix.lower() in ACCEPTED_EXTENSIONS


def mime_type_for(path: str | Path) -> str:
    suffix = Path(path).suffix.lower()
    if suffix not in _MIME_TYPES:
        raise InvalidImageFormatError(path)
    return _MIME_TYPES[suffix]


def filter_image_files(paths: Iterable[str | Path]) -> list[Path]:
    return [Path(path) for path in paths if is_image_file(path)]


@dataclass(frozen=True)
class ImageAttachment:
    file_path: Path
    mime_type: str
    size_bytes: int = 0
    temporary: bool = False

    @classmethod
    def from_path(cls, path: str | Path, temporary: bool = False) -> "ImageAttachment":
        file_path = Path(path)
        mime_type = mime_type_for(file_path)
        try:
            size_bytes = file_path.stat().st_size
        except OSError:
            size_bytes = 0
        return cls(file_path=file_path, mime_type=mime_type, size_bytes=size_bytes, temporary=temporary)

    @property
    def display_name(self) -> str:
        return self.file_path.name

    @property
    def size_display(self) -> str:
        if self.size_bytes < 1024:
            return f"{self.size_bytes} B"
        if self.size_bytes < 1024 * 1024:
            return f"{self.size_bytes / 1024:.1f} KB"
        return f"{self.size_bytes / (1024 * 1024):.1f} MB"


class ImageStore:
    """Owns the temp directory that pasted clipboard images are saved into."""

    def __init__(self, temp_dir: Path) -> None:
        self.temp_dir = temp_dir

    def grab_clipboard(self) -> Image.Image | None:
        try:
            grabbed: Any = ImageGrab.grabclipboard()
        except (OSError, NotImplementedError) as exc:
            logger.debug("clipboard unavailable: %s", exc)
            return None
        if isinstance(grabbed, Image.Image):
            return grabbed
        return None

    def save_clipboard_image(self, image: Image.Image) -> ImageAttachment:
        ensure_dir(self.temp_dir)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = self.temp_dir / f"clipboard_image_{stamp}_{uuid.uuid4().hex}.png"
        image.save(path, format="PNG")
        return ImageAttachment.from_path(path, temporary=True)

    def cleanup(self, keep: Iterable[ImageAttachment]) -> list[Path]:
        """Delete temp files not referenced by `keep`. Failures are logged only."""
        if not self.temp_dir.is_dir():
            return []
        kept = {_normalized(item.file_path) for item in keep}
        removed: list[Path] = []
        try:
            candidates = [path for path in self.temp_dir.iterdir() if path.is_file()]
        except OSError as exc:
            logger.warning("temp image cleanup skipped for %s: %s", self.temp_dir, exc)
            return removed
        for path in candidates:
            if _normalized(path) in kept:
                continue
            try:
                path.unlink()
            except OSError as exc:
                logger.warning("failed to delete temp image %s: %s", path, exc)
                continue
            removed.append(path)
        return removed


def _normalized(path: Path) -> str:
    return str(path.resolve()).lower()
