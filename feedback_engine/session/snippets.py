"""Reusable text snippets stored as a JSON list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..utils import read_json, write_json_atomic

logger = logging.getLogger(__name__)


@dataclass
class Snippet:
    title: str
    content: str


class SnippetStore:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.snippets: list[Snippet] = []

    def load(self) -> list[Snippet]:
        payload = read_json(self.path, [])
        if not isinstance(payload, list):
            logger.warning("ignoring malformed snippets file %s", self.path)
            payload = []
        snippets: list[Snippet] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            title = str(item.get("title") or "").strip()
            content = str(item.get("content") or "")
            if title and content.strip():
                snippets.append(Snippet(title=title, content=content))
        self.snippets = snippets
        return list(self.snippets)

    def save(self) -> None:
        write_json_atomic(self.path, [{"title": s.title, "content": s.content} for s in self.snippets])

    def add(self, title: str, content: str) -> Snippet:
        title = self._validate(title, content)
        if self._find(title) is not None:
            raise ValueError("A snippet with this title already exists")
        snippet = Snippet(title=title, content=content)
        self.snippets.append(snippet)
        self.save()
        return snippet

    def update(self, snippet: Snippet, title: str, content: str) -> Snippet:
        title = self._validate(title, content)
        existing = self._find(title)
        if existing is not None and existing is not snippet:
            raise ValueError("A snippet with this title already exists")
        snippet.title = title
        snippet.content = content
        self.save()
        return snippet

    def remove(self, snippet: Snippet) -> None:
        self.snippets = [s for s in self.snippets if s is not snippet]
        self.save()

    def _find(self, title: str) -> Snippet | None:
        lowered = title.lower()
        for snippet in self.snippets:
            if snippet.title.lower() == lowered:
                return snippet
        return None

    @staticmethod
    def _validate(title: str, content: str) -> str:
        if not title or not title.strip():
            raise ValueError("Title cannot be empty")
        if not content or not content.strip():
            raise ValueError("Content cannot be empty")
        return title.strip()
