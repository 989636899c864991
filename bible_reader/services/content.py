"""Loadable content resources (bible text, commentary, appendices)."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Protocol

from ..config import AppConfig
from ..errors import ContentLoadError
from .events import emit_content_event


LOGGER = logging.getLogger(__name__)


class ContentResource(Protocol):
    """Anything exposing a single asynchronous ``load`` coroutine."""

    async def load(self) -> Any:
        ...


@dataclass
class ContentDocument:
    name: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.data)


class JsonContentResource:
    """Load a JSON document from disk on a worker thread."""

    def __init__(self, name: str, path: Path) -> None:
        self._name = name
        self._path = Path(path)

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> ContentDocument:
        if not self._path.exists():
            raise ContentLoadError(self._name, f"'{self._path}' does not exist")
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as error:
            raise ContentLoadError(self._name, str(error)) from error
        if not isinstance(payload, dict):
            raise ContentLoadError(self._name, "expected a JSON object at the top level")
        return ContentDocument(self._name, payload)

    async def load(self) -> ContentDocument:
        start = time.perf_counter()
        loop = asyncio.get_running_loop()
        document = await loop.run_in_executor(None, self._read)
        emit_content_event(
            self._name,
            "loaded",
            payload={"path": self._path, "entries": len(document)},
            duration_ms=(time.perf_counter() - start) * 1000.0,
        )
        return document


@dataclass
class ContentResources:
    bible: ContentResource
    commentary: ContentResource
    appendices: ContentResource


def build_content_resources(config: AppConfig) -> ContentResources:
    """Return the JSON backed resources located under ``config.content_root``."""

    LOGGER.debug("Content resources resolved under %s", config.content_root)
    return ContentResources(
        bible=JsonContentResource("bible", config.bible_file),
        commentary=JsonContentResource("commentary", config.commentary_file),
        appendices=JsonContentResource("appendices", config.appendices_file),
    )


__all__ = [
    "ContentDocument",
    "ContentResource",
    "ContentResources",
    "JsonContentResource",
    "build_content_resources",
]
