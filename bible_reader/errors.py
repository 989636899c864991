"""Exception hierarchy shared across the Bible Reader packages."""

from __future__ import annotations

from typing import Optional


class BibleReaderError(RuntimeError):
    """Base class for all application specific failures."""


class StoreError(BibleReaderError):
    """Raised by a preference store when the backend cannot serve a call."""


class PersistenceError(BibleReaderError):
    """Raised when a setting was requested to be written but was not applied."""

    def __init__(self, key: str, cause: Optional[BaseException] = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Could not persist '{key}'{detail}")
        self.key = key
        self.cause = cause


class ContentLoadError(BibleReaderError):
    """Raised when a content resource (bible, commentary, appendices) fails to load."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Could not load {name}: {reason}")
        self.name = name
        self.reason = reason


class StateNotLoadedError(BibleReaderError):
    """Raised when the state controller is read before ``load()`` completed."""


__all__ = [
    "BibleReaderError",
    "ContentLoadError",
    "PersistenceError",
    "StateNotLoadedError",
    "StoreError",
]
