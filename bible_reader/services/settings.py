"""Typed access to persisted reader settings."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from ..errors import PersistenceError, StoreError
from .store import PersistentStore


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

THEME_MODE_KEY = "themeMode"
TEXT_STYLE_KEY = "textStyle"
TEXT_SIZE_KEY = "textSize"
RESOURCE_KEY = "resource"
BOOK_KEY = "book"
CHAPTER_KEY = "chapter"
VERSE_KEY = "verse"

DEFAULT_TEXT_SIZE = 24.0


class ThemeMode(str, Enum):
    DARK = "dark"
    LIGHT = "light"
    SYSTEM = "system"


class TextStyle(str, Enum):
    """Closed set of supported reading fonts keyed by canonical name."""

    SERIF = "serif"
    SANS_SERIF = "sans-serif"
    SLAB_SERIF = "slab-serif"
    MONOSPACE = "monospace"
    DYSLEXIC = "dyslexic"

    @property
    def family(self) -> str:
        return _FONT_FAMILIES[self]


_FONT_FAMILIES = {
    TextStyle.SERIF: "Literata",
    TextStyle.SANS_SERIF: "Inter",
    TextStyle.SLAB_SERIF: "Roboto Slab",
    TextStyle.MONOSPACE: "JetBrains Mono",
    TextStyle.DYSLEXIC: "OpenDyslexic",
}

DEFAULT_TEXT_STYLE = TextStyle.SERIF


def encode_theme_mode(mode: ThemeMode) -> str:
    return mode.value


def decode_theme_mode(value: Optional[str]) -> ThemeMode:
    """Map ``dark``/``light``/``system``; anything else means ``system``."""

    if value == "dark":
        return ThemeMode.DARK
    if value == "light":
        return ThemeMode.LIGHT
    return ThemeMode.SYSTEM


def encode_text_style(style: TextStyle) -> str:
    return style.value


def decode_text_style(value: Optional[str]) -> TextStyle:
    for style in TextStyle:
        if style.value == value:
            return style
    return DEFAULT_TEXT_STYLE


class SettingsRepository:
    """Encode settings into store primitives and apply read defaults.

    Reads never raise: a missing key or a failing store yields the documented
    default. Writes raise :class:`PersistenceError` when the store fails.
    """

    def __init__(self, store: PersistentStore) -> None:
        self._store = store

    @property
    def store(self) -> PersistentStore:
        return self._store

    async def _read(self, key: str, reader: Callable[[str], Awaitable[Optional[T]]]) -> Optional[T]:
        try:
            return await reader(key)
        except StoreError as error:
            LOGGER.debug("Reading '%s' failed; using default (%s)", key, error)
            return None

    async def _write(self, key: str, writer: Callable[[], Awaitable[None]]) -> None:
        try:
            await writer()
        except StoreError as error:
            raise PersistenceError(key, error) from error
        LOGGER.debug("Persisted '%s'", key)

    async def _write_optional(
        self,
        key: str,
        value: Optional[T],
        setter: Callable[[str, T], Awaitable[None]],
    ) -> None:
        if value is None:
            await self._write(key, lambda: self._store.remove(key))
        else:
            await self._write(key, lambda: setter(key, value))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def read_theme_mode(self) -> ThemeMode:
        return decode_theme_mode(await self._read(THEME_MODE_KEY, self._store.get_string))

    async def read_text_style(self) -> TextStyle:
        return decode_text_style(await self._read(TEXT_STYLE_KEY, self._store.get_string))

    async def read_text_size(self) -> float:
        size = await self._read(TEXT_SIZE_KEY, self._store.get_double)
        return DEFAULT_TEXT_SIZE if size is None else float(size)

    async def read_resource(self) -> Optional[str]:
        return await self._read(RESOURCE_KEY, self._store.get_string)

    async def read_book_name(self) -> Optional[str]:
        return await self._read(BOOK_KEY, self._store.get_string)

    async def read_chapter(self) -> Optional[int]:
        return await self._read(CHAPTER_KEY, self._store.get_int)

    async def read_verse(self) -> Optional[int]:
        return await self._read(VERSE_KEY, self._store.get_int)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def write_theme_mode(self, mode: ThemeMode) -> None:
        await self._write(
            THEME_MODE_KEY,
            lambda: self._store.set_string(THEME_MODE_KEY, encode_theme_mode(mode)),
        )

    async def write_text_style(self, style: TextStyle) -> None:
        await self._write(
            TEXT_STYLE_KEY,
            lambda: self._store.set_string(TEXT_STYLE_KEY, encode_text_style(style)),
        )

    async def write_text_size(self, size: float) -> None:
        await self._write(TEXT_SIZE_KEY, lambda: self._store.set_double(TEXT_SIZE_KEY, size))

    async def write_resource(self, resource: Optional[str]) -> None:
        await self._write_optional(RESOURCE_KEY, resource, self._store.set_string)

    async def write_book_name(self, name: Optional[str]) -> None:
        await self._write_optional(BOOK_KEY, name, self._store.set_string)

    async def write_chapter(self, chapter: Optional[int]) -> None:
        await self._write_optional(CHAPTER_KEY, chapter, self._store.set_int)

    async def write_verse(self, verse: Optional[int]) -> None:
        await self._write_optional(VERSE_KEY, verse, self._store.set_int)


__all__ = [
    "BOOK_KEY",
    "CHAPTER_KEY",
    "DEFAULT_TEXT_SIZE",
    "DEFAULT_TEXT_STYLE",
    "RESOURCE_KEY",
    "SettingsRepository",
    "TEXT_SIZE_KEY",
    "TEXT_STYLE_KEY",
    "THEME_MODE_KEY",
    "TextStyle",
    "ThemeMode",
    "VERSE_KEY",
    "decode_text_style",
    "decode_theme_mode",
    "encode_text_style",
    "encode_theme_mode",
]
