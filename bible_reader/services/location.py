"""Reading location value types."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional


@dataclass(frozen=True)
class BiblePath:
    """Book with optional chapter and verse; only exists when a book is selected."""

    book: str
    chapter: Optional[int] = None
    verse: Optional[int] = None

    def __str__(self) -> str:
        label = self.book
        if self.chapter is not None:
            label += f" {self.chapter}"
            if self.verse is not None:
                label += f":{self.verse}"
        return label


@dataclass(frozen=True)
class ReadingLocation:
    """The book, chapter and verse the reader is looking at.

    Transitions clear dependent fields: clearing the book clears chapter and
    verse, clearing the chapter clears the verse. Setting a chapter without a
    book is accepted as-is.
    """

    book: Optional[str] = None
    chapter: Optional[int] = None
    verse: Optional[int] = None

    @property
    def path(self) -> Optional[BiblePath]:
        if self.book is None:
            return None
        return BiblePath(self.book, self.chapter, self.verse)

    def with_book(self, book: Optional[str]) -> "ReadingLocation":
        if book is None:
            return ReadingLocation()
        return replace(self, book=book)

    def with_chapter(self, chapter: Optional[int]) -> "ReadingLocation":
        if chapter is None:
            return replace(self, chapter=None, verse=None)
        return replace(self, chapter=chapter)

    def with_verse(self, verse: Optional[int]) -> "ReadingLocation":
        return replace(self, verse=verse)

    def normalized(self) -> "ReadingLocation":
        """Apply the clearing rules to a location built from arbitrary fields."""

        if self.book is None:
            return ReadingLocation()
        if self.chapter is None and self.verse is not None:
            return replace(self, verse=None)
        return self

    def changes_from(self, previous: "ReadingLocation") -> Dict[str, object]:
        """Return ``{field: new_value}`` for each field that differs from *previous*."""

        changes: Dict[str, object] = {}
        for name in ("book", "chapter", "verse"):
            value = getattr(self, name)
            if getattr(previous, name) != value:
                changes[name] = value
        return changes


__all__ = ["BiblePath", "ReadingLocation"]
