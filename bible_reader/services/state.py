"""Observable in-memory reader state with write-through persistence."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

from ..errors import BibleReaderError, ContentLoadError, PersistenceError, StateNotLoadedError
from .content import ContentResource, ContentResources
from .events import emit_state_event
from .location import BiblePath, ReadingLocation
from .settings import (
    BOOK_KEY,
    CHAPTER_KEY,
    DEFAULT_TEXT_SIZE,
    DEFAULT_TEXT_STYLE,
    RESOURCE_KEY,
    TEXT_SIZE_KEY,
    TEXT_STYLE_KEY,
    THEME_MODE_KEY,
    VERSE_KEY,
    SettingsRepository,
    TextStyle,
    ThemeMode,
)


LOGGER = logging.getLogger(__name__)

Listener = Callable[[], None]
ErrorListener = Callable[[BibleReaderError], None]

DEFAULT_TEXT_SIZE_STEP = 2.0

_CONTENT_FIELDS = ("bible", "commentary", "appendices")


class ChangeNotifier:
    """Broadcast payload-free change notifications to registered callbacks.

    Callbacks run synchronously in registration order. A callback removed
    while a notification is in progress is not invoked for the remainder of
    that notification.
    """

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def notify_listeners(self) -> None:
        for listener in list(self._listeners):
            if listener not in self._listeners:
                continue
            try:
                listener()
            except Exception:  # noqa: BLE001 - one observer must not starve the rest
                LOGGER.exception("State listener %r raised during notification", listener)


class StateController(ChangeNotifier):
    """Authoritative snapshot of reader settings and loaded content.

    Every mutation updates memory, notifies listeners and then schedules the
    write on the running event loop. Write failures never roll the snapshot
    back; they are delivered to the error listeners registered through
    :meth:`add_error_listener` (or logged when there are none).
    """

    def __init__(
        self,
        repository: SettingsRepository,
        content: Optional[ContentResources] = None,
    ) -> None:
        super().__init__()
        self._repository = repository
        self._content = content
        self._loaded = False
        self._generation = 0

        self._theme_mode = ThemeMode.SYSTEM
        self._text_style: TextStyle = DEFAULT_TEXT_STYLE
        self._text_size = DEFAULT_TEXT_SIZE
        self._resource: Optional[str] = None
        self._location = ReadingLocation()

        self._bible: Any = None
        self._commentary: Any = None
        self._appendices: Any = None

        self._pending_writes: Set[asyncio.Task[None]] = set()
        self._content_tasks: Set[asyncio.Task[None]] = set()
        self._error_listeners: List[ErrorListener] = []

        self._location_writers: Dict[str, Tuple[str, Callable[[Any], Awaitable[None]]]] = {
            "book": (BOOK_KEY, repository.write_book_name),
            "chapter": (CHAPTER_KEY, repository.write_chapter),
            "verse": (VERSE_KEY, repository.write_verse),
        }

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def theme_mode(self) -> ThemeMode:
        self._require_loaded()
        return self._theme_mode

    @property
    def text_style(self) -> TextStyle:
        self._require_loaded()
        return self._text_style

    @property
    def text_size(self) -> float:
        self._require_loaded()
        return self._text_size

    @property
    def resource(self) -> Optional[str]:
        self._require_loaded()
        return self._resource

    @property
    def location(self) -> ReadingLocation:
        self._require_loaded()
        return self._location

    @property
    def book(self) -> Optional[str]:
        return self.location.book

    @property
    def chapter(self) -> Optional[int]:
        return self.location.chapter

    @property
    def verse(self) -> Optional[int]:
        return self.location.verse

    @property
    def path(self) -> Optional[BiblePath]:
        return self.location.path

    @property
    def bible(self) -> Any:
        return self._bible

    @property
    def commentary(self) -> Any:
        return self._commentary

    @property
    def appendices(self) -> Any:
        return self._appendices

    @property
    def pending_writes(self) -> int:
        return len(self._pending_writes)

    def snapshot(self) -> Dict[str, Any]:
        """Return the current state as plain values."""

        path = self.path
        return {
            "theme_mode": self.theme_mode.value,
            "text_style": self.text_style.value,
            "text_size": self.text_size,
            "resource": self.resource,
            "book": self.book,
            "chapter": self.chapter,
            "verse": self.verse,
            "path": str(path) if path is not None else None,
            "content": {name: getattr(self, name) is not None for name in _CONTENT_FIELDS},
        }

    # ------------------------------------------------------------------
    # Error channel
    # ------------------------------------------------------------------
    def add_error_listener(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        try:
            self._error_listeners.remove(listener)
        except ValueError:
            pass

    def _report_error(self, error: BibleReaderError) -> None:
        emit_state_event(
            getattr(error, "key", None) or getattr(error, "name", "state"),
            "Background operation failed",
            payload={"error": error},
            level=logging.WARNING,
        )
        if not self._error_listeners:
            LOGGER.error("%s", error)
            return
        for listener in list(self._error_listeners):
            try:
                listener(error)
            except Exception:  # noqa: BLE001 - reporting must reach every listener
                LOGGER.exception("Error listener %r raised", listener)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    async def load(self) -> None:
        """Read every persisted setting, notify, then start content loads.

        Returns once the settings are in memory; content resources resolve in
        the background and each one notifies on arrival. Results from a
        superseded ``load()`` call are discarded.
        """

        self._generation += 1
        generation = self._generation
        repository = self._repository

        self._theme_mode = await repository.read_theme_mode()
        self._text_style = await repository.read_text_style()
        self._text_size = await repository.read_text_size()
        self._resource = await repository.read_resource()
        self._location = ReadingLocation(
            book=await repository.read_book_name(),
            chapter=await repository.read_chapter(),
            verse=await repository.read_verse(),
        )
        self._loaded = True
        emit_state_event(
            "snapshot",
            "Settings loaded",
            payload={
                "generation": generation,
                "theme_mode": self._theme_mode,
                "text_style": self._text_style,
                "text_size": self._text_size,
                "path": self._location.path,
            },
            level=logging.INFO,
        )
        self.notify_listeners()

        if self._content is None:
            return
        loop = asyncio.get_running_loop()
        for name in _CONTENT_FIELDS:
            resource: ContentResource = getattr(self._content, name)
            task = loop.create_task(
                self._load_content(name, resource, generation),
                name=f"content-{name}-{generation}",
            )
            self._content_tasks.add(task)
            task.add_done_callback(self._content_tasks.discard)

    async def _load_content(self, name: str, resource: ContentResource, generation: int) -> None:
        failure: Optional[ContentLoadError] = None
        value: Any = None
        try:
            value = await resource.load()
        except ContentLoadError as error:
            failure = error
        except Exception as error:  # noqa: BLE001 - delivered to the error channel
            failure = ContentLoadError(name, f"{error.__class__.__name__}: {error}")

        if generation != self._generation:
            LOGGER.info(
                "Discarding %s %s from superseded load #%s (current #%s)",
                name,
                "failure" if failure is not None else "result",
                generation,
                self._generation,
            )
            return
        if failure is not None:
            self._report_error(failure)
            return
        setattr(self, f"_{name}", value)
        emit_state_event(name, "Content ready", payload={"generation": generation})
        self.notify_listeners()

    async def wait_for_content(self) -> None:
        """Wait until every content load started so far has finished."""

        while self._content_tasks:
            await asyncio.gather(*list(self._content_tasks))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def _persist(self, key: str, write: Callable[[], Awaitable[None]]) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run_write(key, write), name=f"persist-{key}")
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _run_write(self, key: str, write: Callable[[], Awaitable[None]]) -> None:
        try:
            await write()
        except PersistenceError as error:
            self._report_error(error)
        except Exception as error:  # noqa: BLE001 - delivered to the error channel
            self._report_error(PersistenceError(key, error))

    def _persist_location(self, previous: ReadingLocation) -> None:
        for field, value in self._location.changes_from(previous).items():
            key, writer = self._location_writers[field]
            self._persist(key, functools.partial(writer, value))

    async def flush(self) -> None:
        """Wait for every scheduled write to finish."""

        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def _require_loaded(self) -> None:
        if not self._loaded:
            raise StateNotLoadedError("Reader state has not been loaded yet")

    def _changed(self, field: str, value: Any) -> None:
        emit_state_event(field, "Updated", payload={"value": value})
        self.notify_listeners()

    def update_theme_mode(self, mode: Optional[ThemeMode]) -> None:
        if mode is None:
            return
        self._require_loaded()
        if mode == self._theme_mode:
            return
        self._theme_mode = mode
        self._changed("theme_mode", mode)
        self._persist(THEME_MODE_KEY, lambda: self._repository.write_theme_mode(mode))

    def update_text_style(self, style: Optional[TextStyle]) -> None:
        if style is None:
            return
        self._require_loaded()
        if style == self._text_style:
            return
        self._text_style = style
        self._changed("text_style", style)
        self._persist(TEXT_STYLE_KEY, lambda: self._repository.write_text_style(style))

    def increase_text_size(self, amount: float = DEFAULT_TEXT_SIZE_STEP) -> None:
        self._adjust_text_size(amount)

    def decrease_text_size(self, amount: float = DEFAULT_TEXT_SIZE_STEP) -> None:
        self._adjust_text_size(-amount)

    def _adjust_text_size(self, delta: float) -> None:
        self._require_loaded()
        self._store_text_size(self._text_size + delta)

    def update_text_size(self, size: Optional[float] = None) -> None:
        """Set an absolute text size. ``None`` or the current size is a no-op."""

        if size is None:
            return
        self._require_loaded()
        if size == self._text_size:
            return
        self._store_text_size(size)

    def _store_text_size(self, size: float) -> None:
        self._text_size = size
        self._changed("text_size", size)
        self._persist(TEXT_SIZE_KEY, lambda: self._repository.write_text_size(size))

    def reset_text_size(self) -> None:
        """Restore the default size in memory only.

        Unlike the increase/decrease operations this neither notifies nor
        persists.
        """

        self._require_loaded()
        self._text_size = DEFAULT_TEXT_SIZE

    def update_resource(self, resource: Optional[str] = None) -> None:
        self._require_loaded()
        if resource == self._resource:
            return
        previous = self._location
        self._resource = resource
        if resource is None:
            self._location = previous.with_book(None)
        self._changed("resource", resource)
        self._persist_location(previous)
        self._persist(RESOURCE_KEY, lambda: self._repository.write_resource(resource))

    def update_book_name(self, book: Optional[str] = None) -> None:
        self._require_loaded()
        if book == self._location.book:
            return
        self._set_location(self._location.with_book(book), "book", book)

    def update_chapter(self, chapter: Optional[int] = None) -> None:
        self._require_loaded()
        if chapter == self._location.chapter:
            return
        self._set_location(self._location.with_chapter(chapter), "chapter", chapter)

    def update_verse(self, verse: Optional[int] = None) -> None:
        self._require_loaded()
        if verse == self._location.verse:
            return
        self._set_location(self._location.with_verse(verse), "verse", verse)

    def update_location(self, location: ReadingLocation) -> None:
        """Replace book, chapter and verse in a single notification."""

        self._require_loaded()
        location = location.normalized()
        if location == self._location:
            return
        self._set_location(location, "location", location.path)

    def _set_location(self, location: ReadingLocation, field: str, value: Any) -> None:
        previous = self._location
        self._location = location
        self._changed(field, value)
        self._persist_location(previous)


__all__ = ["ChangeNotifier", "DEFAULT_TEXT_SIZE_STEP", "StateController"]
