"""Asynchronous key-value preference stores.

:class:`PersistentStore` is the contract consumed by
:class:`~bible_reader.services.settings.SettingsRepository`. Stores only do
I/O: failures surface as :class:`~bible_reader.errors.StoreError` and default
substitution is left to the caller.
"""

from __future__ import annotations

import abc
import asyncio
import contextlib
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Literal, Optional, Tuple

from ..errors import StoreError
from .events import emit_store_event


LOGGER = logging.getLogger(__name__)

ValueKind = Literal["string", "int", "double"]

PREFERENCES_SCHEMA = """
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    kind TEXT NOT NULL,
    value TEXT NOT NULL
);
"""


class PersistentStore(abc.ABC):
    """Abstract asynchronous get/set/remove interface."""

    @abc.abstractmethod
    async def get_string(self, key: str) -> Optional[str]:
        ...

    @abc.abstractmethod
    async def get_int(self, key: str) -> Optional[int]:
        ...

    @abc.abstractmethod
    async def get_double(self, key: str) -> Optional[float]:
        ...

    @abc.abstractmethod
    async def set_string(self, key: str, value: str) -> None:
        ...

    @abc.abstractmethod
    async def set_int(self, key: str, value: int) -> None:
        ...

    @abc.abstractmethod
    async def set_double(self, key: str, value: float) -> None:
        ...

    @abc.abstractmethod
    async def remove(self, key: str) -> None:
        ...


class MemoryPreferenceStore(PersistentStore):
    """Dictionary backed store.

    ``fail_reads`` and ``fail_writes`` make every matching call raise
    :class:`StoreError`; ``calls`` records ``(operation, key)`` pairs in the
    order they were received.
    """

    def __init__(
        self,
        initial: Optional[Dict[str, Any]] = None,
        *,
        fail_reads: bool = False,
        fail_writes: bool = False,
    ) -> None:
        self._values: Dict[str, Tuple[ValueKind, Any]] = {}
        for key, value in (initial or {}).items():
            self._values[key] = (_kind_of(value), value)
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.calls: List[Tuple[str, str]] = []

    @property
    def values(self) -> Dict[str, Any]:
        return {key: value for key, (_, value) in self._values.items()}

    @property
    def write_calls(self) -> List[Tuple[str, str]]:
        return [call for call in self.calls if not call[0].startswith("get_")]

    async def _get(self, key: str, kind: ValueKind) -> Any:
        self.calls.append((f"get_{kind}", key))
        if self.fail_reads:
            raise StoreError(f"Store unavailable while reading '{key}'")
        entry = self._values.get(key)
        if entry is None:
            return None
        stored_kind, value = entry
        if stored_kind != kind:
            raise StoreError(f"'{key}' holds a {stored_kind} value, not {kind}")
        return value

    async def _set(self, key: str, kind: ValueKind, value: Any) -> None:
        self.calls.append((f"set_{kind}", key))
        if self.fail_writes:
            raise StoreError(f"Store unavailable while writing '{key}'")
        self._values[key] = (kind, value)

    async def get_string(self, key: str) -> Optional[str]:
        return await self._get(key, "string")

    async def get_int(self, key: str) -> Optional[int]:
        return await self._get(key, "int")

    async def get_double(self, key: str) -> Optional[float]:
        return await self._get(key, "double")

    async def set_string(self, key: str, value: str) -> None:
        await self._set(key, "string", str(value))

    async def set_int(self, key: str, value: int) -> None:
        await self._set(key, "int", int(value))

    async def set_double(self, key: str, value: float) -> None:
        await self._set(key, "double", float(value))

    async def remove(self, key: str) -> None:
        self.calls.append(("remove", key))
        if self.fail_writes:
            raise StoreError(f"Store unavailable while removing '{key}'")
        self._values.pop(key, None)


def _kind_of(value: Any) -> ValueKind:
    if isinstance(value, bool):
        raise TypeError("Boolean preferences are not supported")
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "double"
    return "string"


_DECODERS: Dict[ValueKind, Callable[[str], Any]] = {
    "string": str,
    "int": int,
    "double": float,
}


class SQLitePreferenceStore(PersistentStore):
    """Store preferences in a single SQLite table.

    Each call opens a short-lived connection on the loop's default executor so
    the event loop never blocks on disk I/O.
    """

    def __init__(self, database_file: Path) -> None:
        self._db_path = Path(database_file)

    @property
    def path(self) -> Path:
        return self._db_path

    @contextlib.contextmanager
    def _track_store_event(self, action: str, **payload: Any) -> Iterator[Dict[str, Any]]:
        start = time.perf_counter()
        event_payload: Dict[str, Any] = dict(payload)
        try:
            yield event_payload
        except Exception as exc:
            event_payload.setdefault("status", "error")
            event_payload.setdefault("error", f"{exc.__class__.__name__}: {exc}")
            raise
        finally:
            event_payload.setdefault("status", "ok")
            emit_store_event(
                action,
                payload=event_payload,
                duration_ms=(time.perf_counter() - start) * 1000.0,
            )

    def _connect(self) -> sqlite3.Connection:
        LOGGER.debug("Opening SQLite connection to %s", self._db_path)
        connection = sqlite3.connect(self._db_path)
        connection.executescript(PREFERENCES_SCHEMA)
        return connection

    def _read_sync(self, key: str, kind: ValueKind) -> Any:
        with self._track_store_event("read", key=key, kind=kind) as event:
            connection = self._connect()
            try:
                row = connection.execute(
                    "SELECT kind, value FROM preferences WHERE key = ?", (key,)
                ).fetchone()
            finally:
                connection.close()
            event["found"] = row is not None
            if row is None:
                return None
            stored_kind, raw_value = row
            if stored_kind != kind:
                raise StoreError(f"'{key}' holds a {stored_kind} value, not {kind}")
            return _DECODERS[kind](raw_value)

    def _write_sync(self, key: str, kind: Optional[ValueKind], value: Any) -> None:
        action = "remove" if kind is None else "write"
        with self._track_store_event(action, key=key, kind=kind):
            connection = self._connect()
            try:
                with connection:
                    if kind is None:
                        connection.execute("DELETE FROM preferences WHERE key = ?", (key,))
                    else:
                        connection.execute(
                            "INSERT INTO preferences(key, kind, value) VALUES (?, ?, ?) "
                            "ON CONFLICT(key) DO UPDATE SET kind = excluded.kind, "
                            "value = excluded.value",
                            (key, kind, str(value)),
                        )
            finally:
                connection.close()

    async def _run(self, operation: Callable[[], Any]) -> Any:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, operation)
        except sqlite3.Error as error:
            raise StoreError(f"SQLite preference store failed: {error}") from error
        except (TypeError, ValueError) as error:
            raise StoreError(f"Corrupt preference value: {error}") from error

    async def get_string(self, key: str) -> Optional[str]:
        return await self._run(lambda: self._read_sync(key, "string"))

    async def get_int(self, key: str) -> Optional[int]:
        return await self._run(lambda: self._read_sync(key, "int"))

    async def get_double(self, key: str) -> Optional[float]:
        return await self._run(lambda: self._read_sync(key, "double"))

    async def set_string(self, key: str, value: str) -> None:
        await self._run(lambda: self._write_sync(key, "string", value))

    async def set_int(self, key: str, value: int) -> None:
        await self._run(lambda: self._write_sync(key, "int", int(value)))

    async def set_double(self, key: str, value: float) -> None:
        await self._run(lambda: self._write_sync(key, "double", repr(float(value))))

    async def remove(self, key: str) -> None:
        await self._run(lambda: self._write_sync(key, None, None))


__all__ = [
    "MemoryPreferenceStore",
    "PREFERENCES_SCHEMA",
    "PersistentStore",
    "SQLitePreferenceStore",
]
