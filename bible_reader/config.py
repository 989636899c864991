"""Configuration loading utilities for the Bible Reader application."""

from __future__ import annotations

import contextlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Tuple


LOGGER = logging.getLogger(__name__)


_PERMISSION_SENTINEL = ".bible_reader_write_check"

DEFAULT_CONFIG: Dict[str, str] = {
    "storage_root": "storage",
    "database_file": "storage/preferences.db",
    "content_root": "content",
}


def _ensure_writable_directory(path: Path) -> bool:
    """Return ``True`` if *path* can be created and written to."""

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False

    probe = path / _PERMISSION_SENTINEL
    try:
        with probe.open("w", encoding="utf-8") as handle:
            handle.write("ok")
    except OSError:
        return False
    finally:
        with contextlib.suppress(OSError):
            probe.unlink()

    return True


def _select_writable_directory(
    preferred: Path,
    *,
    label: str,
    fallbacks: Iterable[Path] = (),
) -> Tuple[Path, bool]:
    """Return a usable directory based on ``preferred`` and ``fallbacks``.

    The first writable candidate wins. The boolean in the result tells whether
    a fallback was chosen. When nothing is writable ``preferred`` is returned
    unchanged and bootstrap reports the problem later.
    """

    preferred = preferred.resolve()
    if _ensure_writable_directory(preferred):
        return preferred, False

    for fallback in fallbacks:
        candidate = fallback.resolve()
        if candidate == preferred:
            continue
        if _ensure_writable_directory(candidate):
            LOGGER.warning(
                "Preferred %s directory '%s' is not writable; using fallback '%s'.",
                label,
                preferred,
                candidate,
            )
            return candidate, True

    LOGGER.warning(
        "%s directory '%s' is not writable and no fallback is available.",
        label.capitalize(),
        preferred,
    )
    return preferred, False


@dataclass(frozen=True)
class AppConfig:
    """Runtime paths used by the reader."""

    storage_root: Path
    database_file: Path
    content_root: Path

    @property
    def bible_file(self) -> Path:
        return self.content_root / "bible.json"

    @property
    def commentary_file(self) -> Path:
        return self.content_root / "commentary.json"

    @property
    def appendices_file(self) -> Path:
        return self.content_root / "appendices.json"

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any], *, base_path: Path) -> "AppConfig":
        merged = {**DEFAULT_CONFIG, **{k: v for k, v in mapping.items() if v}}

        preferred_storage = (base_path / merged["storage_root"]).resolve()
        storage_root, storage_fallback_used = _select_writable_directory(
            preferred_storage,
            label="storage",
            fallbacks=(Path.home() / ".bible_reader" / "storage",),
        )

        database_file = (base_path / merged["database_file"]).resolve()
        if storage_fallback_used:
            try:
                relative_database = database_file.relative_to(preferred_storage)
            except ValueError:
                relative_database = None
            if relative_database is not None:
                database_file = (storage_root / relative_database).resolve()
                LOGGER.warning("Preferences database relocated to '%s'.", database_file)

        # Content is read-only; a missing directory only means resources fail to load.
        content_root = (base_path / merged["content_root"]).resolve()

        return cls(
            storage_root=storage_root,
            database_file=database_file,
            content_root=content_root,
        )


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from ``config/default.json`` by default.

    A missing file yields the built-in :data:`DEFAULT_CONFIG`.
    """

    base_path = Path(__file__).resolve().parent.parent
    if config_path is None:
        config_path = base_path / "config" / "default.json"

    raw_config: Dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as config_file:
            raw_config = json.load(config_file)
    else:
        LOGGER.info("No configuration at %s; using defaults", config_path)

    return AppConfig.from_mapping(raw_config, base_path=base_path)


__all__ = ["AppConfig", "DEFAULT_CONFIG", "load_config"]
