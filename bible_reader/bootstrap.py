"""Bootstrap logic that prepares runtime directories and the preferences database."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from .config import AppConfig, _ensure_writable_directory, load_config
from .errors import BibleReaderError
from .services.content import build_content_resources
from .services.settings import SettingsRepository
from .services.state import StateController
from .services.store import PREFERENCES_SCHEMA, SQLitePreferenceStore

LOGGER = logging.getLogger(__name__)


class BootstrapError(BibleReaderError):
    """Raised when initialization cannot be completed."""


class Bootstrapper:
    """Prepare directories and the preferences schema."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config

    @property
    def config(self) -> AppConfig:
        return self._config

    def initialize(self) -> None:
        """Run all bootstrap tasks."""

        LOGGER.debug("Starting bootstrap sequence")
        self._ensure_directories()
        self._ensure_database()
        LOGGER.info("Bootstrap completed successfully")

    def _ensure_directories(self) -> None:
        storage_root = self._config.storage_root
        if not _ensure_writable_directory(storage_root):
            raise BootstrapError(f"Storage directory '{storage_root}' is not writable")
        LOGGER.debug("Ensured directory exists: %s", storage_root)

        database_parent = self._config.database_file.parent
        if not _ensure_writable_directory(database_parent):
            raise BootstrapError(f"Database directory '{database_parent}' is not writable")

        content_root = self._config.content_root
        if not content_root.exists():
            LOGGER.warning(
                "Content directory %s does not exist; bible, commentary and appendices "
                "will be unavailable",
                content_root,
            )

    def _ensure_database(self) -> None:
        LOGGER.debug("Ensuring preferences schema at %s", self._config.database_file)
        try:
            connection = sqlite3.connect(self._config.database_file)
        except sqlite3.Error as error:
            raise BootstrapError(f"Could not open preferences database: {error}") from error
        try:
            connection.executescript(PREFERENCES_SCHEMA)
            connection.commit()
        finally:
            connection.close()


def initialize_app(config_path: Path | None = None) -> AppConfig:
    """Load configuration and run initialization."""

    config = load_config(config_path=config_path)
    Bootstrapper(config).initialize()
    return config


def build_state_controller(config: AppConfig) -> StateController:
    """Return a controller wired to the SQLite store and JSON content of *config*."""

    repository = SettingsRepository(SQLitePreferenceStore(config.database_file))
    return StateController(repository, build_content_resources(config))


__all__ = ["BootstrapError", "Bootstrapper", "build_state_controller", "initialize_app"]
