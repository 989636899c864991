import sqlite3
from pathlib import Path

import pytest

import bible_reader.bootstrap as bootstrap_module
from bible_reader.bootstrap import BootstrapError, Bootstrapper
from bible_reader.config import AppConfig


def test_bootstrapper_creates_preferences_table(temp_config: AppConfig) -> None:
    connection = sqlite3.connect(temp_config.database_file)
    try:
        tables = {
            row[0]
            for row in connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
    finally:
        connection.close()

    assert "preferences" in tables


def test_bootstrapper_raises_when_storage_directory_unwritable(
    tmp_path: Path, monkeypatch
) -> None:
    storage_root = tmp_path / "storage"
    config = AppConfig(
        storage_root=storage_root,
        database_file=storage_root / "preferences.db",
        content_root=tmp_path / "content",
    )

    original_ensure = bootstrap_module._ensure_writable_directory

    def fake_ensure(path: Path) -> bool:
        if path.resolve() == storage_root.resolve():
            return False
        return original_ensure(path)

    monkeypatch.setattr(bootstrap_module, "_ensure_writable_directory", fake_ensure)

    with pytest.raises(BootstrapError) as excinfo:
        Bootstrapper(config).initialize()

    assert "storage" in str(excinfo.value).lower()
