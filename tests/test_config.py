from pathlib import Path

import bible_reader.config as config_module
from bible_reader.config import AppConfig


def test_paths_resolve_relative_to_base(tmp_path: Path) -> None:
    config = AppConfig.from_mapping(
        {
            "storage_root": "data",
            "database_file": "data/prefs.db",
            "content_root": "texts",
        },
        base_path=tmp_path,
    )

    assert config.storage_root == (tmp_path / "data").resolve()
    assert config.database_file == (tmp_path / "data" / "prefs.db").resolve()
    assert config.bible_file == (tmp_path / "texts" / "bible.json").resolve()


def test_missing_keys_use_defaults(tmp_path: Path) -> None:
    config = AppConfig.from_mapping({}, base_path=tmp_path)

    assert config.database_file == (tmp_path / "storage" / "preferences.db").resolve()
    assert config.content_root == (tmp_path / "content").resolve()


def test_storage_root_falls_back_when_preferred_is_unusable(
    tmp_path: Path, monkeypatch
) -> None:
    home_dir = tmp_path / "home"
    monkeypatch.setattr(config_module.Path, "home", lambda: home_dir)

    preferred_storage = tmp_path / "storage"
    preferred_storage.write_text("not a directory", encoding="utf-8")

    config = AppConfig.from_mapping(
        {
            "storage_root": "storage",
            "database_file": "storage/preferences.db",
            "content_root": "content",
        },
        base_path=tmp_path,
    )

    expected_storage = (home_dir / ".bible_reader" / "storage").resolve()
    assert config.storage_root == expected_storage
    assert config.database_file == (expected_storage / "preferences.db").resolve()
    assert expected_storage.exists()

