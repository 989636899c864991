from __future__ import annotations

import asyncio

import pytest

from bible_reader.errors import PersistenceError
from bible_reader.services.settings import (
    DEFAULT_TEXT_SIZE,
    DEFAULT_TEXT_STYLE,
    SettingsRepository,
    TextStyle,
    ThemeMode,
    decode_text_style,
    decode_theme_mode,
    encode_text_style,
    encode_theme_mode,
)
from bible_reader.services.store import MemoryPreferenceStore


def test_every_style_and_theme_survives_encoding() -> None:
    for style in TextStyle:
        assert decode_text_style(encode_text_style(style)) is style
    for mode in ThemeMode:
        assert decode_theme_mode(encode_theme_mode(mode)) is mode


def test_unknown_encodings_fall_back_to_defaults() -> None:
    assert decode_theme_mode("sepia") is ThemeMode.SYSTEM
    assert decode_theme_mode(None) is ThemeMode.SYSTEM
    assert decode_text_style("Comic Sans") is DEFAULT_TEXT_STYLE
    assert decode_text_style(None) is DEFAULT_TEXT_STYLE


@pytest.mark.parametrize("store", [MemoryPreferenceStore(), MemoryPreferenceStore(fail_reads=True)])
def test_reads_substitute_defaults(store: MemoryPreferenceStore) -> None:
    repository = SettingsRepository(store)

    async def scenario():
        return (
            await repository.read_theme_mode(),
            await repository.read_text_style(),
            await repository.read_text_size(),
            await repository.read_resource(),
            await repository.read_book_name(),
            await repository.read_chapter(),
            await repository.read_verse(),
        )

    assert asyncio.run(scenario()) == (
        ThemeMode.SYSTEM,
        DEFAULT_TEXT_STYLE,
        DEFAULT_TEXT_SIZE,
        None,
        None,
        None,
        None,
    )


def test_reads_decode_stored_primitives() -> None:
    store = MemoryPreferenceStore(
        {
            "themeMode": "dark",
            "textStyle": "monospace",
            "textSize": 18.5,
            "resource": "KJV",
            "book": "Ruth",
            "chapter": 2,
            "verse": 7,
        }
    )
    repository = SettingsRepository(store)

    async def scenario():
        return (
            await repository.read_theme_mode(),
            await repository.read_text_style(),
            await repository.read_text_size(),
            await repository.read_resource(),
            await repository.read_book_name(),
            await repository.read_chapter(),
            await repository.read_verse(),
        )

    assert asyncio.run(scenario()) == (
        ThemeMode.DARK,
        TextStyle.MONOSPACE,
        18.5,
        "KJV",
        "Ruth",
        2,
        7,
    )


def test_read_of_mismatched_kind_yields_default() -> None:
    repository = SettingsRepository(MemoryPreferenceStore({"chapter": "three"}))

    assert asyncio.run(repository.read_chapter()) is None


def test_writes_encode_values() -> None:
    store = MemoryPreferenceStore()
    repository = SettingsRepository(store)

    async def scenario() -> None:
        await repository.write_theme_mode(ThemeMode.LIGHT)
        await repository.write_text_style(TextStyle.DYSLEXIC)
        await repository.write_text_size(30.0)
        await repository.write_book_name("John")
        await repository.write_chapter(3)
        await repository.write_verse(16)

    asyncio.run(scenario())

    assert store.values == {
        "themeMode": "light",
        "textStyle": "dyslexic",
        "textSize": 30.0,
        "book": "John",
        "chapter": 3,
        "verse": 16,
    }


def test_absent_optional_values_remove_keys() -> None:
    store = MemoryPreferenceStore({"resource": "ESV", "book": "Acts", "chapter": 1, "verse": 8})
    repository = SettingsRepository(store)

    async def scenario() -> None:
        await repository.write_resource(None)
        await repository.write_book_name(None)
        await repository.write_chapter(None)
        await repository.write_verse(None)

    asyncio.run(scenario())

    assert store.values == {}
    assert [operation for operation, _ in store.calls] == ["remove"] * 4


def test_write_failure_raises_persistence_error() -> None:
    repository = SettingsRepository(MemoryPreferenceStore(fail_writes=True))

    with pytest.raises(PersistenceError) as excinfo:
        asyncio.run(repository.write_theme_mode(ThemeMode.DARK))

    assert excinfo.value.key == "themeMode"
    assert excinfo.value.cause is not None

    with pytest.raises(PersistenceError):
        asyncio.run(repository.write_verse(None))
