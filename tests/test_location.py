from __future__ import annotations

from bible_reader.services.location import BiblePath, ReadingLocation


def test_clearing_book_clears_dependents() -> None:
    location = ReadingLocation("Psalms", 23, 1)

    assert location.with_book(None) == ReadingLocation()
    assert location.with_book("Proverbs") == ReadingLocation("Proverbs", 23, 1)


def test_clearing_chapter_keeps_book() -> None:
    location = ReadingLocation("Psalms", 23, 1)

    assert location.with_chapter(None) == ReadingLocation("Psalms")
    assert location.with_verse(None) == ReadingLocation("Psalms", 23)


def test_chapter_without_book_is_accepted() -> None:
    location = ReadingLocation().with_chapter(4)

    assert location == ReadingLocation(chapter=4)
    assert location.path is None
    assert location.normalized() == ReadingLocation()
    assert ReadingLocation("Jude", verse=3).normalized() == ReadingLocation("Jude")


def test_path_formatting() -> None:
    assert ReadingLocation("Jonah").path == BiblePath("Jonah")
    assert str(ReadingLocation("Jonah", 2).path) == "Jonah 2"
    assert str(ReadingLocation("Jonah", 2, 10).path) == "Jonah 2:10"


def test_changes_from_lists_differing_fields() -> None:
    before = ReadingLocation("Luke", 15, 11)
    after = before.with_chapter(None)

    assert after.changes_from(before) == {"chapter": None, "verse": None}
    assert before.changes_from(before) == {}
