from __future__ import annotations

from pathlib import Path

import pytest

from actor_index.index import (
    EntryFormatError,
    format_entry,
    is_representable,
    parse_entry,
    read_index_file,
    write_index_file,
)
from actor_index.models import ActorIndexEntry


def test_format_and_parse_preserve_fields() -> None:
    entry = ActorIndexEntry(
        name="Goblin Boss", world="Rise of the Runelords", storage_ref="/w/data/actors/a.json"
    )

    line = format_entry(entry)

    assert line == "Goblin Boss|Rise of the Runelords|/w/data/actors/a.json"
    assert parse_entry(line) == entry


@pytest.mark.parametrize(
    "line",
    ["Goblin|World", "Goblin|World|ref|extra", "Goblin||ref", "|World|ref", "Goblin"],
)
def test_parse_rejects_anything_but_three_non_empty_fields(line: str) -> None:
    with pytest.raises(EntryFormatError):
        parse_entry(line)


def test_format_rejects_reserved_characters() -> None:
    with pytest.raises(EntryFormatError, match="name"):
        format_entry(ActorIndexEntry(name="A|B", world="W", storage_ref="ref"))
    with pytest.raises(EntryFormatError, match="world"):
        format_entry(ActorIndexEntry(name="A", world="W\n2", storage_ref="ref"))


def test_is_representable() -> None:
    assert is_representable("Goblin")
    assert not is_representable("")
    assert not is_representable("a|b")
    assert not is_representable("a\rb")


def test_index_file_keeps_entry_order(tmp_path: Path) -> None:
    entries = (
        ActorIndexEntry(name="Zed", world="W", storage_ref="/z.json"),
        ActorIndexEntry(name="Amiri", world="W", storage_ref="/a.json"),
    )
    path = tmp_path / "state" / "actor_index.txt"

    assert write_index_file(path, entries) == ()

    assert path.read_text(encoding="utf-8") == "Zed|W|/z.json\nAmiri|W|/a.json\n"
    assert read_index_file(path) == entries
    assert not path.with_suffix(".txt.tmp").exists()


def test_missing_index_file_reads_as_empty(tmp_path: Path) -> None:
    assert read_index_file(tmp_path / "actor_index.txt") == ()


def test_corrupt_line_reports_line_number(tmp_path: Path) -> None:
    path = tmp_path / "actor_index.txt"
    path.write_text("Zed|W|/z.json\n\nbroken line\n", encoding="utf-8")

    with pytest.raises(EntryFormatError, match=r"actor_index\.txt:3:"):
        read_index_file(path)


def test_unrepresentable_entries_are_left_out_of_file(tmp_path: Path) -> None:
    path = tmp_path / "actor_index.txt"
    kept = ActorIndexEntry(name="Zed", world="W", storage_ref="/z.json")
    piped = ActorIndexEntry(name="Rock|Paper", world="W", storage_ref="/r.json")
    titled = ActorIndexEntry(name="Orc", world="Alpha | Campaign", storage_ref="/o.json")

    skipped = write_index_file(path, [piped, kept, titled])

    assert skipped == (piped, titled)
    assert path.read_text(encoding="utf-8") == "Zed|W|/z.json\n"
    assert read_index_file(path) == (kept,)
