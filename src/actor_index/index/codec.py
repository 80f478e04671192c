"""Flat ``name|world|locator`` representation of index entries."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from actor_index.models import ActorIndexEntry

ENTRY_SEPARATOR = "|"
_LINE_BREAKS = ("\n", "\r")


class EntryFormatError(ValueError):
    """Raised when an entry cannot be written as, or read from, a triple."""


def is_representable(value: str) -> bool:
    """Return True when a field can appear in a triple without escaping."""
    if not value or ENTRY_SEPARATOR in value:
        return False
    return not any(char in value for char in _LINE_BREAKS)


def format_entry(entry: ActorIndexEntry) -> str:
    """Join an entry's fields with the separator. No escaping is attempted."""
    fields = (entry.name, entry.world, entry.storage_ref)
    for label, value in zip(("name", "world", "storage_ref"), fields, strict=True):
        if not is_representable(value):
            raise EntryFormatError(
                f"Entry {label} must be non-empty and free of '{ENTRY_SEPARATOR}' and line breaks."
            )
    return ENTRY_SEPARATOR.join(fields)


def parse_entry(line: str) -> ActorIndexEntry:
    """Parse exactly three non-empty separator-delimited fields."""
    parts = line.split(ENTRY_SEPARATOR)
    if len(parts) != 3:
        raise EntryFormatError(
            f"Expected 3 fields separated by '{ENTRY_SEPARATOR}', got {len(parts)}."
        )
    name, world, storage_ref = parts
    if not name or not world or not storage_ref:
        raise EntryFormatError("Entry fields must be non-empty.")
    return ActorIndexEntry(name=name, world=world, storage_ref=storage_ref)


def write_index_file(
    path: Path, entries: Iterable[ActorIndexEntry]
) -> tuple[ActorIndexEntry, ...]:
    """Write one triple per line in index order, replacing the file atomically.

    Entries with a field that cannot appear in a triple are left out of the
    file and returned.
    """
    lines: list[str] = []
    skipped: list[ActorIndexEntry] = []
    for entry in entries:
        try:
            lines.append(format_entry(entry))
        except EntryFormatError:
            skipped.append(entry)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8", newline="\n") as handle:
        for line in lines:
            handle.write(line)
            handle.write("\n")
    tmp.replace(path)
    return tuple(skipped)


def read_index_file(path: Path) -> tuple[ActorIndexEntry, ...]:
    """Read a saved index. A missing file is an empty index."""
    if not path.exists():
        return ()
    entries: list[ActorIndexEntry] = []
    with path.open("r", encoding="utf-8", newline="") as handle:
        for line_number, raw_line in enumerate(handle, start=1):
            line = raw_line.rstrip("\r\n")
            if not line:
                continue
            try:
                entries.append(parse_entry(line))
            except EntryFormatError as error:
                raise EntryFormatError(f"{path.name}:{line_number}: {error}") from error
    return tuple(entries)
