"""One JSON file per actor record."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from actor_index.models import ActorRecord
from actor_index.storage.base import RecordFailure, RecordOutcome, StoreError, decode_payload

ACTORS_DIR_NAME = "actors"
RECORD_SUFFIX = ".json"


class JsonDirectoryStore:
    """Directory holding ``*.json`` actor documents, visited by file name."""

    kind = "json-dir"

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def probe(cls, data_dir: Path) -> JsonDirectoryStore | None:
        candidate = data_dir / ACTORS_DIR_NAME
        if not candidate.is_dir():
            return None
        return cls(candidate)

    @classmethod
    def from_locator(cls, locator: str) -> tuple[JsonDirectoryStore, str] | None:
        path = Path(locator)
        if path.suffix.lower() != RECORD_SUFFIX or not path.parent.is_dir():
            return None
        return cls(path.parent), path.name

    def iter_records(self) -> Iterator[RecordOutcome]:
        for name in self._record_names():
            path = self.path / name
            try:
                payload = decode_payload(path.read_bytes())
            except OSError as error:
                yield RecordFailure(locator=str(path), reason=f"record: unreadable ({error})")
                continue
            except ValueError as error:
                yield RecordFailure(locator=str(path), reason=f"record: malformed ({error})")
                continue
            yield ActorRecord.from_payload(name, payload)

    def locator(self, key: str) -> str:
        return str(self.path / key)

    def read(self, key: str) -> dict[str, object] | None:
        path = self.path / key
        if not path.is_file():
            return None
        try:
            return decode_payload(path.read_bytes())
        except ValueError:
            return None

    def _record_names(self) -> list[str]:
        try:
            with os.scandir(self.path) as entries:
                return sorted(
                    entry.name
                    for entry in entries
                    if entry.name.lower().endswith(RECORD_SUFFIX)
                    and not entry.name.startswith(".")
                    and entry.is_file()
                )
        except OSError as error:
            raise StoreError(self.path, f"cannot list actor files ({error})") from error
