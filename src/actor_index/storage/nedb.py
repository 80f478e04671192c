"""Append-only JSON-lines ``actors.db`` files written by older releases."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

from actor_index.models import ActorRecord
from actor_index.storage.base import (
    RecordFailure,
    RecordOutcome,
    StoreError,
    container_locator,
    split_container_locator,
)

ACTORS_FILE_NAME = "actors.db"
DELETED_MARKER = "$$deleted"


class NedbStore:
    """Line-oriented document file where later lines supersede earlier ones.

    A line carrying ``$$deleted`` removes the record with the same ``_id``.
    Records are yielded in order of first appearance of each live ``_id``.
    """

    kind = "nedb"

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def probe(cls, data_dir: Path) -> NedbStore | None:
        candidate = data_dir / ACTORS_FILE_NAME
        if not candidate.is_file():
            return None
        return cls(candidate)

    @classmethod
    def from_locator(cls, locator: str) -> tuple[NedbStore, str] | None:
        parts = split_container_locator(locator)
        if parts is None:
            return None
        path, key = parts
        if path.name != ACTORS_FILE_NAME or not path.is_file():
            return None
        return cls(path), key

    def iter_records(self) -> Iterator[RecordOutcome]:
        live: dict[str, ActorRecord] = {}
        failures: list[RecordFailure] = []
        for line_number, payload in self._iter_lines():
            if isinstance(payload, RecordFailure):
                failures.append(payload)
                continue
            key = payload.get("_id")
            if not isinstance(key, str) or not key:
                failures.append(
                    RecordFailure(
                        locator=f"{self.path}:{line_number}",
                        reason="record: missing _id",
                    )
                )
                continue
            if payload.get(DELETED_MARKER) is True:
                live.pop(key, None)
                continue
            # Superseding lines keep the record's original position.
            live[key] = ActorRecord.from_payload(key, payload)
        yield from live.values()
        yield from failures

    def locator(self, key: str) -> str:
        return container_locator(self.path, key)

    def read(self, key: str) -> dict[str, object] | None:
        found: dict[str, object] | None = None
        for _, payload in self._iter_lines():
            if isinstance(payload, RecordFailure) or payload.get("_id") != key:
                continue
            found = None if payload.get(DELETED_MARKER) is True else payload
        return found

    def _iter_lines(self) -> Iterator[tuple[int, dict[str, object] | RecordFailure]]:
        try:
            handle = self.path.open("r", encoding="utf-8", errors="replace")
        except OSError as error:
            raise StoreError(self.path, f"cannot open ({error})") from error
        with handle:
            for line_number, raw_line in enumerate(handle, start=1):
                stripped = raw_line.strip()
                if not stripped:
                    continue
                try:
                    payload = json.loads(stripped)
                except json.JSONDecodeError as error:
                    yield line_number, RecordFailure(
                        locator=f"{self.path}:{line_number}",
                        reason=f"record: malformed ({error.msg})",
                    )
                    continue
                if not isinstance(payload, dict):
                    yield line_number, RecordFailure(
                        locator=f"{self.path}:{line_number}",
                        reason="record: malformed (record is not a JSON object)",
                    )
                    continue
                yield line_number, payload
