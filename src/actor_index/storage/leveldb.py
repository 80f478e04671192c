"""LevelDB actor databases used by current releases.

Reading requires the optional ``plyvel`` package (``pip install
foundry-actor-index[leveldb]``). Without it the store reports a storage
failure for the world instead of records.
"""

from __future__ import annotations

import importlib
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType

from actor_index.models import ActorRecord
from actor_index.storage.base import (
    RecordFailure,
    RecordOutcome,
    StoreError,
    container_locator,
    decode_payload,
    split_container_locator,
)

ACTORS_DIR_NAME = "actors"
LEVELDB_MARKER_FILE = "CURRENT"
ACTOR_KEY_PREFIX = b"!actors!"
ITEM_KEY_PREFIX = b"!actors.items!"


class LevelDbStore:
    """Actor documents stored under ``!actors!<id>`` keys.

    Embedded documents (``!actors.items!...`` and similar) are not actors
    and are skipped by the key prefix.
    """

    kind = "leveldb"

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def probe(cls, data_dir: Path) -> LevelDbStore | None:
        candidate = data_dir / ACTORS_DIR_NAME
        if not (candidate / LEVELDB_MARKER_FILE).is_file():
            return None
        return cls(candidate)

    @classmethod
    def from_locator(cls, locator: str) -> tuple[LevelDbStore, str] | None:
        parts = split_container_locator(locator)
        if parts is None:
            return None
        path, key = parts
        if not (path / LEVELDB_MARKER_FILE).is_file():
            return None
        return cls(path), key

    def iter_records(self) -> Iterator[RecordOutcome]:
        plyvel = _load_plyvel(self.path)
        db = self._open(plyvel)
        try:
            for raw_key, raw_value in db.iterator(prefix=ACTOR_KEY_PREFIX):
                raw_id = raw_key[len(ACTOR_KEY_PREFIX) :]
                try:
                    key = raw_id.decode("utf-8")
                except UnicodeDecodeError:
                    yield RecordFailure(
                        locator=self.locator(raw_id.decode("utf-8", errors="backslashreplace")),
                        reason="record: key is not valid UTF-8",
                    )
                    continue
                try:
                    payload = decode_payload(raw_value)
                except ValueError as error:
                    yield RecordFailure(
                        locator=self.locator(key),
                        reason=f"record: malformed ({error})",
                    )
                    continue
                yield ActorRecord.from_payload(key, payload)
        except plyvel.Error as error:
            raise StoreError(self.path, f"iteration failed ({error})") from error
        finally:
            db.close()

    def locator(self, key: str) -> str:
        return container_locator(self.path, key)

    def read(self, key: str) -> dict[str, object] | None:
        plyvel = _load_plyvel(self.path)
        db = self._open(plyvel)
        try:
            raw_value = db.get(ACTOR_KEY_PREFIX + key.encode("utf-8"))
            if raw_value is None:
                return None
            try:
                payload = decode_payload(raw_value)
            except ValueError:
                return None
            # Embedded items live under their own keys; the actor only lists their ids.
            items: list[object] = []
            item_prefix = ITEM_KEY_PREFIX + key.encode("utf-8") + b"."
            for _, raw_item in db.iterator(prefix=item_prefix):
                try:
                    items.append(decode_payload(raw_item))
                except ValueError:
                    continue
        finally:
            db.close()
        if items:
            payload["items"] = items
        return payload

    def _open(self, plyvel: ModuleType):
        try:
            return plyvel.DB(str(self.path), create_if_missing=False)
        except plyvel.Error as error:
            # The running application holds the LOCK file while a world is open.
            raise StoreError(self.path, f"cannot open database ({error})") from error


def _load_plyvel(path: Path) -> ModuleType:
    try:
        return importlib.import_module("plyvel")
    except ImportError as error:
        raise StoreError(path, "LevelDB support requires the 'plyvel' package") from error
