"""Actor store protocol and shared record helpers."""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from actor_index.models import ActorRecord

LOCATOR_KEY_SEPARATOR = "#"


@dataclass(slots=True, frozen=True)
class RecordFailure:
    """A single stored record that could not be read or parsed."""

    locator: str
    reason: str


RecordOutcome = ActorRecord | RecordFailure


class StoreError(Exception):
    """Raised when a whole store cannot be opened or iterated."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ActorStore(Protocol):
    """Protocol implemented by actor storage formats."""

    kind: str
    path: Path

    def iter_records(self) -> Iterator[RecordOutcome]:
        """Yield one outcome per stored actor in a stable order."""

    def locator(self, key: str) -> str:
        """Return the locator that re-opens the record stored under key."""

    def read(self, key: str) -> dict[str, object] | None:
        """Return the full payload stored under key, or None when absent."""


class StoreFactory(Protocol):
    """Protocol implemented by store classes used for format detection."""

    kind: str

    def probe(self, data_dir: Path) -> ActorStore | None:
        """Return a store when data_dir holds actors in this format."""

    def from_locator(self, locator: str) -> tuple[ActorStore, str] | None:
        """Return the store and record key addressed by a locator."""


def decode_payload(raw: bytes | str) -> dict[str, object]:
    """Decode one JSON document, requiring an object at the top level."""
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("record is not a JSON object")
    return payload


def container_locator(path: Path, key: str) -> str:
    return f"{path}{LOCATOR_KEY_SEPARATOR}{key}"


def split_container_locator(locator: str) -> tuple[Path, str] | None:
    """Split ``<container>#<key>`` into its parts."""
    container, separator, key = locator.rpartition(LOCATOR_KEY_SEPARATOR)
    if not separator or not container or not key:
        return None
    return Path(container), key
