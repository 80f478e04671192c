"""Typed models for discovery, scanning and the held index."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class WorldDescriptor:
    """One discovered world."""

    id: str
    name: str
    storage_path: Path


@dataclass(slots=True, frozen=True)
class WorldManifest:
    """Optional fields read from a world manifest.

    Non-string or blank values are treated as absent. The display name
    falls back from ``title`` to ``name`` and finally to the directory id.
    """

    id: str | None = None
    title: str | None = None
    name: str | None = None
    system: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> WorldManifest:
        return cls(
            id=_clean_text(payload.get("id")),
            title=_clean_text(payload.get("title")),
            name=_clean_text(payload.get("name")),
            system=_clean_text(payload.get("system")),
        )

    def display_name(self, fallback: str) -> str:
        return self.title or self.name or fallback


@dataclass(slots=True, frozen=True)
class ActorRecord:
    """Lightweight view of one stored actor: key, name and type only."""

    key: str
    name: str | None
    actor_type: str | None

    @classmethod
    def from_payload(cls, key: str, payload: dict[str, object]) -> ActorRecord:
        return cls(
            key=key,
            name=_clean_text(payload.get("name")),
            actor_type=_clean_text(payload.get("type")),
        )


@dataclass(slots=True, frozen=True)
class ActorIndexEntry:
    """Index entry resolving an actor name to its world and locator."""

    name: str
    world: str
    storage_ref: str


@dataclass(slots=True, frozen=True)
class ScanFailure:
    """Diagnostic for a world or record that could not be indexed."""

    world_id: str
    locator: str
    reason: str


@dataclass(slots=True, frozen=True)
class WorldScan:
    """Entries and failures collected from one world."""

    world: WorldDescriptor
    entries: tuple[ActorIndexEntry, ...]
    failures: tuple[ScanFailure, ...]
    store_kind: str | None


@dataclass(slots=True, frozen=True)
class ActorIndexSnapshot:
    """One complete build result. Replaced as a whole, never mutated."""

    entries: tuple[ActorIndexEntry, ...] = ()
    built_at: str | None = None
    world_count: int = 0
    failures: tuple[ScanFailure, ...] = ()


def _clean_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if not stripped:
        return None
    return stripped
