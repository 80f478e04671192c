"""Deterministic world discovery."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from actor_index.models import ScanFailure, WorldDescriptor, WorldManifest
from actor_index.paths import DataPaths

MANIFEST_FILE_NAME = "world.json"


class WorldDiscoveryError(Exception):
    """Raised when the worlds directory itself cannot be listed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot list worlds in {path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(slots=True, frozen=True)
class WorldDiscovery:
    """Worlds found in one discovery pass plus manifest diagnostics."""

    worlds: tuple[WorldDescriptor, ...]
    failures: tuple[ScanFailure, ...]


def discover_worlds(paths: DataPaths) -> WorldDiscovery:
    """List worlds sorted by directory name.

    A world whose manifest is missing, unreadable or malformed is kept under
    its directory name; only unreadable or malformed manifests are reported
    as failures.
    """
    worlds_dir = paths.worlds_path()
    worlds: list[WorldDescriptor] = []
    failures: list[ScanFailure] = []
    for name in _world_dir_names(worlds_dir):
        world_dir = paths.world_path(name)
        manifest, failure = read_manifest(world_dir, paths)
        if failure is not None:
            failures.append(failure)
        worlds.append(
            WorldDescriptor(
                id=name,
                name=manifest.display_name(fallback=name),
                storage_path=world_dir,
            )
        )
    return WorldDiscovery(worlds=tuple(worlds), failures=tuple(failures))


def list_worlds(paths: DataPaths) -> tuple[WorldDescriptor, ...]:
    """Return discovered worlds without diagnostics."""
    return discover_worlds(paths).worlds


def manifest_candidates(world_dir: Path, paths: DataPaths) -> tuple[Path, ...]:
    """Return manifest locations in lookup order."""
    return (
        world_dir / MANIFEST_FILE_NAME,
        paths.world_data_path(world_dir) / MANIFEST_FILE_NAME,
    )


def read_manifest(world_dir: Path, paths: DataPaths) -> tuple[WorldManifest, ScanFailure | None]:
    """Read the first manifest present; an absent manifest is not a failure."""
    for candidate in manifest_candidates(world_dir, paths):
        try:
            with candidate.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            continue
        except OSError as error:
            return WorldManifest(), _manifest_failure(world_dir, candidate, f"unreadable ({error})")
        except ValueError as error:
            return WorldManifest(), _manifest_failure(world_dir, candidate, f"malformed ({error})")
        if not isinstance(payload, dict):
            return WorldManifest(), _manifest_failure(
                world_dir, candidate, "malformed (manifest is not a JSON object)"
            )
        return WorldManifest.from_payload(payload), None
    return WorldManifest(), None


def _manifest_failure(world_dir: Path, manifest_path: Path, detail: str) -> ScanFailure:
    return ScanFailure(
        world_id=world_dir.name,
        locator=str(manifest_path),
        reason=f"manifest: {detail}",
    )


def _world_dir_names(worlds_dir: Path) -> list[str]:
    try:
        with os.scandir(worlds_dir) as entries:
            return sorted(
                entry.name
                for entry in entries
                if not entry.name.startswith(".") and entry.is_dir()
            )
    except OSError as error:
        raise WorldDiscoveryError(worlds_dir, error.strerror or str(error)) from error
