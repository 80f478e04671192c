"""Index build orchestration and the held snapshot."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from actor_index.index.worlds import discover_worlds
from actor_index.logging import utc_timestamp
from actor_index.models import (
    ActorIndexEntry,
    ActorIndexSnapshot,
    ScanFailure,
    WorldDescriptor,
    WorldScan,
)
from actor_index.paths import DataPaths

WorldScanner = Callable[[WorldDescriptor], WorldScan]


@dataclass(slots=True, frozen=True)
class BuildProfile:
    """Diagnostics for the most recent build."""

    world_count: int
    entry_count: int
    failure_count: int
    store_kinds: dict[str, int]
    discover_seconds: float
    scan_seconds: float
    total_seconds: float


class IndexBuilder:
    """Builds the actor index and holds the latest complete snapshot.

    Builds are serialized on a lock. Readers call ``snapshot()``, which never
    blocks: the snapshot reference is swapped in one assignment after a
    build has fully completed.
    """

    def __init__(self, paths: DataPaths, scanner: WorldScanner, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be a positive integer.")
        self._paths = paths
        self._scanner = scanner
        self._max_workers = max_workers
        self._build_lock = threading.Lock()
        self._snapshot = ActorIndexSnapshot()
        self._last_profile: BuildProfile | None = None

    def snapshot(self) -> ActorIndexSnapshot:
        """Return the latest complete snapshot."""
        return self._snapshot

    def last_profile(self) -> BuildProfile | None:
        """Return diagnostics for the latest successful build, if any."""
        return self._last_profile

    def install(self, snapshot: ActorIndexSnapshot) -> None:
        """Replace the held snapshot, e.g. with one loaded from disk."""
        with self._build_lock:
            self._snapshot = snapshot

    def build_index(self) -> tuple[ActorIndexEntry, ...]:
        """Rebuild from disk, install the result and return its entries."""
        return self.build().entries

    def build(self) -> ActorIndexSnapshot:
        """Rebuild from disk and install the resulting snapshot.

        Raises ``WorldDiscoveryError`` when the worlds directory cannot be
        listed; the held snapshot is left untouched in that case.
        """
        with self._build_lock:
            started = time.perf_counter()
            discovery = discover_worlds(self._paths)
            discover_seconds = time.perf_counter() - started

            scan_started = time.perf_counter()
            scans = self._scan_all(discovery.worlds)
            scan_seconds = time.perf_counter() - scan_started

            entries: list[ActorIndexEntry] = []
            failures: list[ScanFailure] = list(discovery.failures)
            store_kinds: dict[str, int] = {}
            for scan in scans:
                entries.extend(scan.entries)
                failures.extend(scan.failures)
                if scan.store_kind is not None:
                    store_kinds[scan.store_kind] = store_kinds.get(scan.store_kind, 0) + 1

            snapshot = ActorIndexSnapshot(
                entries=tuple(entries),
                built_at=utc_timestamp(),
                world_count=len(discovery.worlds),
                failures=tuple(failures),
            )
            self._snapshot = snapshot
            self._last_profile = BuildProfile(
                world_count=snapshot.world_count,
                entry_count=len(snapshot.entries),
                failure_count=len(snapshot.failures),
                store_kinds=dict(sorted(store_kinds.items())),
                discover_seconds=discover_seconds,
                scan_seconds=scan_seconds,
                total_seconds=time.perf_counter() - started,
            )
            return snapshot

    def _scan_all(self, worlds: tuple[WorldDescriptor, ...]) -> list[WorldScan]:
        if self._max_workers == 1 or len(worlds) < 2:
            return [self._scanner(world) for world in worlds]
        # map() yields in submission order, so concatenation stays in discovery order.
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(worlds))) as executor:
            return list(executor.map(self._scanner, worlds))