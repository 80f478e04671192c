"""Actor index service: the single owner of the held index."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from functools import partial
from pathlib import Path

from actor_index.config import ActorIndexConfig
from actor_index.details import ActorDetails, load_record, summarize_actor
from actor_index.index import (
    BuildProfile,
    IndexBuilder,
    WorldDiscoveryError,
    list_worlds,
    read_index_file,
    scan_world,
    search_actor,
    search_actors,
    write_index_file,
)
from actor_index.logging import JsonlAuditLogger
from actor_index.models import ActorIndexEntry, ActorIndexSnapshot, WorldDescriptor
from actor_index.paths import DataPaths
from actor_index.storage import StoreRegistry, build_store_registry


@dataclass(slots=True, frozen=True)
class IndexStatus:
    """Current index status snapshot."""

    available: bool
    index_status: str
    built_at: str | None
    entry_count: int
    world_count: int
    failure_count: int


@dataclass(slots=True, frozen=True)
class ActorLookup:
    """An index hit together with its re-opened record summary."""

    entry: ActorIndexEntry
    details: ActorDetails


class ActorIndexService:
    """Discovers, builds and searches the actor index for one data root.

    The service starts with an empty index. ``build_index`` replaces it as a
    whole; searches always run against one complete snapshot.
    """

    def __init__(
        self,
        config: ActorIndexConfig,
        audit: JsonlAuditLogger | None = None,
        registry: StoreRegistry | None = None,
        builder: IndexBuilder | None = None,
    ) -> None:
        self._config = config
        self._paths = DataPaths(
            data_root=config.foundry.data_root,
            worlds_subdir=config.foundry.worlds_subdir,
        )
        self._registry = registry or build_store_registry()
        self._audit = audit
        self._builder = builder or IndexBuilder(
            paths=self._paths,
            scanner=partial(
                scan_world,
                paths=self._paths,
                registry=self._registry,
                actor_types=config.index.actor_types,
            ),
            max_workers=config.index.max_workers,
        )

    @property
    def config(self) -> ActorIndexConfig:
        return self._config

    @property
    def paths(self) -> DataPaths:
        return self._paths

    def is_available(self) -> bool:
        """Return True when the configured data root can be read."""
        return self._paths.is_available()

    def worlds_path(self) -> Path:
        return self._paths.worlds_path()

    def list_worlds(self) -> tuple[WorldDescriptor, ...]:
        """Discover worlds afresh."""
        worlds = list_worlds(self._paths)
        self._log("list_worlds", {"world_count": len(worlds)})
        return worlds

    def build_index(self) -> tuple[ActorIndexEntry, ...]:
        """Rebuild the index from disk, install it and return its entries."""
        try:
            snapshot = self._builder.build()
        except WorldDiscoveryError as error:
            self._log(
                "build_index",
                {"path": str(error.path), "reason": error.reason},
                ok=False,
                error_code="DISCOVERY_FAILED",
            )
            raise
        entries = snapshot.entries
        profile = self._builder.last_profile()
        self._log(
            "build_index",
            {
                "entry_count": len(entries),
                "world_count": snapshot.world_count,
                "failure_count": len(snapshot.failures),
                "store_kinds": dict(profile.store_kinds) if profile is not None else {},
                "duration_ms": int(profile.total_seconds * 1000) if profile is not None else 0,
            },
        )
        for failure in snapshot.failures:
            self._log(
                "scan_failure",
                {"world_id": failure.world_id, "reason": failure.reason},
                ok=False,
                error_code="PARTIAL_FAILURE",
            )
        if self._config.index.persist_index:
            self._persist(entries)
        return entries

    def _persist(self, entries: tuple[ActorIndexEntry, ...]) -> None:
        # The snapshot is already installed; a failed write only loses the saved copy.
        index_file = self._config.index_file
        try:
            skipped = write_index_file(index_file, entries)
        except OSError as error:
            self._log(
                "persist_index",
                {"path": str(index_file), "reason": str(error)},
                ok=False,
                error_code="PERSIST_FAILED",
            )
            return
        self._log(
            "persist_index",
            {"path": str(index_file), "entry_count": len(entries) - len(skipped)},
        )
        for entry in skipped:
            self._log(
                "persist_skipped",
                {"path": entry.storage_ref, "reason": "entry contains a reserved character"},
                ok=False,
                error_code="NOT_REPRESENTABLE",
            )

    def load_persisted(self) -> int:
        """Install the saved index file as the held index; return its size."""
        entries = read_index_file(self._config.index_file)
        built_at: str | None = None
        if self._config.index_file.exists():
            built_at = _mtime_iso(self._config.index_file)
        self._builder.install(
            ActorIndexSnapshot(
                entries=entries,
                built_at=built_at,
                world_count=len({entry.world for entry in entries}),
            )
        )
        self._log("load_persisted", {"entry_count": len(entries)})
        return len(entries)

    def snapshot(self) -> ActorIndexSnapshot:
        return self._builder.snapshot()

    def last_profile(self) -> BuildProfile | None:
        return self._builder.last_profile()

    def search_actor(self, name: str) -> ActorIndexEntry | None:
        """Return the first best match for a name, or None."""
        result = search_actor(self._builder.snapshot().entries, name)
        self._log("search_actor", {"query": name, "found": result is not None})
        return result

    def search_actors(self, name: str) -> list[ActorIndexEntry]:
        """Return every match for a name in deterministic order."""
        results = search_actors(self._builder.snapshot().entries, name)
        self._log("search_actors", {"query": name, "result_count": len(results)})
        return results

    def get_actor(self, name: str) -> ActorLookup | None:
        """Resolve a name and re-open the matching record from disk."""
        entry = search_actor(self._builder.snapshot().entries, name)
        if entry is None:
            self._log("get_actor", {"query": name, "found": False})
            return None
        payload = load_record(entry.storage_ref, self._registry)
        self._log("get_actor", {"query": name, "found": payload is not None})
        if payload is None:
            return None
        return ActorLookup(entry=entry, details=summarize_actor(payload))

    def read_audit(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Return recent audit events, oldest first."""
        if self._audit is None:
            return []
        return self._audit.read(since=since, limit=limit)

    def status(self) -> IndexStatus:
        """Return availability and held-index counters."""
        snapshot = self._builder.snapshot()
        return IndexStatus(
            available=self.is_available(),
            index_status="ready" if snapshot.built_at is not None else "not_indexed",
            built_at=snapshot.built_at,
            entry_count=len(snapshot.entries),
            world_count=snapshot.world_count,
            failure_count=len(snapshot.failures),
        )

    def _log(
        self,
        operation: str,
        arguments: dict[str, object],
        ok: bool = True,
        error_code: str | None = None,
    ) -> None:
        if self._audit is None:
            return
        self._audit.record(operation, arguments, ok=ok, error_code=error_code)


def create_service(config: ActorIndexConfig) -> ActorIndexService:
    """Create a service that writes its audit log under the configured data dir."""
    return ActorIndexService(config=config, audit=JsonlAuditLogger(path=config.audit_file))


def _mtime_iso(path: Path) -> str:
    stamp = datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
