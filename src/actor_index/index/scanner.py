"""Per-world actor scanning."""

from __future__ import annotations

from actor_index.models import (
    ActorIndexEntry,
    ActorRecord,
    ScanFailure,
    WorldDescriptor,
    WorldScan,
)
from actor_index.paths import DataPaths
from actor_index.storage import ActorStore, RecordFailure, StoreError, StoreRegistry


def scan_world(
    world: WorldDescriptor,
    paths: DataPaths,
    registry: StoreRegistry,
    actor_types: tuple[str, ...] = (),
) -> WorldScan:
    """Collect name/locator entries for every actor in one world.

    Record failures are collected, never raised. A world without actor
    storage yields an empty scan.
    """
    data_dir = paths.world_data_path(world.storage_path)
    try:
        store = registry.select(data_dir)
    except OSError as error:
        failure = ScanFailure(world_id=world.id, locator=str(data_dir), reason=f"storage: {error}")
        return WorldScan(world=world, entries=(), failures=(failure,), store_kind=None)
    if store is None:
        return WorldScan(world=world, entries=(), failures=(), store_kind=None)

    entries: list[ActorIndexEntry] = []
    failures: list[ScanFailure] = []
    allowed_types = set(actor_types)
    try:
        for outcome in store.iter_records():
            if isinstance(outcome, RecordFailure):
                failures.append(
                    ScanFailure(world_id=world.id, locator=outcome.locator, reason=outcome.reason)
                )
                continue
            if allowed_types and outcome.actor_type not in allowed_types:
                continue
            entry, failure = _entry_for_record(world, store, outcome)
            if failure is not None:
                failures.append(failure)
                continue
            entries.append(entry)
    except (StoreError, OSError) as error:
        failures.append(
            ScanFailure(world_id=world.id, locator=str(store.path), reason=f"storage: {error}")
        )
    return WorldScan(
        world=world,
        entries=tuple(entries),
        failures=tuple(failures),
        store_kind=store.kind,
    )


def _entry_for_record(
    world: WorldDescriptor, store: ActorStore, record: ActorRecord
) -> tuple[ActorIndexEntry | None, ScanFailure | None]:
    locator = store.locator(record.key)
    if record.name is None:
        return None, ScanFailure(world_id=world.id, locator=locator, reason="record: missing name")
    return ActorIndexEntry(name=record.name, world=world.name, storage_ref=locator), None
