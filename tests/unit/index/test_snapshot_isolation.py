from __future__ import annotations

import threading
from functools import partial
from pathlib import Path

from actor_index.index import IndexBuilder, scan_world, search_actor
from actor_index.models import WorldDescriptor, WorldScan
from actor_index.paths import DataPaths
from actor_index.storage import build_store_registry


def test_readers_see_old_index_until_build_completes(foundry_root: Path, make_world) -> None:
    make_world("alpha", title="Alpha", actors=[{"_id": "a", "name": "Goblin"}])
    make_world("beta", title="Beta", actors=[{"_id": "a", "name": "Hobgoblin"}])
    paths = DataPaths(data_root=foundry_root, worlds_subdir="Data/worlds")
    real_scan = partial(scan_world, paths=paths, registry=build_store_registry())

    beta_scanned = threading.Event()
    release = threading.Event()
    blocking = {"enabled": False}

    def scanner(world: WorldDescriptor) -> WorldScan:
        scan = real_scan(world)
        if blocking["enabled"] and world.id == "beta":
            beta_scanned.set()
            assert release.wait(timeout=10)
        return scan

    builder = IndexBuilder(paths=paths, scanner=scanner)
    builder.build_index()
    old = builder.snapshot()

    (foundry_root / "Data" / "worlds" / "alpha" / "data" / "actors" / "a.json").write_text(
        '{"_id": "a", "name": "Goblin King"}', encoding="utf-8"
    )
    blocking["enabled"] = True
    errors: list[Exception] = []

    def run_build() -> None:
        try:
            builder.build_index()
        except Exception as error:
            errors.append(error)

    thread = threading.Thread(target=run_build)
    thread.start()
    assert beta_scanned.wait(timeout=10)

    # Mid-build: alpha has been rescanned but nothing is installed yet.
    during = builder.snapshot()
    assert during is old
    assert search_actor(during.entries, "goblin").name == "Goblin"

    release.set()
    thread.join(timeout=10)
    assert not thread.is_alive()
    assert errors == []

    after = builder.snapshot()
    assert after is not old
    assert [entry.name for entry in after.entries] == ["Goblin King", "Hobgoblin"]


def test_concurrent_searches_only_observe_complete_snapshots(
    foundry_root: Path, make_world
) -> None:
    for number in range(4):
        make_world(
            f"w{number}",
            title=f"W{number}",
            actors=[{"_id": f"k{index}", "name": f"Npc {index}"} for index in range(25)],
        )
    paths = DataPaths(data_root=foundry_root, worlds_subdir="Data/worlds")
    builder = IndexBuilder(
        paths=paths,
        scanner=partial(scan_world, paths=paths, registry=build_store_registry()),
        max_workers=2,
    )
    builder.build_index()
    observed_sizes: set[int] = set()
    stop = threading.Event()

    def reader() -> None:
        while not stop.is_set():
            snapshot = builder.snapshot()
            observed_sizes.add(len(snapshot.entries))

    readers = [threading.Thread(target=reader) for _ in range(3)]
    for thread in readers:
        thread.start()
    for _ in range(5):
        builder.build_index()
    stop.set()
    for thread in readers:
        thread.join(timeout=10)

    assert observed_sizes == {100}
