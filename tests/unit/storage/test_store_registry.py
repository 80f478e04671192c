from __future__ import annotations

import json
from pathlib import Path

from actor_index.storage import (
    JsonDirectoryStore,
    LevelDbStore,
    NedbStore,
    StoreRegistry,
    build_store_registry,
)


def test_default_registry_order() -> None:
    assert build_store_registry().kinds() == ("leveldb", "json-dir", "nedb")


def test_select_prefers_leveldb_then_directory_then_nedb(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    (data_dir / "actors").mkdir(parents=True)
    (data_dir / "actors.db").write_text("", encoding="utf-8")
    registry = build_store_registry()

    assert isinstance(registry.select(data_dir), JsonDirectoryStore)

    (data_dir / "actors" / "CURRENT").write_text("MANIFEST-000001\n", encoding="utf-8")
    assert isinstance(registry.select(data_dir), LevelDbStore)


def test_select_falls_back_to_nedb_file(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "actors.db").write_text(json.dumps({"_id": "a"}) + "\n", encoding="utf-8")

    assert isinstance(build_store_registry().select(data_dir), NedbStore)


def test_select_returns_none_without_actor_storage(tmp_path: Path) -> None:
    assert build_store_registry().select(tmp_path) is None


def test_resolve_locator_dispatches_by_format(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    (data_dir / "actors").mkdir(parents=True)
    (data_dir / "actors" / "a.json").write_text("{}", encoding="utf-8")
    (data_dir / "actors.db").write_text("", encoding="utf-8")
    registry = build_store_registry()

    json_resolved = registry.resolve_locator(str(data_dir / "actors" / "a.json"))
    nedb_resolved = registry.resolve_locator(f"{data_dir / 'actors.db'}#abc")

    assert json_resolved is not None and isinstance(json_resolved[0], JsonDirectoryStore)
    assert nedb_resolved is not None and isinstance(nedb_resolved[0], NedbStore)
    assert nedb_resolved[1] == "abc"
    assert registry.resolve_locator("nowhere") is None


def test_empty_registry_selects_nothing(tmp_path: Path) -> None:
    (tmp_path / "actors").mkdir()

    assert StoreRegistry().select(tmp_path) is None
    assert StoreRegistry().kinds() == ()
