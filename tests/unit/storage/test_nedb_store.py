from __future__ import annotations

import json
from pathlib import Path

import pytest

from actor_index.models import ActorRecord
from actor_index.storage import NedbStore, RecordFailure, StoreError


def _write_db(path: Path, lines: list[object]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    rendered = [line if isinstance(line, str) else json.dumps(line) for line in lines]
    path.write_text("\n".join(rendered) + "\n", encoding="utf-8")
    return path


def test_later_lines_supersede_and_deletes_remove(tmp_path: Path) -> None:
    db = _write_db(
        tmp_path / "data" / "actors.db",
        [
            {"_id": "a", "name": "Goblin", "type": "npc"},
            {"_id": "b", "name": "Kyra", "type": "character"},
            {"_id": "c", "name": "Ezren", "type": "character"},
            {"_id": "a", "name": "Goblin Chief", "type": "npc"},
            {"_id": "b", "$$deleted": True},
        ],
    )

    outcomes = list(NedbStore(db).iter_records())

    assert outcomes == [
        ActorRecord(key="a", name="Goblin Chief", actor_type="npc"),
        ActorRecord(key="c", name="Ezren", actor_type="character"),
    ]


def test_bad_lines_are_reported_after_records(tmp_path: Path) -> None:
    db = _write_db(
        tmp_path / "actors.db",
        [
            "{not json",
            {"name": "No Id"},
            "[1, 2]",
            {"_id": "a", "name": "Amiri"},
        ],
    )

    outcomes = list(NedbStore(db).iter_records())

    assert outcomes[0] == ActorRecord(key="a", name="Amiri", actor_type=None)
    failures = outcomes[1:]
    assert all(isinstance(failure, RecordFailure) for failure in failures)
    assert [failure.locator for failure in failures] == [f"{db}:1", f"{db}:2", f"{db}:3"]
    assert failures[1].reason == "record: missing _id"


def test_read_returns_latest_version(tmp_path: Path) -> None:
    db = _write_db(
        tmp_path / "actors.db",
        [
            {"_id": "a", "name": "Goblin"},
            {"_id": "a", "name": "Goblin Chief", "items": []},
            {"_id": "b", "name": "Kyra"},
            {"_id": "b", "$$deleted": True},
        ],
    )
    store = NedbStore(db)

    assert store.read("a") == {"_id": "a", "name": "Goblin Chief", "items": []}
    assert store.read("b") is None
    assert store.read("missing") is None


def test_locator_round_trips_through_from_locator(tmp_path: Path) -> None:
    db = _write_db(tmp_path / "actors.db", [{"_id": "a", "name": "Goblin"}])
    store = NedbStore(db)

    resolved = NedbStore.from_locator(store.locator("a"))

    assert resolved is not None
    reopened, key = resolved
    assert reopened.path == db
    assert key == "a"
    assert NedbStore.from_locator(str(db)) is None
    assert NedbStore.from_locator(f"{tmp_path / 'other.db'}#a") is None


def test_unreadable_file_raises_store_error(tmp_path: Path) -> None:
    store = NedbStore(tmp_path / "actors.db")

    with pytest.raises(StoreError):
        list(store.iter_records())
