from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from actor_index.config import ActorIndexConfig, CliOverrides, load_effective_config

WorldFactory = Callable[..., Path]


@pytest.fixture()
def foundry_root(tmp_path: Path) -> Path:
    root = tmp_path / "foundry"
    (root / "Data" / "worlds").mkdir(parents=True)
    return root


@pytest.fixture()
def make_world(foundry_root: Path) -> WorldFactory:
    """Create a world directory with a manifest and actor storage.

    ``layout`` is ``json-dir`` (one file per actor) or ``nedb`` (one
    ``actors.db`` line per actor). ``manifest=None`` omits the manifest and a
    ``str`` manifest is written verbatim.
    """

    def _make(
        world_id: str,
        title: str | None = None,
        actors: list[dict[str, object]] | None = None,
        layout: str = "json-dir",
        manifest: dict[str, object] | str | None = None,
    ) -> Path:
        world_dir = foundry_root / "Data" / "worlds" / world_id
        data_dir = world_dir / "data"
        data_dir.mkdir(parents=True)
        if manifest is None and title is not None:
            manifest = {"id": world_id, "title": title, "system": "pf1"}
        if isinstance(manifest, str):
            (world_dir / "world.json").write_text(manifest, encoding="utf-8")
        elif manifest is not None:
            (world_dir / "world.json").write_text(json.dumps(manifest), encoding="utf-8")
        if actors is None:
            return world_dir
        if layout == "json-dir":
            actors_dir = data_dir / "actors"
            actors_dir.mkdir()
            for position, actor in enumerate(actors):
                key = str(actor.get("_id", f"actor{position:03d}"))
                (actors_dir / f"{key}.json").write_text(json.dumps(actor), encoding="utf-8")
        elif layout == "nedb":
            lines = [json.dumps(actor) for actor in actors]
            (data_dir / "actors.db").write_text("\n".join(lines) + "\n", encoding="utf-8")
        else:
            raise ValueError(f"unknown layout: {layout}")
        return world_dir

    return _make


@pytest.fixture()
def index_config(foundry_root: Path, tmp_path: Path) -> ActorIndexConfig:
    return load_effective_config(
        working_dir=tmp_path,
        overrides=CliOverrides(data_root=foundry_root, data_dir=tmp_path / "state"),
        environ={},
    )
