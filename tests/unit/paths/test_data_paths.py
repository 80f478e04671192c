from __future__ import annotations

from pathlib import Path

from actor_index.paths import DataPaths


def test_missing_root_is_unavailable(tmp_path: Path) -> None:
    paths = DataPaths(data_root=tmp_path / "missing", worlds_subdir="Data/worlds")

    assert paths.is_available() is False


def test_file_root_is_unavailable(tmp_path: Path) -> None:
    root = tmp_path / "not-a-dir"
    root.write_text("x", encoding="utf-8")
    paths = DataPaths(data_root=root, worlds_subdir="Data/worlds")

    assert paths.is_available() is False


def test_existing_directory_is_available(tmp_path: Path) -> None:
    paths = DataPaths(data_root=tmp_path, worlds_subdir="Data/worlds")

    assert paths.is_available() is True


def test_availability_is_not_cached(tmp_path: Path) -> None:
    root = tmp_path / "later"
    paths = DataPaths(data_root=root, worlds_subdir="Data/worlds")
    assert paths.is_available() is False

    root.mkdir()

    assert paths.is_available() is True


def test_worlds_path_is_deterministic_join_without_validation(tmp_path: Path) -> None:
    paths = DataPaths(data_root=tmp_path / "missing", worlds_subdir="Data\\worlds/")

    assert paths.worlds_path() == tmp_path / "missing" / "Data" / "worlds"
    assert paths.world_path("alpha") == tmp_path / "missing" / "Data" / "worlds" / "alpha"
    assert DataPaths.world_data_path(tmp_path / "w") == tmp_path / "w" / "data"
