"""Path resolution helpers for the external application's data directory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

WORLD_DATA_DIR_NAME: Final[str] = "data"


@dataclass(slots=True, frozen=True)
class DataPaths:
    """Resolves the worlds directory and per-world subpaths under a data root."""

    data_root: Path
    worlds_subdir: str

    def is_available(self) -> bool:
        """Return True when the data root is an existing, readable directory.

        Never raises; availability is re-checked on every call.
        """
        try:
            if not self.data_root.is_dir():
                return False
        except OSError:
            return False
        return os.access(self.data_root, os.R_OK | os.X_OK)

    def worlds_path(self) -> Path:
        """Return the worlds directory without checking that it exists."""
        parts = [part for part in self.worlds_subdir.replace("\\", "/").split("/") if part]
        return self.data_root.joinpath(*parts)

    def world_path(self, world_id: str) -> Path:
        """Return the directory of one world."""
        return self.worlds_path() / world_id

    @staticmethod
    def world_data_path(world_dir: Path) -> Path:
        """Return the document storage directory inside a world directory."""
        return world_dir / WORLD_DATA_DIR_NAME
