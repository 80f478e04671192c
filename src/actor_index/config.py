"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "actor_index.toml"
DATA_ROOT_ENV_VAR = "FOUNDRY_DATA_PATH"
DEFAULT_DATA_ROOT = Path("~/.local/share/FoundryVTT")
DEFAULT_WORLDS_SUBDIR = "Data/worlds"
DEFAULT_DATA_DIR_NAME = ".actor_index"
MAX_WORKERS_CAP = 32


@dataclass(slots=True, frozen=True)
class FoundryConfig:
    """Location of the external application's data."""

    data_root: Path
    worlds_subdir: str


@dataclass(slots=True, frozen=True)
class IndexSettings:
    """Build behavior settings."""

    actor_types: tuple[str, ...]
    max_workers: int
    persist_index: bool


@dataclass(slots=True, frozen=True)
class ActorIndexConfig:
    """Fully merged configuration."""

    foundry: FoundryConfig
    index: IndexSettings
    data_dir: Path

    @property
    def index_file(self) -> Path:
        """Return the path of the persisted index file."""
        return self.data_dir / "actor_index.txt"

    @property
    def audit_file(self) -> Path:
        """Return the path of the JSONL audit log."""
        return self.data_dir / "audit.jsonl"

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "foundry": {
                "data_root": str(self.foundry.data_root),
                "worlds_subdir": self.foundry.worlds_subdir,
            },
            "index": {
                "actor_types": list(self.index.actor_types),
                "max_workers": self.index.max_workers,
                "persist_index": self.index.persist_index,
            },
            "data_dir": str(self.data_dir),
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_root: Path | None = None
    worlds_subdir: str | None = None
    data_dir: Path | None = None
    actor_types: tuple[str, ...] | None = None
    max_workers: int | None = None
    persist_index: bool | None = None


def default_config(working_dir: Path, environ: dict[str, str] | None = None) -> ActorIndexConfig:
    """Build default config, honoring the data root environment variable."""
    env = os.environ if environ is None else environ
    raw_root = env.get(DATA_ROOT_ENV_VAR, "").strip()
    data_root = Path(raw_root) if raw_root else DEFAULT_DATA_ROOT
    return ActorIndexConfig(
        foundry=FoundryConfig(
            data_root=data_root.expanduser(),
            worlds_subdir=DEFAULT_WORLDS_SUBDIR,
        ),
        index=IndexSettings(actor_types=(), max_workers=1, persist_index=True),
        data_dir=working_dir.resolve() / DEFAULT_DATA_DIR_NAME,
    )


def load_config_file(config_path: Path) -> dict[str, object]:
    """Load an optional TOML config file."""
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{config_path.name} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_str(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value.strip()


def merge_config(
    base: ActorIndexConfig, file_payload: dict[str, object], overrides: CliOverrides
) -> ActorIndexConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    foundry_payload = _get_table(file_payload, "foundry")
    index_payload = _get_table(file_payload, "index")

    data_root = base.foundry.data_root
    if "data_root" in foundry_payload:
        data_root = Path(
            _optional_str(foundry_payload["data_root"], "foundry.data_root", str(data_root))
        ).expanduser()
    worlds_subdir = _optional_str(
        foundry_payload.get("worlds_subdir"), "foundry.worlds_subdir", base.foundry.worlds_subdir
    )

    actor_types = base.index.actor_types
    if "actor_types" in index_payload:
        actor_types = _tuple_of_strings(index_payload["actor_types"], "index", "actor_types")
    max_workers = _optional_positive_int_with_cap(
        index_payload.get("max_workers"),
        "index.max_workers",
        base.index.max_workers,
        MAX_WORKERS_CAP,
    )
    persist_index = base.index.persist_index
    if "persist_index" in index_payload:
        raw_persist = index_payload["persist_index"]
        if not isinstance(raw_persist, bool):
            raise ValueError("Config field 'index.persist_index' must be a boolean.")
        persist_index = raw_persist

    data_dir = base.data_dir
    if "data_dir" in file_payload:
        data_dir = Path(_optional_str(file_payload["data_dir"], "data_dir", str(data_dir)))

    merged = ActorIndexConfig(
        foundry=FoundryConfig(data_root=data_root, worlds_subdir=worlds_subdir),
        index=IndexSettings(
            actor_types=actor_types,
            max_workers=max_workers,
            persist_index=persist_index,
        ),
        data_dir=data_dir,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: ActorIndexConfig, overrides: CliOverrides) -> ActorIndexConfig:
    """Apply startup overrides at highest precedence."""
    max_workers = _optional_positive_int_with_cap(
        overrides.max_workers,
        "overrides.max_workers",
        config.index.max_workers,
        MAX_WORKERS_CAP,
    )
    worlds_subdir = _optional_str(
        overrides.worlds_subdir, "overrides.worlds_subdir", config.foundry.worlds_subdir
    )
    data_root = overrides.data_root or config.foundry.data_root
    data_dir = overrides.data_dir or config.data_dir
    return ActorIndexConfig(
        foundry=FoundryConfig(
            data_root=data_root.expanduser(),
            worlds_subdir=worlds_subdir,
        ),
        index=IndexSettings(
            actor_types=(
                overrides.actor_types
                if overrides.actor_types is not None
                else config.index.actor_types
            ),
            max_workers=max_workers,
            persist_index=(
                overrides.persist_index
                if overrides.persist_index is not None
                else config.index.persist_index
            ),
        ),
        data_dir=data_dir.expanduser().resolve(),
    )


def load_effective_config(
    working_dir: Path,
    config_path: Path | None = None,
    overrides: CliOverrides | None = None,
    environ: dict[str, str] | None = None,
) -> ActorIndexConfig:
    """Load effective config using merge order defaults -> env -> file -> overrides."""
    resolved_dir = working_dir.resolve()
    base = default_config(resolved_dir, environ=environ)
    payload = load_config_file(config_path or resolved_dir / CONFIG_FILE_NAME)
    return merge_config(base, payload, overrides or CliOverrides())


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
