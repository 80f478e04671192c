"""Actor storage formats."""

from .base import (
    ActorStore,
    RecordFailure,
    RecordOutcome,
    StoreError,
    StoreFactory,
    container_locator,
    decode_payload,
    split_container_locator,
)
from .json_dir import JsonDirectoryStore
from .leveldb import LevelDbStore
from .nedb import NedbStore
from .registry import StoreRegistry, build_store_registry

__all__ = [
    "ActorStore",
    "JsonDirectoryStore",
    "LevelDbStore",
    "NedbStore",
    "RecordFailure",
    "RecordOutcome",
    "StoreError",
    "StoreFactory",
    "StoreRegistry",
    "build_store_registry",
    "container_locator",
    "decode_payload",
    "split_container_locator",
]
