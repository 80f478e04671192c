"""Store registry with deterministic format selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from actor_index.storage.base import ActorStore, StoreFactory
from actor_index.storage.json_dir import JsonDirectoryStore
from actor_index.storage.leveldb import LevelDbStore
from actor_index.storage.nedb import NedbStore


@dataclass(slots=True)
class StoreRegistry:
    """Ordered store factories; the first format present in a world wins."""

    _factories: list[StoreFactory] = field(default_factory=list)

    def register(self, factory: StoreFactory) -> None:
        """Register a store format in deterministic insertion order."""
        self._factories.append(factory)

    def select(self, data_dir: Path) -> ActorStore | None:
        """Return the store for a world's data directory, or None when it has none."""
        for factory in self._factories:
            store = factory.probe(data_dir)
            if store is not None:
                return store
        return None

    def resolve_locator(self, locator: str) -> tuple[ActorStore, str] | None:
        """Return the store and record key addressed by a locator."""
        for factory in self._factories:
            resolved = factory.from_locator(locator)
            if resolved is not None:
                return resolved
        return None

    def kinds(self) -> tuple[str, ...]:
        """Return registered store kinds in deterministic order."""
        return tuple(factory.kind for factory in self._factories)


def build_store_registry() -> StoreRegistry:
    """Build the default registry: LevelDB, then JSON directory, then NeDB file."""
    registry = StoreRegistry()
    registry.register(LevelDbStore)
    registry.register(JsonDirectoryStore)
    registry.register(NedbStore)
    return registry
