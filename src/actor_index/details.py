"""Re-open indexed actor records and summarize their contents."""

from __future__ import annotations

from dataclasses import dataclass

from actor_index.storage import StoreError, StoreRegistry

UNKNOWN = "Unknown"
NO_DESCRIPTION = "No description available"
INVENTORY_ITEM_TYPES = frozenset({"equipment", "weapon", "armor", "loot", "consumable"})
SPELL_ITEM_TYPES = frozenset({"spell"})
ABILITY_ITEM_TYPES = frozenset({"feat", "feature", "ability"})


@dataclass(slots=True, frozen=True)
class ActorStats:
    level: str
    character_class: str
    race: str
    alignment: str
    hit_points: str
    armor_class: str


@dataclass(slots=True, frozen=True)
class InventoryItem:
    name: str
    item_type: str
    quantity: int
    weight: str
    value: str


@dataclass(slots=True, frozen=True)
class Spell:
    name: str
    level: str
    school: str
    prepared: bool
    description: str


@dataclass(slots=True, frozen=True)
class Ability:
    name: str
    item_type: str
    description: str


@dataclass(slots=True, frozen=True)
class ActorDetails:
    """Summary of one full actor record."""

    key: str | None
    name: str
    actor_type: str
    game_system: str
    stats: ActorStats | None
    inventory: tuple[InventoryItem, ...]
    spells: tuple[Spell, ...]
    abilities: tuple[Ability, ...]


def load_record(locator: str, registry: StoreRegistry) -> dict[str, object] | None:
    """Return the full payload addressed by a locator, or None when it is gone."""
    resolved = registry.resolve_locator(locator)
    if resolved is None:
        return None
    store, key = resolved
    try:
        return store.read(key)
    except (StoreError, OSError):
        return None


def summarize_actor(payload: dict[str, object]) -> ActorDetails:
    """Extract stats, inventory, spells and abilities from a full actor record."""
    system = payload.get("system")
    items = [item for item in _as_list(payload.get("items")) if isinstance(item, dict)]
    key = payload.get("_id")
    return ActorDetails(
        key=key if isinstance(key, str) else None,
        name=_text(payload.get("name"), UNKNOWN),
        actor_type=_text(payload.get("type"), UNKNOWN),
        game_system=_text(_dig(payload, "_stats", "systemId"), UNKNOWN),
        stats=_extract_stats(system) if isinstance(system, dict) else None,
        inventory=tuple(
            InventoryItem(
                name=_text(item.get("name"), UNKNOWN),
                item_type=_text(item.get("type"), UNKNOWN),
                quantity=_quantity(_dig(item, "system", "quantity")),
                weight=_display(_dig(item, "system", "weight")),
                value=_display(
                    _first(_dig(item, "system", "price"), _dig(item, "system", "value"))
                ),
            )
            for item in items
            if item.get("type") in INVENTORY_ITEM_TYPES
        ),
        spells=tuple(
            Spell(
                name=_text(item.get("name"), UNKNOWN),
                level=_display(_dig(item, "system", "level")),
                school=_display(_dig(item, "system", "school")),
                prepared=_dig(item, "system", "preparation", "prepared") is True
                or _dig(item, "system", "prepared") is True,
                description=_display(_dig(item, "system", "description"), NO_DESCRIPTION),
            )
            for item in items
            if item.get("type") in SPELL_ITEM_TYPES
        ),
        abilities=tuple(
            Ability(
                name=_text(item.get("name"), UNKNOWN),
                item_type=_text(item.get("type"), UNKNOWN),
                description=_display(_dig(item, "system", "description"), NO_DESCRIPTION),
            )
            for item in items
            if item.get("type") in ABILITY_ITEM_TYPES
        ),
    )


def _extract_stats(system: dict[str, object]) -> ActorStats:
    return ActorStats(
        level=_display(_dig(system, "details", "level")),
        character_class=_display(_dig(system, "details", "class")),
        race=_display(_dig(system, "details", "race")),
        alignment=_display(_dig(system, "details", "alignment")),
        hit_points=_display(
            _first(_dig(system, "attributes", "hp"), _dig(system, "attributes", "hitPoints"))
        ),
        armor_class=_display(
            _first(_dig(system, "attributes", "ac"), _dig(system, "attributes", "armorClass"))
        ),
    )


def _dig(payload: object, *keys: str) -> object:
    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _first(*values: object) -> object:
    for value in values:
        if value not in (None, "", {}):
            return value
    return None


def _display(value: object, default: str = UNKNOWN) -> str:
    """Render scalar or ``{"value": ..., "max": ...}`` game-system fields."""
    if isinstance(value, dict):
        current = value.get("value")
        maximum = value.get("max")
        if current is not None and maximum is not None:
            return f"{current}/{maximum}"
        if current is not None:
            return _display(current, default)
        return default
    if value is None or isinstance(value, (list, tuple)):
        return default
    text = str(value).strip()
    return text or default


def _text(value: object, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _quantity(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        return 1
    return int(value)


def _as_list(value: object) -> list[object]:
    if isinstance(value, list):
        return value
    return []
