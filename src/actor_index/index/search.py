"""Deterministic name search over index entries.

Matching is case-insensitive (``str.casefold`` after trimming). An exact
name match beats a substring match, and ties go to the entry that comes
first in index order. There is no fuzzy or edit-distance ranking.
"""

from __future__ import annotations

from collections.abc import Sequence

from actor_index.models import ActorIndexEntry


def normalize_name(value: str) -> str:
    """Return the comparison form of a name or query."""
    return value.strip().casefold()


def search_actor(entries: Sequence[ActorIndexEntry], query: str) -> ActorIndexEntry | None:
    """Return the best match, or None when nothing matches."""
    needle = normalize_name(query)
    if not needle:
        return None
    first_partial: ActorIndexEntry | None = None
    for entry in entries:
        name = normalize_name(entry.name)
        if name == needle:
            return entry
        if first_partial is None and needle in name:
            first_partial = entry
    return first_partial


def search_actors(entries: Sequence[ActorIndexEntry], query: str) -> list[ActorIndexEntry]:
    """Return exact matches, then substring matches, each in index order."""
    needle = normalize_name(query)
    if not needle:
        return []
    exact: list[ActorIndexEntry] = []
    partial: list[ActorIndexEntry] = []
    for entry in entries:
        name = normalize_name(entry.name)
        if name == needle:
            exact.append(entry)
        elif needle in name:
            partial.append(entry)
    return exact + partial
