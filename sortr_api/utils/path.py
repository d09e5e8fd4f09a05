import logging
from collections import defaultdict
from typing import DefaultDict, List, Optional, Sequence

from .config import BREADCRUMB_SEPARATOR
from .errors import LocationNotFound
from .location_store import LocationRecord, LocationStore

logger = logging.getLogger(__name__)


def ancestors(store: LocationStore, location_id: int) -> List[LocationRecord]:
    """
    Returns the chain of locations from the root down to `location_id`.
    Guaranteed order: [root, ..., parent, current].

    Raises LocationNotFound if `location_id` does not resolve. A chain that
    loops back on itself is cut at the first revisited node.
    """
    current = store.get(location_id)
    if current is None:
        raise LocationNotFound()

    chain: List[LocationRecord] = []
    visited: set[int] = set()

    while current is not None:
        if current.id in visited:
            logger.warning(f"Existing cycle detected while resolving path of location {location_id}")
            break
        visited.add(current.id)
        chain.append(current)
        if current.parent_id is None:
            break
        current = store.get(current.parent_id)

    chain.reverse()
    return chain


def breadcrumb(store: LocationStore, location_id: int) -> List[str]:
    return [loc.name for loc in ancestors(store, location_id)]


def format_breadcrumb(names: Sequence[str], separator: Optional[str] = None) -> str:
    """e.g. ["House", "Garage", "Shelf 2"] -> "House > Garage > Shelf 2" """
    return (BREADCRUMB_SEPARATOR if separator is None else separator).join(names)


def by_name(rec: LocationRecord):
    """Sort key: case-insensitive name, then exact name, then id."""
    return rec.name.lower(), rec.name, rec.id


def children_map_from_snapshot(records: Sequence[LocationRecord]) -> DefaultDict[Optional[int], List[LocationRecord]]:
    """Group one snapshot of the table by parent_id. Roots sit under None."""
    children: DefaultDict[Optional[int], List[LocationRecord]] = defaultdict(list)
    for rec in records:
        children[rec.parent_id].append(rec)
    return children


def descendant_ids(store: LocationStore, location_id: int) -> List[int]:
    """
    Compute ALL descendant location IDs under `location_id` from a single
    snapshot of the locations table, then in-memory BFS over a
    parent->children map. Excludes `location_id` itself.
    """
    children = children_map_from_snapshot(store.list())

    descendants: List[int] = []
    seen: set[int] = {location_id}
    frontier: List[int] = [location_id]

    while frontier:
        next_frontier: List[int] = []
        for lid in frontier:
            for kid in children.get(lid, []):
                if kid.id in seen:
                    continue
                seen.add(kid.id)
                descendants.append(kid.id)
                next_frontier.append(kid.id)
        frontier = next_frontier

    return descendants


def move_targets(store: LocationStore, location_id: int) -> List[LocationRecord]:
    """
    Locations that `location_id` may be moved into: everything except the
    location itself and its own descendants, ordered by name.
    """
    if store.get(location_id) is None:
        raise LocationNotFound()

    excluded = set(descendant_ids(store, location_id))
    excluded.add(location_id)

    targets = [rec for rec in store.list() if rec.id not in excluded]
    return sorted(targets, key=by_name)
