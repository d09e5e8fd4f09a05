import logging
from typing import Optional

from .location_store import LocationStore

logger = logging.getLogger(__name__)


def would_create_cycle(store: LocationStore, location_id: int, candidate_parent_id: Optional[int]) -> bool:
    """
    True if making `candidate_parent_id` the parent of `location_id` would
    break the forest invariant.

    Walks upward from the candidate parent. Meeting `location_id` on the way
    means the candidate is one of its descendants. Revisiting a node means the
    stored data already holds a cycle; that is rejected as well.
    """
    if candidate_parent_id is None:
        return False
    if candidate_parent_id == location_id:
        return True

    visited: set[int] = set()
    current_id: Optional[int] = candidate_parent_id

    while current_id is not None:
        if current_id == location_id:
            return True
        if current_id in visited:
            logger.warning(f"Existing cycle detected in location hierarchy at location {current_id}")
            return True
        visited.add(current_id)

        current = store.get(current_id)
        if current is None:
            break
        current_id = current.parent_id

    return False
