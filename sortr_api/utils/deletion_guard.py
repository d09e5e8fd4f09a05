from dataclasses import dataclass
from typing import Optional

from .errors import BOXES_REASON, CHILDREN_REASON
from .location_store import LocationStore


@dataclass(frozen=True)
class DeletionCheck:
    ok: bool
    reason: Optional[str] = None
    count: int = 0

    @classmethod
    def allowed(cls) -> "DeletionCheck":
        return cls(ok=True)

    @classmethod
    def blocked(cls, reason: str, count: int) -> "DeletionCheck":
        return cls(ok=False, reason=reason, count=count)


def can_delete(store: LocationStore, location_id: int) -> DeletionCheck:
    """
    Decide whether a location may be deleted.

    Both counts are always queried. Child locations take precedence over
    boxes, and only that first obstruction is reported.
    """
    children = store.count_children(location_id)
    boxes = store.count_boxes(location_id)

    if children > 0:
        return DeletionCheck.blocked(CHILDREN_REASON, children)
    if boxes > 0:
        return DeletionCheck.blocked(BOXES_REASON, boxes)
    return DeletionCheck.allowed()
