import logging
from dataclasses import asdict
from typing import List, Optional

from ..schemas.location import (
    HierarchyEntry,
    Location as LocationSchema,
    LocationCreate,
    LocationDetail,
    LocationRef,
    LocationSummary,
    LocationUpdate,
    clean_location_name,
)
from .cycle_guard import would_create_cycle
from .deletion_guard import can_delete
from .errors import (
    CircularReference,
    HasDependents,
    InvalidParent,
    LocationNotFound,
    LocationValidationError,
)
from .location_store import LocationRecord, LocationStore
from .path import ancestors, by_name, children_map_from_snapshot

logger = logging.getLogger(__name__)


def _check_name(name: Optional[str]) -> str:
    try:
        return clean_location_name(name)
    except ValueError as e:
        raise LocationValidationError(str(e))


def _ref(rec: Optional[LocationRecord]) -> Optional[LocationRef]:
    return LocationRef.model_validate(rec) if rec is not None else None


class HierarchyManager:
    """
    Create, update and delete locations without breaking the tree.

    Every mutation runs inside `store.transaction()`, so existence, cycle and
    dependent checks are evaluated against the same data the write commits
    on. A rejected request leaves the store untouched.
    """

    def __init__(self, store: LocationStore):
        self.store = store

    def get_location(self, location_id: int) -> LocationRecord:
        loc = self.store.get(location_id)
        if loc is None:
            raise LocationNotFound()
        return loc

    def create_location(self, command: LocationCreate) -> LocationRecord:
        name = _check_name(command.name)

        with self.store.transaction():
            if command.parent_id is not None and self.store.get(command.parent_id) is None:
                logger.warning(f"Rejected location '{name}': parent {command.parent_id} does not exist")
                raise InvalidParent()

            loc = self.store.create({
                "name": name,
                "description": command.description,
                "parent_id": command.parent_id,
            })

        logger.info(f"Created location {loc.id} '{loc.name}' under parent {loc.parent_id}")
        return loc

    def update_location(self, location_id: int, command: LocationUpdate) -> LocationRecord:
        fields = command.provided_fields()
        if "name" in fields:
            fields["name"] = _check_name(fields["name"])

        with self.store.transaction():
            if self.store.get(location_id) is None:
                raise LocationNotFound()

            if command.parent_id_provided and command.parent_id is not None:
                if self.store.get(command.parent_id) is None:
                    logger.warning(f"Rejected move of location {location_id}: parent {command.parent_id} does not exist")
                    raise InvalidParent()
                if would_create_cycle(self.store, location_id, command.parent_id):
                    logger.warning(f"Rejected move of location {location_id} under {command.parent_id}: circular reference")
                    raise CircularReference()

            loc = self.store.update(location_id, fields)

        logger.info(f"Updated location {location_id}: {sorted(fields)}")
        return loc

    def delete_location(self, location_id: int) -> None:
        with self.store.transaction():
            if self.store.get(location_id) is None:
                raise LocationNotFound()

            check = can_delete(self.store, location_id)
            if not check.ok:
                logger.warning(f"Rejected delete of location {location_id}: {check.reason} ({check.count})")
                raise HasDependents(check.reason, check.count)

            self.store.delete(location_id)

        logger.info(f"Deleted location {location_id}")

    def list_locations(self) -> List[LocationSummary]:
        """
        All locations ordered by name, each with its parent and direct
        children, built from one snapshot of the table.
        """
        records = self.store.list()
        by_id = {rec.id: rec for rec in records}
        children = children_map_from_snapshot(records)

        return [
            LocationSummary(
                **asdict(rec),
                parent=_ref(by_id.get(rec.parent_id)) if rec.parent_id is not None else None,
                children=[_ref(kid) for kid in sorted(children.get(rec.id, []), key=by_name)],
            )
            for rec in sorted(records, key=by_name)
        ]

    def list_top_locations(self) -> List[LocationRecord]:
        return sorted((rec for rec in self.store.list() if rec.parent_id is None), key=by_name)

    def list_child_locations(self, parent_id: int) -> List[LocationRecord]:
        self.get_location(parent_id)
        return sorted((rec for rec in self.store.list() if rec.parent_id == parent_id), key=by_name)

    def describe_location(self, location_id: int) -> LocationDetail:
        loc = self.get_location(location_id)
        parent = self.store.get(loc.parent_id) if loc.parent_id is not None else None

        return LocationDetail(
            **asdict(loc),
            parent=_ref(parent),
            children=[_ref(kid) for kid in self.list_child_locations(location_id)],
            breadcrumb=[_ref(a) for a in ancestors(self.store, location_id)],
            box_count=self.store.count_boxes(location_id),
            item_count=self.store.count_items(location_id),
        )

    def list_hierarchy(self) -> List[HierarchyEntry]:
        """
        Depth-first, pre-order walk from the root locations, siblings sorted
        by name. Each node carries its depth (roots are 0) for indentation.
        """
        records = self.store.list()
        children = children_map_from_snapshot(records)

        result: List[HierarchyEntry] = []
        visited: set[int] = set()
        stack = [(rec, 0) for rec in reversed(sorted(children.get(None, []), key=by_name))]

        while stack:
            rec, depth = stack.pop()
            if rec.id in visited:
                continue
            visited.add(rec.id)
            result.append(HierarchyEntry(location=LocationSchema.model_validate(rec), depth=depth))
            kids = sorted(children.get(rec.id, []), key=by_name)
            stack.extend((kid, depth + 1) for kid in reversed(kids))

        if len(visited) < len(records):
            logger.warning(
                f"{len(records) - len(visited)} location(s) are not reachable from a root "
                f"and were left out of the hierarchy"
            )
        return result
