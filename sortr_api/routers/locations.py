from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..db import get_db
from ..schemas.location import (
    Location as LocationSchema,
    LocationSummary,
    LocationDetail,
    LocationCreate,
    LocationUpdate,
    LocationDeleted,
    HierarchyEntry,
    Breadcrumb,
)
from ..utils.hierarchy import HierarchyManager
from ..utils.location_store import SqlLocationStore
from ..utils.path import format_breadcrumb, ancestors, move_targets

router = APIRouter(prefix="/api/locations", tags=["Locations"])


def get_store(db: Session = Depends(get_db)) -> SqlLocationStore:
    return SqlLocationStore(db)


def get_hierarchy(store: SqlLocationStore = Depends(get_store)) -> HierarchyManager:
    return HierarchyManager(store)


@router.get("", response_model=list[LocationSummary])
def get_all_locations(hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return hierarchy.list_locations()


@router.post("", response_model=LocationSchema)
def add_location(data: LocationCreate, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return hierarchy.create_location(data)


@router.get("/tree", response_model=list[HierarchyEntry])
def get_location_tree(hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return hierarchy.list_hierarchy()


@router.get("/top", response_model=list[LocationSchema])
def get_top_locations(hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return hierarchy.list_top_locations()


@router.get("/{location_id}", response_model=LocationDetail)
def get_single_location(location_id: int, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return hierarchy.describe_location(location_id)


@router.get("/{location_id}/children", response_model=list[LocationSchema])
def get_children(location_id: int, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    return hierarchy.list_child_locations(location_id)


@router.get("/{location_id}/breadcrumb", response_model=Breadcrumb)
def get_breadcrumb(location_id: int, store: SqlLocationStore = Depends(get_store)):
    chain = ancestors(store, location_id)
    names = [loc.name for loc in chain]
    return Breadcrumb(ids=[loc.id for loc in chain], names=names, path=format_breadcrumb(names))


@router.get("/{location_id}/move-targets", response_model=list[LocationSchema])
def get_move_targets(location_id: int, store: SqlLocationStore = Depends(get_store)):
    """
    Locations this one can be moved into: everything except itself and
    its own descendants.
    """
    return move_targets(store, location_id)


@router.put("/{location_id}", response_model=LocationSchema)
def update_location_endpoint(
        location_id: int,
        data: LocationUpdate,
        hierarchy: HierarchyManager = Depends(get_hierarchy),
):
    return hierarchy.update_location(location_id, data)


@router.delete("/{location_id}", response_model=LocationDeleted)
def remove_location(location_id: int, hierarchy: HierarchyManager = Depends(get_hierarchy)):
    hierarchy.delete_location(location_id)
    return LocationDeleted(message="Location deleted successfully")
