import random

import pytest
from pydantic import ValidationError

from sortr_api.schemas.location import LocationCreate, LocationUpdate
from sortr_api.utils.errors import (
    BOXES_REASON,
    CHILDREN_REASON,
    CircularReference,
    HasDependents,
    HierarchyError,
    InvalidParent,
    LocationNotFound,
    LocationValidationError,
)
from sortr_api.utils.hierarchy import HierarchyManager
from sortr_api.utils.path import breadcrumb
from memory_store import InMemoryLocationStore


@pytest.fixture
def store():
    return InMemoryLocationStore()


@pytest.fixture
def manager(store):
    return HierarchyManager(store)


def create(manager: HierarchyManager, name: str, parent_id=None, description=None):
    return manager.create_location(LocationCreate(name=name, parent_id=parent_id, description=description))


def test_create_root_and_child(manager: HierarchyManager, store: InMemoryLocationStore):
    house = create(manager, "House", description="Main house")
    garage = create(manager, "Garage", parent_id=house.id)

    assert house.parent_id is None
    assert house.description == "Main house"
    assert garage.parent_id == house.id
    assert breadcrumb(store, garage.id) == ["House", "Garage"]


def test_create_trims_name(manager: HierarchyManager):
    loc = create(manager, "  Basement  ")
    assert loc.name == "Basement"


def test_create_with_missing_parent(manager: HierarchyManager, store: InMemoryLocationStore):
    with pytest.raises(InvalidParent) as exc:
        create(manager, "Shelf", parent_id=99)
    assert exc.value.message == "Parent location not found"
    assert store.list() == []


def test_create_rejects_blank_and_long_names():
    with pytest.raises(ValidationError):
        LocationCreate(name="   ")
    with pytest.raises(ValidationError):
        LocationCreate(name="x" * 256)
    assert LocationCreate(name="x" * 255).name == "x" * 255


def test_manager_rejects_unvalidated_blank_name(manager: HierarchyManager, store: InMemoryLocationStore):
    command = LocationCreate.model_construct(name="   ", description=None, parent_id=None)
    with pytest.raises(LocationValidationError) as exc:
        manager.create_location(command)
    assert exc.value.message == "Location name is required"
    assert store.list() == []


def test_sibling_names_need_not_be_unique(manager: HierarchyManager):
    house = create(manager, "House")
    first = create(manager, "Shelf", parent_id=house.id)
    second = create(manager, "Shelf", parent_id=house.id)
    assert first.id != second.id


def test_update_name_and_description(manager: HierarchyManager):
    loc = create(manager, "Garage", description="old")
    updated = manager.update_location(loc.id, LocationUpdate(name="Workshop"))
    assert updated.name == "Workshop"
    assert updated.description == "old"

    updated = manager.update_location(loc.id, LocationUpdate(description=None))
    assert updated.description is None
    assert updated.name == "Workshop"


def test_update_unknown_location(manager: HierarchyManager):
    with pytest.raises(LocationNotFound):
        manager.update_location(7, LocationUpdate(name="Nope"))


def test_update_without_parent_keeps_parent(manager: HierarchyManager):
    house = create(manager, "House")
    garage = create(manager, "Garage", parent_id=house.id)
    updated = manager.update_location(garage.id, LocationUpdate(name="Big Garage"))
    assert updated.parent_id == house.id


def test_update_explicit_null_parent_moves_to_top(manager: HierarchyManager):
    house = create(manager, "House")
    garage = create(manager, "Garage", parent_id=house.id)
    updated = manager.update_location(garage.id, LocationUpdate(parent_id=None))
    assert updated.parent_id is None


def test_update_with_missing_parent(manager: HierarchyManager):
    house = create(manager, "House")
    with pytest.raises(InvalidParent):
        manager.update_location(house.id, LocationUpdate(parent_id=42))


def test_self_parent_is_rejected(manager: HierarchyManager, store: InMemoryLocationStore):
    house = create(manager, "House")
    with pytest.raises(CircularReference) as exc:
        manager.update_location(house.id, LocationUpdate(parent_id=house.id))
    assert exc.value.message == "Cannot create circular reference in location hierarchy"
    assert store.get(house.id).parent_id is None


def test_rejected_move_leaves_store_untouched(manager: HierarchyManager, store: InMemoryLocationStore):
    house = create(manager, "House")
    garage = create(manager, "Garage", parent_id=house.id)

    with pytest.raises(CircularReference):
        manager.update_location(house.id, LocationUpdate(name="Renamed", parent_id=garage.id))

    assert store.get(house.id).name == "House"
    assert store.get(house.id).parent_id is None


def test_reparent_into_other_branch(manager: HierarchyManager, store: InMemoryLocationStore):
    house = create(manager, "House")
    garage = create(manager, "Garage", parent_id=house.id)
    shelf = create(manager, "Shelf", parent_id=garage.id)
    storage = create(manager, "Storage Unit")

    manager.update_location(garage.id, LocationUpdate(parent_id=storage.id))
    assert breadcrumb(store, shelf.id) == ["Storage Unit", "Garage", "Shelf"]


def test_delete_location(manager: HierarchyManager, store: InMemoryLocationStore):
    loc = create(manager, "Closet")
    manager.delete_location(loc.id)
    assert store.get(loc.id) is None


def test_delete_unknown_location(manager: HierarchyManager):
    with pytest.raises(LocationNotFound):
        manager.delete_location(3)


def test_delete_blocked_by_children(manager: HierarchyManager):
    house = create(manager, "House")
    create(manager, "Garage", parent_id=house.id)

    with pytest.raises(HasDependents) as exc:
        manager.delete_location(house.id)
    assert exc.value.reason == CHILDREN_REASON
    assert exc.value.count == 1
    assert exc.value.message.startswith("Cannot delete location with 1 child location(s)")


def test_delete_blocked_by_boxes(manager: HierarchyManager, store: InMemoryLocationStore):
    house = create(manager, "House")
    store.add_box(house.id)
    store.add_box(house.id)

    with pytest.raises(HasDependents) as exc:
        manager.delete_location(house.id)
    assert exc.value.reason == BOXES_REASON
    assert exc.value.count == 2
    assert exc.value.message == "Cannot delete location with 2 box(es). Remove boxes first."
    assert store.get(house.id) is not None


def test_errors_share_a_base_class():
    for error in (LocationNotFound(), InvalidParent(), CircularReference(), HasDependents(BOXES_REASON, 1)):
        assert isinstance(error, HierarchyError)
    assert LocationNotFound().status_code == 404
    assert CircularReference().status_code == 400


def test_list_hierarchy_is_preorder_sorted_by_name(manager: HierarchyManager):
    house = create(manager, "House")
    kitchen = create(manager, "Kitchen", parent_id=house.id)
    garage = create(manager, "Garage", parent_id=house.id)
    create(manager, "Shelf 2", parent_id=garage.id)
    create(manager, "Shelf 1", parent_id=garage.id)
    create(manager, "Pantry", parent_id=kitchen.id)
    create(manager, "Attic")

    rows = [(node.location.name, node.depth) for node in manager.list_hierarchy()]
    assert rows == [
        ("Attic", 0),
        ("House", 0),
        ("Garage", 1),
        ("Shelf 1", 2),
        ("Shelf 2", 2),
        ("Kitchen", 1),
        ("Pantry", 2),
    ]


def test_names_sort_case_insensitively(manager: HierarchyManager, store: InMemoryLocationStore):
    house = create(manager, "house")
    create(manager, "Garage")
    create(manager, "attic")
    create(manager, "Basement", parent_id=house.id)
    create(manager, "annex", parent_id=house.id)

    assert [n.location.name for n in manager.list_hierarchy()] == ["attic", "Garage", "house", "annex", "Basement"]
    assert [loc.name for loc in manager.list_top_locations()] == ["attic", "Garage", "house"]
    assert [row.name for row in manager.list_locations()] == ["annex", "attic", "Basement", "Garage", "house"]
    assert [loc.name for loc in manager.list_child_locations(house.id)] == ["annex", "Basement"]


def test_list_hierarchy_is_idempotent(manager: HierarchyManager):
    house = create(manager, "House")
    create(manager, "Garage", parent_id=house.id)
    create(manager, "Attic")
    assert manager.list_hierarchy() == manager.list_hierarchy()


def test_list_hierarchy_skips_unreachable_cycle(manager: HierarchyManager, store: InMemoryLocationStore):
    create(manager, "House")
    a = create(manager, "A")
    b = create(manager, "B", parent_id=a.id)
    store.force_parent(a.id, b.id)

    assert [node.location.name for node in manager.list_hierarchy()] == ["House"]


def test_list_locations_includes_parent_and_children(manager: HierarchyManager):
    house = create(manager, "House")
    garage = create(manager, "Garage", parent_id=house.id)

    rows = {row.name: row for row in manager.list_locations()}
    assert [row.name for row in manager.list_locations()] == ["Garage", "House"]
    assert rows["Garage"].parent.id == house.id
    assert rows["House"].parent is None
    assert [c.id for c in rows["House"].children] == [garage.id]


def test_top_and_child_listings(manager: HierarchyManager):
    house = create(manager, "House")
    create(manager, "Kitchen", parent_id=house.id)
    create(manager, "Garage", parent_id=house.id)
    create(manager, "Attic")

    assert [loc.name for loc in manager.list_top_locations()] == ["Attic", "House"]
    assert [loc.name for loc in manager.list_child_locations(house.id)] == ["Garage", "Kitchen"]
    with pytest.raises(LocationNotFound):
        manager.list_child_locations(99)


def test_describe_location_counts(manager: HierarchyManager, store: InMemoryLocationStore):
    house = create(manager, "House")
    garage = create(manager, "Garage", parent_id=house.id)
    store.add_box(garage.id, items=3)
    store.add_box(garage.id)

    details = manager.describe_location(garage.id)
    assert details.parent.id == house.id
    assert [a.name for a in details.breadcrumb] == ["House", "Garage"]
    assert details.box_count == 2
    assert details.item_count == 3


def test_house_garage_shelf_walkthrough(manager: HierarchyManager, store: InMemoryLocationStore):
    house = create(manager, "House")
    garage = create(manager, "Garage", parent_id=house.id)
    assert breadcrumb(store, garage.id) == ["House", "Garage"]

    with pytest.raises(CircularReference):
        manager.update_location(house.id, LocationUpdate(parent_id=garage.id))

    shelf = create(manager, "Shelf", parent_id=garage.id)
    with pytest.raises(HasDependents) as exc:
        manager.delete_location(garage.id)
    assert exc.value.count == 1

    manager.delete_location(shelf.id)
    manager.delete_location(garage.id)
    names = [node.location.name for node in manager.list_hierarchy()]
    assert "Garage" not in names
    assert "Shelf" not in names

    store.add_box(house.id)
    with pytest.raises(HasDependents) as exc:
        manager.delete_location(house.id)
    assert exc.value.reason == BOXES_REASON


def _assert_forest(store: InMemoryLocationStore):
    n = len(store.locations)
    for rec in store.list():
        assert rec.parent_id != rec.id
        steps = 0
        current = rec
        while current.parent_id is not None:
            current = store.get(current.parent_id)
            steps += 1
            assert steps <= n


def test_random_moves_never_create_a_cycle(manager: HierarchyManager, store: InMemoryLocationStore):
    rng = random.Random(1234)
    ids = [create(manager, f"Loc {i}").id for i in range(15)]

    for _ in range(400):
        loc_id = rng.choice(ids)
        parent_id = rng.choice(ids + [None])
        try:
            manager.update_location(loc_id, LocationUpdate(parent_id=parent_id))
        except CircularReference:
            pass
        _assert_forest(store)
