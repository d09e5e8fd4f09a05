from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Protocol

from sqlalchemy import func, text
from sqlalchemy.orm import Session

from ..models.box import Box
from ..models.item import Item
from ..models.location import Location
from .errors import LocationNotFound

# key for pg_advisory_xact_lock; every hierarchy mutation serializes on it
HIERARCHY_LOCK_KEY = 0x534F525452

_local_hierarchy_lock = threading.Lock()

LOCATION_FIELDS = ("name", "parent_id", "description")


@dataclass(frozen=True)
class LocationRecord:
    id: int
    name: str
    parent_id: Optional[int] = None
    description: Optional[str] = None


class LocationStore(Protocol):
    """
    Keyed storage for location records. The only place state is written.
    `transaction()` must be held around validate-then-write sequences.
    """

    def get(self, location_id: int) -> Optional[LocationRecord]: ...

    def list(self) -> list[LocationRecord]: ...

    def create(self, fields: dict) -> LocationRecord: ...

    def update(self, location_id: int, fields: dict) -> LocationRecord: ...

    def delete(self, location_id: int) -> None: ...

    def count_children(self, parent_id: int) -> int: ...

    def count_boxes(self, location_id: int) -> int: ...

    def count_items(self, location_id: int) -> int: ...

    def transaction(self): ...


def _to_record(loc: Location) -> LocationRecord:
    return LocationRecord(id=loc.id, name=loc.name, parent_id=loc.parent_id, description=loc.description)


class SqlLocationStore:
    """
    LocationStore over a SQLAlchemy session. Writes only flush; the
    surrounding `transaction()` commits or rolls back.
    """

    def __init__(self, session: Session):
        self.session = session

    def get(self, location_id: int) -> Optional[LocationRecord]:
        loc = self.session.get(Location, location_id)
        return _to_record(loc) if loc else None

    def list(self) -> list[LocationRecord]:
        return [_to_record(loc) for loc in self.session.query(Location).all()]

    def create(self, fields: dict) -> LocationRecord:
        loc = Location(**{k: v for k, v in fields.items() if k in LOCATION_FIELDS})
        self.session.add(loc)
        self.session.flush()
        return _to_record(loc)

    def update(self, location_id: int, fields: dict) -> LocationRecord:
        loc = self.session.get(Location, location_id)
        if not loc:
            raise LocationNotFound()
        for key, value in fields.items():
            if key in LOCATION_FIELDS:
                setattr(loc, key, value)
        self.session.flush()
        return _to_record(loc)

    def delete(self, location_id: int) -> None:
        loc = self.session.get(Location, location_id)
        if not loc:
            raise LocationNotFound()
        self.session.delete(loc)
        self.session.flush()

    def count_children(self, parent_id: int) -> int:
        return int(
            self.session.query(func.count(Location.id)).filter(Location.parent_id == parent_id).scalar() or 0
        )

    def count_boxes(self, location_id: int) -> int:
        return int(
            self.session.query(func.count(Box.id)).filter(Box.location_id == location_id).scalar() or 0
        )

    def count_items(self, location_id: int) -> int:
        return int(
            self.session.query(func.count(Item.id))
            .join(Box, Item.box_id == Box.id)
            .filter(Box.location_id == location_id)
            .scalar()
            or 0
        )

    @contextmanager
    def transaction(self) -> Iterator["SqlLocationStore"]:
        """
        Serialize a validate-then-write sequence against other hierarchy
        mutations and commit it atomically.

        PostgreSQL gets a transaction-scoped advisory lock, released by the
        commit/rollback. Other backends fall back to a process-wide lock.
        """
        dialect = self.session.get_bind().dialect.name
        local_lock = None
        if dialect != "postgresql":
            local_lock = _local_hierarchy_lock
            local_lock.acquire()
        try:
            if dialect == "postgresql":
                self.session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": HIERARCHY_LOCK_KEY})
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        finally:
            if local_lock is not None:
                local_lock.release()
