import os
import sys
import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

os.environ["DATABASE_URL"] = "sqlite://"

from sortr_api.main import app
from sortr_api.db import SessionLocal, engine
from sortr_api.db_init import init_db
from sortr_api.models import Box, Item, Location

init_db(engine)


def wipe_tables():
    db = SessionLocal()
    try:
        db.query(Item).delete()
        db.query(Box).delete()
        db.query(Location).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clean_db():
    wipe_tables()
    yield
    wipe_tables()


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def add_box(db, location_id: int, name: str = "Box", items: int = 0) -> Box:
    box = Box(name=name, location_id=location_id)
    db.add(box)
    db.flush()
    for i in range(items):
        db.add(Item(name=f"{name} item {i + 1}", box_id=box.id))
    db.commit()
    return box
