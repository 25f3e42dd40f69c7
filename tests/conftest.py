import mongomock
import pytest
from fastapi.testclient import TestClient

from database import ensure_indexes, get_db
from main import app


@pytest.fixture
def db():
    database = mongomock.MongoClient()["farmDatabase"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    # no context manager: the lifespan would open a real MongoDB connection
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()
