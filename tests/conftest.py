import pytest
from fastapi.testclient import TestClient

from app.database import EmbeddedStorage
from app.services.vehicle_repository import VehicleRepository
from main import create_app


@pytest.fixture
def storage(tmp_path):
    """A fresh SQLite database file per test."""
    storage = EmbeddedStorage(tmp_path / "vehicles_test.db")
    storage.init_schema()
    yield storage
    storage.dispose()


@pytest.fixture
def db(storage):
    session = storage.session()
    yield session
    session.close()


@pytest.fixture
def repository(db):
    return VehicleRepository(db)


@pytest.fixture
def client(storage):
    with TestClient(create_app(storage)) as client:
        yield client
