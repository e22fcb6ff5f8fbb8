"""Shared fixtures for the clinic records tests."""

import pytest
from fastapi.testclient import TestClient

from clinic.config import Settings
from clinic.main import create_app
from clinic.services.records import RecordsService
from clinic.stores import InMemoryRecordStore, JsonFileStorage, LocalRecordStore, MemoryStorage


@pytest.fixture(params=["memory", "local", "local_file"])
def store(request, tmp_path):
    """Every record store backing that runs without external services."""
    if request.param == "memory":
        return InMemoryRecordStore()
    if request.param == "local":
        return LocalRecordStore(MemoryStorage())
    return LocalRecordStore(JsonFileStorage(tmp_path / "clinic_data.json"))


@pytest.fixture
def service(store):
    """Records service over each store backing."""
    return RecordsService(store)


@pytest.fixture
def api_client():
    """Test client for an application backed by an in-memory store."""
    settings = Settings(store="memory")
    app = create_app(settings, RecordsService(InMemoryRecordStore()))
    return TestClient(app)
