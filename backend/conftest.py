import os
import tempfile

# Keep the module level STORE away from the working directory
os.environ.setdefault("STATION_STORAGE_PATH", os.path.join(tempfile.mkdtemp(), "station_storage.json"))

import pytest
from fastapi.testclient import TestClient

from local_storage import LocalStorage
from models import AppState, FreeUser, StationDraft, StationStatus
from shared_store import CentralStore


@pytest.fixture()
def make_draft():
    def _make(**overrides) -> StationDraft:
        data = {
            "location_name": "Coffee Point",
            "address": "ул. Абая, 10, Алматы",
            "installer": "Иван",
            "installation_date": "2024-08-20",
            "status": StationStatus.PLANNED,
            "notes": "",
        }
        data.update(overrides)
        return StationDraft(**data)
    return _make


@pytest.fixture()
def empty_state():
    return AppState(stations=[], inventory_count=3, current_employee="Тестер")


@pytest.fixture()
def free_user():
    def _make(id, full_name, position=None, phone=None) -> FreeUser:
        return FreeUser(id=id, full_name=full_name, position=position, phone=phone)
    return _make


@pytest.fixture()
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture()
def store(storage):
    return CentralStore(storage, initial_inventory=2, current_employee="Тестер")


@pytest.fixture()
def client(store):
    from rest_api import app, get_store

    async def _store():
        store.sync()
        return store

    app.dependency_overrides[get_store] = _store
    yield TestClient(app)
    app.dependency_overrides.clear()
