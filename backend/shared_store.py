# shared_store.py
import logging
from typing import List, Optional, Sequence

from config import (
    DEFAULT_EMPLOYEE,
    INITIAL_INVENTORY,
    INVENTORY_KEY,
    NOTIFICATIONS_KEY,
    SEED_DEMO_STATION,
    STATIONS_KEY,
    STORAGE_PATH,
)
from lifecycle import LifecycleEvent, LifecycleResult
from local_storage import LocalStorage, PersistentValue
from models import AppNotification, AppState, Coordinates, FreeUser, HistoryEntry, Station, StationStatus
from notifications import mark_all_read, notifications_for

logger = logging.getLogger(__name__)

DEMO_STATIONS: List[Station] = [
    Station(
        id="1",
        location_name="Sky Bar Almaty",
        address="пр. Аль-Фараби, 77/7, Алматы",
        installer="Главный Администратор",
        installation_date="2024-08-20",
        status=StationStatus.INSTALLED,
        notes="Премиальный объект. Требуется проверка кабелей раз в две недели.",
        history=[HistoryEntry(id="h1", date="2024-08-20T10:00:00Z", employee="Система",
                              change="Объект интегрирован в сеть")],
        coordinates=Coordinates(lat=43.2389, lng=76.9455),
        sid="ALM-SKY-01",
        free_users=[FreeUser(id="fu1", full_name="Айбек Оспанов", position="Менеджер", phone="+7 707 123 4567")],
    )
]


class CentralStore:
    """Single owner of the application state.

    Engine results are committed here; persistence is a consumer of the
    committed snapshot, notifications a consumer of the events.
    """

    def __init__(self, storage: LocalStorage, initial_inventory: int = INITIAL_INVENTORY,
                 seed_stations: Optional[Sequence[Station]] = None,
                 current_employee: str = DEFAULT_EMPLOYEE):
        self.storage = storage
        self.current_employee = current_employee
        self._stations = PersistentValue(storage, STATIONS_KEY, list(seed_stations or []), List[Station])
        self._inventory = PersistentValue(storage, INVENTORY_KEY, initial_inventory, int)
        self._notifications = PersistentValue(storage, NOTIFICATIONS_KEY, [], List[AppNotification])

    @property
    def state(self) -> AppState:
        return AppState(
            stations=self._stations.value,
            inventory_count=max(self._inventory.value, 0),
            current_employee=self.current_employee,
        )

    @property
    def notifications(self) -> List[AppNotification]:
        return self._notifications.value

    def commit(self, result: LifecycleResult, author: Optional[str] = None) -> List[LifecycleEvent]:
        new_state, events = result
        current = self.state
        if new_state.stations != current.stations:
            self._stations.set(new_state.stations)
        if new_state.inventory_count != current.inventory_count:
            self._inventory.set(new_state.inventory_count)

        fresh = notifications_for(events, author or self.current_employee)
        if fresh:
            self._notifications.set([*fresh, *self._notifications.value])
        return events

    def mark_notifications_read(self):
        self._notifications.set(mark_all_read(self._notifications.value))

    def sync(self):
        """Re-hydrate from changes other processes made to the storage file."""
        return self.storage.sync()


def build_store(path: str = STORAGE_PATH) -> CentralStore:
    seed = DEMO_STATIONS if SEED_DEMO_STATION else []
    logger.info(f"Opening station storage at {path}")
    return CentralStore(LocalStorage(path), seed_stations=seed)


# Global store instance
STORE = build_store()
