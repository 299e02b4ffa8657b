"""
Station lifecycle and inventory engine.

Every operation takes an AppState snapshot and a command and returns the new
snapshot together with the events it produced. Nothing here touches storage;
CentralStore commits results and consumers (persistence, notifications) react
to the events.

Inventory rules: moving a station into "Удалено" returns a unit to the
warehouse, moving it out of "Удалено" (or creating a station) takes one and
is refused when the warehouse is empty.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel

from history import diff_stations, generate_history_entry
from models import AppState, Station, StationDraft, StationStatus, new_id

logger = logging.getLogger(__name__)

CREATED_CHANGE = "Создание объекта"


class LifecycleError(Exception):
    """Base class for refused lifecycle operations."""


class InventoryExhausted(LifecycleError):
    def __init__(self, message: str = "На складе нет станций. Пополните склад перед установкой."):
        super().__init__(message)


class NotFound(LifecycleError):
    def __init__(self, station_id: str):
        super().__init__(f"Объект {station_id} не найден")
        self.station_id = station_id


class InvalidStation(LifecycleError):
    pass


class InvalidInventory(LifecycleError):
    pass


class EventType(str, Enum):
    STATION_CREATED = "station_created"
    STATION_UPDATED = "station_updated"
    STATUS_CHANGED = "status_changed"
    INVENTORY_CHANGED = "inventory_changed"
    REACTIVATION_BLOCKED = "reactivation_blocked"


class LifecycleEvent(BaseModel):
    type: EventType
    message: str
    station_id: Optional[str] = None
    inventory_count: Optional[int] = None


LifecycleResult = Tuple[AppState, List[LifecycleEvent]]


def _validate_draft(draft: StationDraft):
    if not draft.location_name.strip():
        raise InvalidStation("Название локации обязательно")
    if not draft.address.strip():
        raise InvalidStation("Адрес обязателен")


def _inventory_delta(old_status: StationStatus, new_status: StationStatus) -> int:
    if old_status is not StationStatus.REMOVED and new_status is StationStatus.REMOVED:
        return 1
    if old_status is StationStatus.REMOVED and new_status is not StationStatus.REMOVED:
        return -1
    return 0


def _blocked_event(station: Station, inventory_count: int) -> LifecycleEvent:
    return LifecycleEvent(
        type=EventType.REACTIVATION_BLOCKED,
        message=f"Недостаточно станций на складе, чтобы вернуть объект «{station.location_name}» в работу",
        station_id=station.id,
        inventory_count=inventory_count,
    )


def _commit(state: AppState, old: Station, candidate: Station, employee: str) -> LifecycleResult:
    """Replace ``old`` with ``candidate``, recording the diff and applying inventory changes.

    Fields outside the diff (coordinates, photos) are still saved; they just
    leave no history entry.
    """
    if candidate.model_dump() == old.model_dump():
        return state, []

    changes = diff_stations(old, candidate)
    entries = [generate_history_entry(employee, change) for change in changes]
    updated = candidate.model_copy(update={"history": [*entries, *old.history]})

    delta = _inventory_delta(old.status, updated.status)
    inventory = state.inventory_count + delta
    new_state = state.with_replaced(updated).model_copy(update={"inventory_count": inventory})

    events = [
        LifecycleEvent(
            type=EventType.STATION_UPDATED,
            message=f"Обновлены данные объекта: {updated.location_name}",
            station_id=updated.id,
        )
    ]
    if old.status is not updated.status:
        events.append(LifecycleEvent(
            type=EventType.STATUS_CHANGED,
            message=f"Статус объекта «{updated.location_name}»: {updated.status.value}",
            station_id=updated.id,
        ))
    if delta:
        events.append(LifecycleEvent(
            type=EventType.INVENTORY_CHANGED,
            message=f"Остаток на складе: {inventory}",
            station_id=updated.id,
            inventory_count=inventory,
        ))
    return new_state, events


def create_station(state: AppState, draft: StationDraft, employee: Optional[str] = None) -> LifecycleResult:
    """Create a station from a draft, taking one unit from the warehouse."""
    _validate_draft(draft)
    if draft.status is StationStatus.REMOVED:
        raise InvalidStation("Новый объект не может быть создан в статусе «Удалено»")
    if state.inventory_count <= 0:
        raise InventoryExhausted()

    actor = employee or state.current_employee
    station = Station(
        id=new_id("st"),
        history=[generate_history_entry(actor, CREATED_CHANGE)],
        **draft.model_dump(),
    )
    inventory = state.inventory_count - 1
    new_state = state.with_inserted(station).model_copy(update={"inventory_count": inventory})
    logger.info(f"Station {station.id} created by {actor}, stock left: {inventory}")

    return new_state, [
        LifecycleEvent(
            type=EventType.STATION_CREATED,
            message=f"Добавлен новый объект: {station.location_name}",
            station_id=station.id,
        ),
        LifecycleEvent(
            type=EventType.INVENTORY_CHANGED,
            message=f"Остаток на складе: {inventory}",
            station_id=station.id,
            inventory_count=inventory,
        ),
    ]


def update_station(state: AppState, station_id: str, draft: StationDraft,
                   employee: Optional[str] = None) -> LifecycleResult:
    """Apply an edit-form submission.

    Reactivating a removed station with an empty warehouse does not fail:
    the requested status is overridden back to "Удалено", the rest of the
    edit is kept and a warning event is returned.
    """
    old = state.find(station_id)
    if old is None:
        raise NotFound(station_id)
    _validate_draft(draft)

    status = draft.status
    events: List[LifecycleEvent] = []
    if _inventory_delta(old.status, status) < 0 and state.inventory_count <= 0:
        status = StationStatus.REMOVED
        events.append(_blocked_event(old, state.inventory_count))
        logger.warning(f"Reactivation of {station_id} blocked: warehouse is empty, status kept as removed")

    candidate = Station(
        id=old.id,
        history=old.history,
        **{**draft.model_dump(), "status": status},
    )
    new_state, commit_events = _commit(state, old, candidate, employee or state.current_employee)
    return new_state, events + commit_events


def set_station_status(state: AppState, station_id: str, status: StationStatus,
                       employee: Optional[str] = None) -> LifecycleResult:
    """Change only the status. A blocked reactivation leaves the state untouched."""
    old = state.find(station_id)
    if old is None:
        raise NotFound(station_id)
    if old.status is status:
        return state, []

    if _inventory_delta(old.status, status) < 0 and state.inventory_count <= 0:
        logger.warning(f"Status change of {station_id} to {status.value} refused: warehouse is empty")
        return state, [_blocked_event(old, state.inventory_count)]

    candidate = old.model_copy(update={"status": status})
    return _commit(state, old, candidate, employee or state.current_employee)


def soft_delete_station(state: AppState, station_id: str, employee: Optional[str] = None) -> LifecycleResult:
    """Stations are never erased; removal is a status change."""
    return set_station_status(state, station_id, StationStatus.REMOVED, employee)


def restock_inventory(state: AppState, count: int, employee: Optional[str] = None) -> LifecycleResult:
    """Set the warehouse count directly (administrator stock adjustment)."""
    if count < 0:
        raise InvalidInventory("Количество на складе не может быть отрицательным")
    if count == state.inventory_count:
        return state, []

    actor = employee or state.current_employee
    logger.info(f"Inventory adjusted by {actor}: {state.inventory_count} -> {count}")
    return state.model_copy(update={"inventory_count": count}), [
        LifecycleEvent(
            type=EventType.INVENTORY_CHANGED,
            message=f"Склад пополнен: {state.inventory_count} → {count}",
            inventory_count=count,
        )
    ]
