"""
Station inventory data model.

JSON field names are camelCase so that blobs written by the browser build
of the tracker load unchanged; Python attributes are snake_case.
"""

import re
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StationStatus(str, Enum):
    PLANNED = "Запланировано"
    INSTALLED = "Установлено"
    MAINTENANCE = "Обслуживание"
    REMOVED = "Удалено"


# Wildcard value of the status filter
ALL_STATUSES = "Все"


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def digits_only(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def format_short_date(value: Optional[str]) -> str:
    """Render an ISO 8601 date as a ru-RU short date (DD.MM.YYYY).

    Values that do not parse are returned verbatim.
    """
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%d.%m.%Y")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def as_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Coordinates(CamelModel):
    lat: float
    lng: float


class FreeUser(CamelModel):
    """A contact entitled to free use of a station."""
    id: str = Field(default_factory=lambda: new_id("fu"))
    full_name: str
    position: Optional[str] = None
    phone: Optional[str] = None

    @property
    def tel_link(self) -> Optional[str]:
        return f"tel:{self.phone}" if self.phone else None

    @property
    def whatsapp_link(self) -> Optional[str]:
        digits = digits_only(self.phone)
        return f"https://wa.me/{digits}" if digits else None


class HistoryEntry(CamelModel):
    id: str
    date: str
    employee: str
    change: str


class StationDraft(CamelModel):
    """Editable part of a station, as submitted by the edit form."""
    location_name: str
    address: str
    installer: str = ""
    installation_date: str = ""
    status: StationStatus = StationStatus.PLANNED
    notes: str = ""
    coordinates: Optional[Coordinates] = None
    sid: Optional[str] = None
    did: Optional[str] = None
    sim: Optional[str] = None
    free_users: List[FreeUser] = Field(default_factory=list)
    photos: List[str] = Field(default_factory=list)
    assigned_user_id: Optional[str] = None


class Station(StationDraft):
    id: str
    # Newest first
    history: List[HistoryEntry] = Field(default_factory=list)


class AppNotification(CamelModel):
    id: str
    message: str
    timestamp: str
    author: str
    read: bool = False
    type: str = "info"
    target_user_id: Optional[str] = None


class AppState(CamelModel):
    """Snapshot of everything the lifecycle engine operates on.

    The ordered ``stations`` list is the station repository: lookups and
    replacements go through the helpers below and always produce a new
    snapshot.
    """
    stations: List[Station] = Field(default_factory=list)
    inventory_count: int = Field(default=0, ge=0)
    current_employee: str = "Система"

    def find(self, station_id: str) -> Optional[Station]:
        for station in self.stations:
            if station.id == station_id:
                return station
        return None

    def with_inserted(self, station: Station) -> "AppState":
        return self.model_copy(update={"stations": [station, *self.stations]})

    def with_replaced(self, station: Station) -> "AppState":
        stations = [station if s.id == station.id else s for s in self.stations]
        return self.model_copy(update={"stations": stations})

    def active_count(self) -> int:
        return sum(1 for s in self.stations if s.status is not StationStatus.REMOVED)
