from fastapi import Depends, FastAPI, Header, HTTPException, Response
from pydantic import BaseModel
from typing import List, Optional
from urllib.parse import unquote
import logging
import uvicorn

from config import API_HOST, API_PORT, LOG_LEVEL
from csv_export import export_filename, export_stations_csv
from lifecycle import (
    EventType,
    InvalidInventory,
    InvalidStation,
    InventoryExhausted,
    LifecycleError,
    NotFound,
    create_station,
    restock_inventory,
    set_station_status,
    soft_delete_station,
    update_station,
)
from models import ALL_STATUSES, CamelModel, StationDraft, StationStatus
from network_summary import dashboard_stats, summarize_by_city
from notes_service import generate_installation_notes
from shared_store import STORE, CentralStore
from station_query import filter_stations

logger = logging.getLogger(__name__)

app = FastAPI(title="Station Tracker API")

# Pydantic models for request bodies
class StatusChangeRequest(BaseModel):
    status: StationStatus

class RestockRequest(BaseModel):
    count: int

class ExportRequest(BaseModel):
    ids: Optional[List[str]] = None

class GenerateNotesRequest(CamelModel):
    location_name: str
    address: str


async def get_store() -> CentralStore:
    # Pick up edits other processes made to the storage file
    STORE.sync()
    return STORE


def get_employee(x_employee: Optional[str] = Header(default=None)) -> Optional[str]:
    return unquote(x_employee) if x_employee else None


def _raise_http(error: LifecycleError):
    if isinstance(error, NotFound):
        raise HTTPException(status_code=404, detail=str(error))
    if isinstance(error, InventoryExhausted):
        raise HTTPException(status_code=409, detail=str(error))
    if isinstance(error, (InvalidStation, InvalidInventory)):
        raise HTTPException(status_code=422, detail=str(error))
    raise HTTPException(status_code=400, detail=str(error))


def _warnings(events) -> List[str]:
    return [e.message for e in events if e.type == EventType.REACTIVATION_BLOCKED]


@app.get("/")
async def root():
    return {
        "message": "Station Tracker API",
        "available_commands": [
            "GET /stations?status=&q= - List stations with status filter and search",
            "POST /stations - Create a station (takes one unit from the warehouse)",
            "GET /stations/{station_id} - Get one station",
            "PUT /stations/{station_id} - Save the edit form",
            "POST /stations/{station_id}/status - Change station status",
            "DELETE /stations/{station_id} - Mark station as removed",
            "GET /stations/{station_id}/history - Station change log, newest first",
            "GET /inventory - Warehouse stock",
            "PUT /inventory - Set warehouse stock",
            "POST /export - Download selected stations as CSV",
            "POST /notes/generate - Suggest installation notes",
            "GET /summary/cities - Installed stations by city",
            "GET /summary/dashboard - Dashboard counters",
            "GET /notifications - Notification feed",
            "POST /notifications/read_all - Mark all notifications as read",
        ]
    }

@app.get("/stations")
async def list_stations(status: str = ALL_STATUSES, q: str = "", store: CentralStore = Depends(get_store)):
    stations = filter_stations(store.state.stations, status, q)
    return {
        "stations": [s.as_json() for s in stations],
        "total": len(stations),
        "inventory_count": store.state.inventory_count,
    }

@app.post("/stations", status_code=201)
async def add_station(draft: StationDraft, store: CentralStore = Depends(get_store),
                      employee: Optional[str] = Depends(get_employee)):
    try:
        result = create_station(store.state, draft, employee)
    except LifecycleError as e:
        _raise_http(e)
    events = store.commit(result, employee)
    station = result[0].find(events[0].station_id)
    return {
        "message": events[0].message,
        "station": station.as_json(),
        "inventory_count": result[0].inventory_count,
    }

@app.get("/stations/{station_id}")
async def get_station(station_id: str, store: CentralStore = Depends(get_store)):
    station = store.state.find(station_id)
    if station is None:
        _raise_http(NotFound(station_id))
    return station.as_json()

@app.put("/stations/{station_id}")
async def save_station(station_id: str, draft: StationDraft, store: CentralStore = Depends(get_store),
                       employee: Optional[str] = Depends(get_employee)):
    try:
        result = update_station(store.state, station_id, draft, employee)
    except LifecycleError as e:
        _raise_http(e)
    events = store.commit(result, employee)
    return {
        "station": result[0].find(station_id).as_json(),
        "changes": [e.message for e in events if e.type != EventType.REACTIVATION_BLOCKED],
        "warnings": _warnings(events),
        "inventory_count": result[0].inventory_count,
    }

@app.post("/stations/{station_id}/status")
async def change_status(station_id: str, request: StatusChangeRequest, store: CentralStore = Depends(get_store),
                        employee: Optional[str] = Depends(get_employee)):
    try:
        result = set_station_status(store.state, station_id, request.status, employee)
    except LifecycleError as e:
        _raise_http(e)
    events = store.commit(result, employee)
    warnings = _warnings(events)
    if warnings:
        raise HTTPException(status_code=409, detail=warnings[0])
    return {
        "station": result[0].find(station_id).as_json(),
        "inventory_count": result[0].inventory_count,
    }

@app.delete("/stations/{station_id}")
async def remove_station(station_id: str, store: CentralStore = Depends(get_store),
                         employee: Optional[str] = Depends(get_employee)):
    try:
        result = soft_delete_station(store.state, station_id, employee)
    except LifecycleError as e:
        _raise_http(e)
    store.commit(result, employee)
    return {
        "message": f"Station {station_id} marked as removed",
        "station": result[0].find(station_id).as_json(),
        "inventory_count": result[0].inventory_count,
    }

@app.get("/stations/{station_id}/history")
async def get_history(station_id: str, store: CentralStore = Depends(get_store)):
    station = store.state.find(station_id)
    if station is None:
        _raise_http(NotFound(station_id))
    return {"station_id": station_id, "history": [h.as_json() for h in station.history]}

@app.get("/inventory")
async def get_inventory(store: CentralStore = Depends(get_store)):
    state = store.state
    return {"inventory_count": state.inventory_count, "active_stations": state.active_count()}

@app.put("/inventory")
async def set_inventory(request: RestockRequest, store: CentralStore = Depends(get_store),
                        employee: Optional[str] = Depends(get_employee)):
    try:
        result = restock_inventory(store.state, request.count, employee)
    except LifecycleError as e:
        _raise_http(e)
    store.commit(result, employee)
    return {"inventory_count": result[0].inventory_count}

@app.post("/export")
async def export_csv(request: ExportRequest, store: CentralStore = Depends(get_store)):
    stations = store.state.stations
    if request.ids is not None:
        selected = set(request.ids)
        stations = [s for s in stations if s.id in selected]

    ok, payload = export_stations_csv(stations)
    if not ok:
        raise HTTPException(status_code=400, detail=payload)
    return Response(
        content=payload.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )

@app.post("/notes/generate")
async def generate_notes(request: GenerateNotesRequest):
    notes = await generate_installation_notes(request.location_name, request.address)
    return {"notes": notes}

@app.get("/summary/cities")
async def city_summary(store: CentralStore = Depends(get_store)):
    return {"cities": summarize_by_city(store.state.stations)}

@app.get("/summary/dashboard")
async def dashboard(store: CentralStore = Depends(get_store)):
    state = store.state
    return dashboard_stats(state.stations, state.inventory_count)

@app.get("/notifications")
async def list_notifications(store: CentralStore = Depends(get_store)):
    notifications = store.notifications
    return {
        "notifications": [n.as_json() for n in notifications],
        "unread": sum(1 for n in notifications if not n.read),
    }

@app.post("/notifications/read_all")
async def read_all_notifications(store: CentralStore = Depends(get_store)):
    store.mark_notifications_read()
    return {"message": "All notifications marked as read"}

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL)
    uvicorn.run(app, host=API_HOST, port=API_PORT)
