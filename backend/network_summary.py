"""
Network coverage and dashboard figures.
"""

from typing import Any, Dict, List, Sequence

from models import Station, StationStatus

OTHER_CITY = "Другие"


def extract_city(address: str) -> str:
    # City is the last comma separated part of the address
    return address.split(",")[-1].strip() or OTHER_CITY


def summarize_by_city(stations: Sequence[Station]) -> List[Dict[str, Any]]:
    """Installed stations grouped by city, biggest cities first."""
    cities: Dict[str, Dict[str, Any]] = {}
    for station in stations:
        if station.status is not StationStatus.INSTALLED:
            continue
        city = extract_city(station.address)
        entry = cities.setdefault(city, {"city": city, "count": 0, "locations": []})
        entry["count"] += 1
        entry["locations"].append(station.location_name)
    return sorted(cities.values(), key=lambda c: c["count"], reverse=True)


def dashboard_stats(stations: Sequence[Station], inventory_count: int) -> Dict[str, int]:
    return {
        "total": len(stations),
        "installed": sum(1 for s in stations if s.status is StationStatus.INSTALLED),
        "maintenance": sum(1 for s in stations if s.status is StationStatus.MAINTENANCE),
        "in_stock": inventory_count,
    }
