from typing import Iterable, List, Optional, Union

from models import ALL_STATUSES, Station, StationStatus, digits_only, format_short_date

StatusFilter = Union[StationStatus, str, None]


def _matches_status(station: Station, status_filter: StatusFilter) -> bool:
    if status_filter is None or status_filter in (ALL_STATUSES, "all", ""):
        return True
    value = status_filter.value if isinstance(status_filter, StationStatus) else status_filter
    return station.status.value == value


def matches_query(station: Station, query: str) -> bool:
    """Case-insensitive match of a trimmed query against the searchable fields.

    Phones are compared on digits only, so "7071234" finds "+7 707 123 4567".
    """
    q = query.strip().lower()
    if not q:
        return True

    if q in station.location_name.lower():
        return True
    for identifier in (station.sid, station.did, station.sim):
        if identifier and q in identifier.lower():
            return True
    if q in format_short_date(station.installation_date).lower():
        return True

    q_digits = digits_only(q)
    for user in station.free_users:
        if q in user.full_name.lower():
            return True
        if q_digits and q_digits in digits_only(user.phone):
            return True
    return False


def filter_stations(stations: Iterable[Station], status_filter: StatusFilter = ALL_STATUSES,
                    search_query: Optional[str] = "") -> List[Station]:
    """Status filter first, then free-text search. Order is preserved."""
    return [
        s for s in stations
        if _matches_status(s, status_filter) and matches_query(s, search_query or "")
    ]
