from models import Station, StationStatus
from network_summary import OTHER_CITY, dashboard_stats, extract_city, summarize_by_city


def station(id, address, status=StationStatus.INSTALLED):
    return Station(id=id, location_name=f"Loc {id}", address=address, status=status)


def test_extract_city():
    assert extract_city("пр. Аль-Фараби, 77/7, Алматы") == "Алматы"
    assert extract_city("Астана") == "Астана"
    assert extract_city("ул. Абая, ") == OTHER_CITY


def test_summary_counts_installed_only_biggest_first():
    stations = [
        station("1", "a, Астана"),
        station("2", "b, Алматы"),
        station("3", "c, Алматы"),
        station("4", "d, Шымкент", StationStatus.PLANNED),
    ]
    summary = summarize_by_city(stations)
    assert [(c["city"], c["count"]) for c in summary] == [("Алматы", 2), ("Астана", 1)]
    assert summary[0]["locations"] == ["Loc 2", "Loc 3"]


def test_dashboard_stats():
    stations = [
        station("1", "x"),
        station("2", "x", StationStatus.MAINTENANCE),
        station("3", "x", StationStatus.REMOVED),
    ]
    assert dashboard_stats(stations, 7) == {"total": 3, "installed": 1, "maintenance": 1, "in_stock": 7}
