import pytest

from models import ALL_STATUSES, Station, StationStatus
from station_query import filter_stations


@pytest.fixture()
def stations(free_user):
    return [
        Station(id="1", location_name="Sky Bar", address="Алматы", status=StationStatus.INSTALLED,
                installation_date="2024-08-20", sid="ALM-SKY-01",
                free_users=[free_user("fu1", "Айбек Оспанов", "Менеджер", "+7 (707) 123-45-67")]),
        Station(id="2", location_name="Mega Mall", address="Астана", status=StationStatus.PLANNED,
                installation_date="2025-01-15", did="DID-XY"),
        Station(id="3", location_name="Sky Gym", address="Алматы", status=StationStatus.REMOVED,
                installation_date="2023-03-01", sim="8997012"),
    ]


def ids(result):
    return [s.id for s in result]


def test_no_filters_returns_everything_in_order(stations):
    assert ids(filter_stations(stations)) == ["1", "2", "3"]
    assert ids(filter_stations(stations, ALL_STATUSES, "   ")) == ["1", "2", "3"]


def test_status_filter(stations):
    assert ids(filter_stations(stations, StationStatus.PLANNED)) == ["2"]
    assert ids(filter_stations(stations, "Удалено")) == ["3"]
    assert ids(filter_stations(stations, "all")) == ["1", "2", "3"]


def test_status_filter_applies_before_search(stations):
    assert ids(filter_stations(stations, StationStatus.INSTALLED, "sky")) == ["1"]


def test_name_search_is_case_insensitive_and_trimmed(stations):
    assert ids(filter_stations(stations, ALL_STATUSES, "  SKY ")) == ["1", "3"]


def test_identifier_search(stations):
    assert ids(filter_stations(stations, ALL_STATUSES, "did-xy")) == ["2"]
    assert ids(filter_stations(stations, ALL_STATUSES, "alm-sky")) == ["1"]
    assert ids(filter_stations(stations, ALL_STATUSES, "8997")) == ["3"]


def test_search_by_formatted_date(stations):
    assert ids(filter_stations(stations, ALL_STATUSES, "15.01.2025")) == ["2"]


def test_search_by_free_user_name(stations):
    assert ids(filter_stations(stations, ALL_STATUSES, "оспанов")) == ["1"]


def test_phone_digits_match_regardless_of_formatting(stations):
    assert ids(filter_stations(stations, ALL_STATUSES, "7071234")) == ["1"]
    assert ids(filter_stations(stations, ALL_STATUSES, "123-45")) == ["1"]


def test_query_without_digits_does_not_match_phone(stations):
    assert filter_stations(stations, ALL_STATUSES, "+()") == []
