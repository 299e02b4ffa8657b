from datetime import date

from csv_export import BOM, HEADER, NOTHING_SELECTED, export_filename, export_stations_csv
from models import Coordinates, Station, StationStatus


def make_station(**overrides):
    data = {
        "id": "st-1",
        "location_name": "Sky Bar",
        "address": "Алматы",
        "installer": "Иван",
        "installation_date": "2024-08-20",
        "status": StationStatus.INSTALLED,
    }
    data.update(overrides)
    return Station(**data)


def test_empty_selection_is_reported():
    ok, payload = export_stations_csv([])
    assert ok is False
    assert payload == NOTHING_SELECTED


def test_output_starts_with_bom_and_header():
    ok, payload = export_stations_csv([make_station()])
    assert ok is True
    assert payload.startswith(BOM)
    lines = payload[len(BOM):].split("\n")
    assert lines[0] == ",".join(HEADER)
    assert lines[1] == "st-1,Sky Bar,Алматы,Иван,20.08.2024,Установлено,,,,,,,"
    assert not payload.endswith("\n")


def test_quotes_and_commas_are_escaped():
    _, payload = export_stations_csv([make_station(notes='a,"b"')])
    assert '"a,""b"""' in payload


def test_newlines_are_quoted():
    _, payload = export_stations_csv([make_station(notes="line1\nline2")])
    assert '"line1\nline2"' in payload


def test_coordinates_and_free_users(free_user):
    station = make_station(
        coordinates=Coordinates(lat=43.2389, lng=76.9455),
        free_users=[
            free_user("a", "Айбек", "Менеджер", "+7 707"),
            free_user("b", "Вера"),
        ],
    )
    _, payload = export_stations_csv([station])
    row = payload.split("\n")[1]
    assert ",43.2389,76.9455," in row
    assert row.endswith("ФИО: Айбек; Должность: Менеджер; Телефон: +7 707 | ФИО: Вера; Должность: ; Телефон: ")


def test_rows_keep_selection_order():
    stations = [make_station(id="b"), make_station(id="a")]
    _, payload = export_stations_csv(stations)
    assert [line.split(",")[0] for line in payload.split("\n")[1:]] == ["b", "a"]


def test_export_filename():
    assert export_filename(date(2024, 1, 2)) == "stations_export_2024-01-02.csv"
