from datetime import datetime, timezone

from history import EMPTY_MARKER, diff_stations, generate_history_entry
from models import Station, StationStatus


def make_station(**overrides):
    data = {
        "id": "st-1",
        "location_name": "Sky Bar",
        "address": "пр. Аль-Фараби, 77/7, Алматы",
        "installer": "Иван",
        "installation_date": "2024-08-20",
        "status": StationStatus.INSTALLED,
        "notes": "",
    }
    data.update(overrides)
    return Station(**data)


def test_identical_stations_have_no_diff(free_user):
    users = [free_user("fu1", "Айбек", "Менеджер", "+7 707 123 4567")]
    a = make_station(free_users=users, sid="ALM-01")
    b = make_station(free_users=list(users), sid="ALM-01")
    assert diff_stations(a, b) == []


def test_notes_only_change_yields_single_entry():
    changes = diff_stations(make_station(notes="old"), make_station(notes="new"))
    assert len(changes) == 1
    assert changes[0].startswith("Заметки")
    assert '"old"' in changes[0] and '"new"' in changes[0]


def test_none_and_empty_are_equal():
    assert diff_stations(make_station(sid=None), make_station(sid="")) == []


def test_empty_values_rendered_with_marker():
    changes = diff_stations(make_station(sim=None), make_station(sim="8997"))
    assert changes == [f'SIM изменено с "{EMPTY_MARKER}" на "8997"']


def test_scalar_changes_follow_field_order():
    old = make_station()
    new = make_station(installer="Петр", location_name="Sky Lounge", status=StationStatus.MAINTENANCE)
    changes = diff_stations(old, new)
    assert [c.split(" ")[0] for c in changes] == ["Название", "Статус", "Монтажник"]
    assert 'с "Установлено" на "Обслуживание"' in changes[1]


def test_free_user_reconciliation_order(free_user):
    a = free_user("a", "Анна")
    b = free_user("b", "Борис", phone="111")
    c = free_user("c", "Вера")
    d = free_user("d", "Дина")
    old = make_station(free_users=[a, b, c])
    new = make_station(free_users=[d, free_user("b", "Борис", phone="222"), a])

    changes = diff_stations(old, new)

    assert len(changes) == 3
    assert changes[0] == "Добавлен бесплатный пользователь: Дина"
    assert changes[1].startswith("Изменен бесплатный пользователь Борис:")
    assert changes[2] == "Удален бесплатный пользователь: Вера"


def test_modified_free_user_aggregates_fields(free_user):
    old = make_station(free_users=[free_user("u", "Айбек", None, "+7 700")])
    new = make_station(free_users=[free_user("u", "Айбек Оспанов", "Менеджер", "+7 700")])

    changes = diff_stations(old, new)

    assert len(changes) == 1
    assert "ФИО" in changes[0]
    assert f'Должность изменено с "{EMPTY_MARKER}" на "Менеджер"' in changes[0]
    assert "Телефон" not in changes[0]


def test_scalar_changes_come_before_user_changes(free_user):
    old = make_station(notes="a")
    new = make_station(notes="b", free_users=[free_user("u", "Новый")])
    changes = diff_stations(old, new)
    assert changes[0].startswith("Заметки")
    assert changes[1] == "Добавлен бесплатный пользователь: Новый"


def test_generate_history_entry():
    now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    first = generate_history_entry("Иван", "Создание объекта", now)
    second = generate_history_entry("Иван", "Создание объекта", now)

    assert first.date == "2024-01-02T03:04:05Z"
    assert first.employee == "Иван"
    assert first.change == "Создание объекта"
    assert first.id.startswith("h-")
    assert first.id != second.id
