"""
History/diff engine.

Turns two versions of a station into human readable change descriptions and
wraps descriptions into timestamped audit entries.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from models import FreeUser, HistoryEntry, Station, new_id

EMPTY_MARKER = "(пусто)"

# Compared in this order; each differing field yields one description
SCALAR_FIELDS: List[Tuple[str, str]] = [
    ("location_name", "Название локации"),
    ("address", "Адрес"),
    ("status", "Статус"),
    ("notes", "Заметки"),
    ("sid", "SID"),
    ("did", "DID"),
    ("sim", "SIM"),
    ("installer", "Монтажник"),
    ("installation_date", "Дата установки"),
]

FREE_USER_FIELDS: List[Tuple[str, str]] = [
    ("full_name", "ФИО"),
    ("position", "Должность"),
    ("phone", "Телефон"),
]


def _normalize(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    return str(value)


def _render(value: str) -> str:
    return value if value else EMPTY_MARKER


def _field_change(label: str, old: str, new: str) -> str:
    return f'{label} изменено с "{_render(old)}" на "{_render(new)}"'


def _free_user_changes(old: FreeUser, new: FreeUser) -> List[str]:
    changes = []
    for attr, label in FREE_USER_FIELDS:
        before = _normalize(getattr(old, attr))
        after = _normalize(getattr(new, attr))
        if before != after:
            changes.append(_field_change(label, before, after))
    return changes


def diff_stations(old: Station, new: Station) -> List[str]:
    """Describe every difference between two versions of a station.

    Scalar fields come first in declaration order. Free users are matched by
    id: the new list is walked once emitting "added" or "modified" entries,
    then users missing from the new list are reported as removed, in old
    list order.
    """
    changes: List[str] = []

    for attr, label in SCALAR_FIELDS:
        before = _normalize(getattr(old, attr))
        after = _normalize(getattr(new, attr))
        if before != after:
            changes.append(_field_change(label, before, after))

    old_users: Dict[str, FreeUser] = {u.id: u for u in old.free_users}
    new_ids = {u.id for u in new.free_users}

    for user in new.free_users:
        previous = old_users.get(user.id)
        if previous is None:
            changes.append(f"Добавлен бесплатный пользователь: {user.full_name}")
            continue
        user_changes = _free_user_changes(previous, user)
        if user_changes:
            changes.append(
                f"Изменен бесплатный пользователь {previous.full_name}: " + "; ".join(user_changes)
            )

    for user in old.free_users:
        if user.id not in new_ids:
            changes.append(f"Удален бесплатный пользователь: {user.full_name}")

    return changes


def generate_history_entry(employee: str, change: str, now: Optional[datetime] = None) -> HistoryEntry:
    """The only place a HistoryEntry is built from a change description."""
    timestamp = (now or datetime.now(timezone.utc)).isoformat().replace("+00:00", "Z")
    return HistoryEntry(id=new_id("h"), date=timestamp, employee=employee, change=change)
