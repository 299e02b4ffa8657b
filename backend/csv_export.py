"""
CSV export of selected stations.

The output starts with a UTF-8 byte order mark so spreadsheet programs pick
the right encoding for Cyrillic text.
"""

import csv
import io
import logging
from datetime import date
from typing import List, Optional, Sequence, Tuple

from models import Station, format_short_date

logger = logging.getLogger(__name__)

BOM = "\ufeff"

HEADER = [
    "ID",
    "Название локации",
    "Адрес",
    "Монтажник",
    "Дата установки",
    "Статус",
    "SID",
    "DID",
    "SIM",
    "Широта",
    "Долгота",
    "Заметки",
    "Бесплатные пользователи",
]

NOTHING_SELECTED = "Не выбрано ни одной станции для экспорта"


def summarize_free_users(station: Station) -> str:
    return " | ".join(
        f"ФИО: {u.full_name}; Должность: {u.position or ''}; Телефон: {u.phone or ''}"
        for u in station.free_users
    )


def station_row(station: Station) -> List[str]:
    coords = station.coordinates
    return [
        station.id,
        station.location_name,
        station.address,
        station.installer,
        format_short_date(station.installation_date),
        station.status.value,
        station.sid or "",
        station.did or "",
        station.sim or "",
        str(coords.lat) if coords else "",
        str(coords.lng) if coords else "",
        station.notes,
        summarize_free_users(station),
    ]


def export_filename(today: Optional[date] = None) -> str:
    return f"stations_export_{(today or date.today()).isoformat()}.csv"


def export_stations_csv(stations: Sequence[Station]) -> Tuple[bool, str]:
    """Serialize stations to CSV text.

    Returns ``(True, csv_text)`` or ``(False, message)`` when there is nothing
    to export. Fields holding a comma, quote or newline are quoted with inner
    quotes doubled; rows are joined with "\\n".
    """
    if not stations:
        logger.info("CSV export requested with an empty selection")
        return False, NOTHING_SELECTED

    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(HEADER)
    for station in stations:
        writer.writerow(station_row(station))

    text = output.getvalue()
    # csv terminates every row; the export joins rows instead
    if text.endswith("\n"):
        text = text[:-1]
    logger.info(f"Exported {len(stations)} stations to CSV")
    return True, BOM + text
