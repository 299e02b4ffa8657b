from datetime import datetime, timezone
from typing import List, Sequence

from lifecycle import EventType, LifecycleEvent
from models import AppNotification, new_id

# Events worth telling the team about, with the notification type they map to
NOTIFIED_EVENTS = {
    EventType.STATION_CREATED: "success",
    EventType.REACTIVATION_BLOCKED: "warning",
}


def notifications_for(events: Sequence[LifecycleEvent], author: str) -> List[AppNotification]:
    timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return [
        AppNotification(
            id=new_id("n"),
            message=event.message,
            timestamp=timestamp,
            author=author,
            type=NOTIFIED_EVENTS[event.type],
        )
        for event in events
        if event.type in NOTIFIED_EVENTS
    ]


def mark_all_read(notifications: Sequence[AppNotification]) -> List[AppNotification]:
    return [n if n.read else n.model_copy(update={"read": True}) for n in notifications]
