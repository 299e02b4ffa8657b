"""
File-backed key/value store with local-storage semantics.

All keys live in one JSON file mapping key -> serialized JSON string. Other
processes may rewrite the file at any time; ``sync()`` picks those changes up
and notifies listeners, the way a browser fires "storage" events for other
tabs.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PersistenceFailure(Exception):
    """Reading or writing the storage file failed."""


@dataclass
class StorageEvent:
    key: str
    old_value: Optional[str]
    new_value: Optional[str]


Listener = Callable[[StorageEvent], None]


class LocalStorage:
    def __init__(self, path):
        self.path = Path(path)
        self._items: Dict[str, str] = {}
        self._listeners: List[Listener] = []
        self._signature: Optional[Tuple[int, int, int]] = None
        try:
            self._items = self._read_file()
        except PersistenceFailure as e:
            logger.error(f"Starting with empty storage: {e}")
            self._quarantine()

    def _file_signature(self) -> Optional[Tuple[int, int, int]]:
        # Writes go through os.replace, so the inode changes on every rewrite
        try:
            st = self.path.stat()
        except OSError:
            return None
        return st.st_ino, st.st_mtime_ns, st.st_size

    def _quarantine(self):
        """Move an unreadable file aside so the next write cannot destroy it."""
        backup = self.path.with_name(self.path.name + ".corrupt")
        try:
            os.replace(self.path, backup)
        except OSError as e:
            logger.error(f"Could not move corrupt storage file {self.path} aside: {e}")
            return
        logger.warning(f"Corrupt storage file kept as {backup}")
        self._signature = None

    def _read_file(self) -> Dict[str, str]:
        self._signature = self._file_signature()
        if self._signature is None:
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PersistenceFailure(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceFailure(f"Unexpected content in {self.path}")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_file(self):
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(self._items, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceFailure(f"Cannot write {self.path}: {e}") from e
        self._signature = self._file_signature()

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = value
        self._write_file()

    def remove_item(self, key: str):
        if self._items.pop(key, None) is not None:
            self._write_file()

    def add_listener(self, listener: Listener):
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def sync(self) -> List[StorageEvent]:
        """Reload the file if someone else changed it and dispatch change events."""
        if self._file_signature() == self._signature:
            return []
        try:
            fresh = self._read_file()
        except PersistenceFailure as e:
            logger.error(f"Keeping last known state: {e}")
            return []

        events = [
            StorageEvent(key, self._items.get(key), fresh.get(key))
            for key in sorted(set(self._items) | set(fresh))
            if self._items.get(key) != fresh.get(key)
        ]
        self._items = fresh
        for event in events:
            logger.info(f"External change of storage key '{event.key}'")
            for listener in list(self._listeners):
                listener(event)
        return events


class PersistentValue(Generic[T]):
    """Typed value bound to one storage key.

    Reads fall back to ``default`` when the key is missing or unreadable,
    writes are best effort: failures are logged and the in-memory value is
    kept. External changes replace the in-memory value, a cleared key resets
    it to the default.
    """

    def __init__(self, storage: LocalStorage, key: str, default: T, type_: Any):
        self.storage = storage
        self.key = key
        self.default = default
        self._adapter = TypeAdapter(type_)
        self.value: T = self._parse(storage.get_item(key))
        storage.add_listener(self._on_storage_event)

    def _parse(self, raw: Optional[str]) -> T:
        if raw is None:
            return self.default
        try:
            return self._adapter.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Invalid data under '{self.key}', using default: {e}")
            return self.default

    def _serialize(self, value: T) -> str:
        return self._adapter.dump_json(value, by_alias=True).decode("utf-8")

    def set(self, value: T):
        self.value = value
        try:
            self.storage.set_item(self.key, self._serialize(value))
        except PersistenceFailure as e:
            logger.error(f"Failed to persist '{self.key}': {e}")

    def _on_storage_event(self, event: StorageEvent):
        if event.key != self.key:
            return
        if event.new_value is None:
            self.value = self.default
            return
        try:
            self.value = self._adapter.validate_json(event.new_value)
        except ValidationError as e:
            logger.error(f"Ignoring invalid external value for '{self.key}': {e}")
