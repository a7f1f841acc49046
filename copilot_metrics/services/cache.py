from __future__ import annotations

import json
import logging
from collections import OrderedDict
from threading import Lock
from typing import List, Optional, Sequence

from pydantic import ValidationError

from ..schemas.metrics import UsageRecord


LOGGER = logging.getLogger(__name__)

CACHE_KEY = "copilot-metrics-data"


class SessionStoreError(Exception):
    """Raised when a value cannot be stored, e.g. because it exceeds the quota."""


class SessionStore:
    """Thread-safe in-memory string store scoped to one server session."""

    def __init__(self, max_entries: int = 16, max_value_bytes: Optional[int] = None) -> None:
        self.max_entries = max_entries
        self.max_value_bytes = max_value_bytes
        self._store: OrderedDict[str, str] = OrderedDict()
        self._lock = Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            if key not in self._store:
                return None
            self._store.move_to_end(key)
            return self._store[key]

    def set(self, key: str, value: str) -> None:
        if self.max_value_bytes is not None and len(value.encode("utf-8")) > self.max_value_bytes:
            raise SessionStoreError(
                f"Value for '{key}' exceeds the session quota of {self.max_value_bytes} bytes."
            )
        with self._lock:
            self._store[key] = value
            self._store.move_to_end(key)
            if len(self._store) > self.max_entries:
                self._store.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._store)


def read_cached_records(store: Optional[SessionStore], key: str = CACHE_KEY) -> List[UsageRecord]:
    if store is None:
        return []
    try:
        stored = store.get(key)
        if not stored:
            return []
        payload = json.loads(stored)
        return [UsageRecord.model_validate(item) for item in payload]
    except (SessionStoreError, ValueError, TypeError, ValidationError) as exc:
        LOGGER.warning("Failed to load metrics from session cache: %s", exc)
        return []


def write_cached_records(
    store: Optional[SessionStore],
    records: Sequence[UsageRecord],
    key: str = CACHE_KEY,
) -> bool:
    if store is None:
        return False
    try:
        serialized = json.dumps([record.model_dump(mode="json") for record in records])
        store.set(key, serialized)
    except (SessionStoreError, TypeError, ValueError) as exc:
        LOGGER.warning("Failed to save metrics to session cache: %s", exc)
        return False
    return True
