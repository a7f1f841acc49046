import json

import pytest

from copilot_metrics.services.cache import (
    CACHE_KEY,
    SessionStore,
    SessionStoreError,
    read_cached_records,
    write_cached_records,
)
from copilot_metrics.services.parser import parse_records


def test_session_store_evicts_least_recently_used():
    store = SessionStore(max_entries=2)
    store.set("a", "1")
    store.set("b", "2")
    store.get("a")
    store.set("c", "3")
    assert store.get("b") is None
    assert store.get("a") == "1"
    assert store.size() == 2


def test_session_store_enforces_quota():
    store = SessionStore(max_value_bytes=4)
    with pytest.raises(SessionStoreError):
        store.set("key", "too long")
    assert store.get("key") is None


def test_cached_records_round_trip(sample_text):
    store = SessionStore()
    records = parse_records(sample_text)
    assert write_cached_records(store, records) is True
    assert json.loads(store.get(CACHE_KEY))[0]["user_login"] == "alice"
    assert read_cached_records(store) == records


def test_write_failure_is_swallowed(sample_text):
    store = SessionStore(max_value_bytes=16)
    assert write_cached_records(store, parse_records(sample_text)) is False
    assert store.size() == 0


def test_corrupt_cache_reads_as_empty():
    store = SessionStore()
    store.set(CACHE_KEY, "{broken")
    assert read_cached_records(store) == []
    store.set(CACHE_KEY, json.dumps([{"no_day": True}]))
    assert read_cached_records(store) == []


def test_missing_store_is_a_no_op(sample_text):
    assert read_cached_records(None) == []
    assert write_cached_records(None, parse_records(sample_text)) is False
