"""Unit tests for canonical JSON and hashing."""

from datetime import datetime, timezone

from hrsignals.utils.canonical import canonical_json, payload_hash


def test_canonical_json_sorts_keys():
    """Canonical JSON sorts keys."""
    obj = {"b": 1, "a": 2}
    assert canonical_json(obj) == '{"a":2,"b":1}'


def test_canonical_json_datetime_and_tuple():
    """Datetimes serialize as ISO strings, tuples as lists."""
    obj = {"at": datetime(2026, 3, 1, tzinfo=timezone.utc), "scores": (4, 4.5)}
    assert canonical_json(obj) == '{"at":"2026-03-01T00:00:00+00:00","scores":[4,4.5]}'


def test_payload_hash_deterministic():
    """Key order does not change the hash."""
    h1 = payload_hash({"employeeId": "e1", "overallScore": 4.5})
    h2 = payload_hash({"overallScore": 4.5, "employeeId": "e1"})
    assert h1 == h2
    assert len(h1) == 64  # SHA256 hex


def test_payload_hash_sensitive_to_values():
    """Changing a rating changes the hash."""
    ratings = [{"employeeId": "e1", "overallScore": 4.5}]
    changed = [{"employeeId": "e1", "overallScore": 4.0}]
    assert payload_hash(ratings) != payload_hash(changed)
