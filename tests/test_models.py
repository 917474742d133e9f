"""Tests for channel_sync.models module.

Validates SyncRecord defaults, immutability and dictionary parsing.
"""

import dataclasses

import pytest

from channel_sync.models import SyncRecord


class TestSyncRecord:
    """Test SyncRecord dataclass behavior."""

    def test_fresh_record_is_zeroed(self, record):
        assert record.channel_id == "north_intrusion"
        assert record.last_event_id is None
        assert record.last_event_timestamp == 0
        assert record.last_event_sequence == 0
        assert record.highest_sequence == 0
        assert record.total_received == 0
        assert record.last_sync_time == 0.0

    def test_frozen(self, record):
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.total_received = 5

    def test_evolve_returns_new_record(self, record):
        updated = record.evolve(total_received=3)
        assert updated.total_received == 3
        assert record.total_received == 0
        assert updated.channel_id == record.channel_id

    def test_to_dict(self):
        r = SyncRecord(
            channel_id="yard_fire",
            last_event_id="evt-9",
            last_event_timestamp=1700000000123,
            last_event_sequence=9,
            highest_sequence=9,
            total_received=4,
            last_sync_time=1700000000.5,
        )
        d = r.to_dict()
        assert d["channel_id"] == "yard_fire"
        assert d["last_event_id"] == "evt-9"
        assert d["highest_sequence"] == 9
        assert d["total_received"] == 4

    def test_from_dict_restores_fields(self):
        r = SyncRecord(channel_id="yard_fire", last_event_id="evt-2",
                       last_event_sequence=2, highest_sequence=5, total_received=3)
        assert SyncRecord.from_dict(r.to_dict()) == r


class TestSyncRecordFromDict:
    """Test parsing of malformed persisted entries."""

    def test_missing_optional_fields_default(self):
        r = SyncRecord.from_dict({"channel_id": "gate_crowd"})
        assert r == SyncRecord(channel_id="gate_crowd")

    def test_numeric_strings_are_parsed(self):
        r = SyncRecord.from_dict({"channel_id": "gate_crowd", "highest_sequence": "12"})
        assert r.highest_sequence == 12

    def test_missing_channel_id(self):
        with pytest.raises(KeyError):
            SyncRecord.from_dict({"highest_sequence": 3})

    def test_empty_channel_id(self):
        with pytest.raises(ValueError):
            SyncRecord.from_dict({"channel_id": ""})

    def test_not_a_mapping(self):
        with pytest.raises(TypeError):
            SyncRecord.from_dict(["gate_crowd"])

    def test_bad_number(self):
        with pytest.raises(ValueError):
            SyncRecord.from_dict({"channel_id": "gate_crowd", "total_received": "many"})

    @pytest.mark.parametrize("field, value", [
        ("highest_sequence", float("inf")),
        ("last_event_timestamp", float("-inf")),
        ("total_received", float("nan")),
        ("last_sync_time", float("inf")),
    ])
    def test_non_finite_number(self, field, value):
        with pytest.raises(ValueError, match="not finite"):
            SyncRecord.from_dict({"channel_id": "gate_crowd", field: value})

    def test_last_sequence_above_watermark(self):
        with pytest.raises(ValueError, match="exceeds"):
            SyncRecord.from_dict({
                "channel_id": "gate_crowd",
                "last_event_sequence": 8,
                "highest_sequence": 3,
            })
