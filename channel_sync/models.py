"""Durable per-channel sync state."""

import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SyncRecord:
    """What has been delivered so far on one channel.

    Records are immutable; the detector hands back a new record for every
    accepted event so readers always hold a consistent snapshot.

    Attributes:
        channel_id: Subscription channel (area + event type)
        last_event_id: Id of the most recently accepted event
        last_event_timestamp: Producer timestamp (ms) of that event
        last_event_sequence: Sequence of the last sequenced acceptance
        highest_sequence: Watermark, the largest sequence ever accepted
        total_received: Accepted events over the record's lifetime
        last_sync_time: Wall-clock seconds of the last acceptance
    """
    channel_id: str
    last_event_id: Optional[str] = None
    last_event_timestamp: int = 0
    last_event_sequence: int = 0
    highest_sequence: int = 0
    total_received: int = 0
    last_sync_time: float = 0.0

    def evolve(self, **changes: Any) -> "SyncRecord":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to a JSON-compatible dictionary."""
        return {
            "channel_id": self.channel_id,
            "last_event_id": self.last_event_id,
            "last_event_timestamp": self.last_event_timestamp,
            "last_event_sequence": self.last_event_sequence,
            "highest_sequence": self.highest_sequence,
            "total_received": self.total_received,
            "last_sync_time": self.last_sync_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncRecord":
        """Build a record from :meth:`to_dict` output.

        Raises:
            KeyError: If channel_id is missing
            TypeError: If data is not a mapping
            ValueError: If a numeric field is unparseable or not finite, or the
                sequence fields break their ordering
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected dict, got {type(data).__name__}")

        channel_id = data["channel_id"]
        if not isinstance(channel_id, str) or not channel_id:
            raise ValueError("channel_id must be a non-empty string")

        last_event_id = data.get("last_event_id")
        if last_event_id is not None:
            last_event_id = str(last_event_id)

        record = cls(
            channel_id=channel_id,
            last_event_id=last_event_id,
            last_event_timestamp=_as_int(data, "last_event_timestamp"),
            last_event_sequence=_as_int(data, "last_event_sequence"),
            highest_sequence=_as_int(data, "highest_sequence"),
            total_received=_as_int(data, "total_received"),
            last_sync_time=_as_float(data, "last_sync_time"),
        )

        if record.last_event_sequence > record.highest_sequence:
            raise ValueError(
                f"last_event_sequence {record.last_event_sequence} exceeds "
                f"highest_sequence {record.highest_sequence}"
            )
        return record


def _as_float(data: Dict[str, Any], field: str) -> float:
    value = float(data.get(field, 0))
    if not math.isfinite(value):
        raise ValueError(f"{field} is not finite: {value}")
    return value


def _as_int(data: Dict[str, Any], field: str) -> int:
    value = data.get(field, 0)
    if isinstance(value, float):
        # json parses Infinity, NaN and 1e400 as non-finite floats
        _as_float(data, field)
    return int(value)
