"""Duplicate detection for channel events.

Pure decision logic, no I/O and no locking. Given a channel's record, its
delivery mode and its catch-up seen-set, decide whether an incoming event
is new and what the channel state looks like afterwards.

Rules:
- sequence == 0: no sequence from the transport, accept only a newer timestamp
- catch-up mode: accept any sequence not already in the seen-set
- live mode: accept only sequences above the watermark
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional

from channel_sync.models import SyncRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    """Outcome of evaluating one event.

    When rejected, record and seen_sequences are the inputs unchanged.
    """

    accept: bool
    record: SyncRecord
    seen_sequences: FrozenSet[int]


def evaluate(
    record: SyncRecord,
    catch_up: bool,
    seen_sequences: FrozenSet[int],
    event_id: str,
    timestamp: int,
    sequence: int,
    now: float,
) -> Decision:
    """Decide whether an event is new for its channel.

    Args:
        record: Current state of the channel
        catch_up: True while the channel replays backlog
        seen_sequences: Sequences accepted in the current catch-up episode
        event_id: Identifier of the incoming event
        timestamp: Producer timestamp in milliseconds
        sequence: Producer sequence number, 0 when absent
        now: Wall-clock time to stamp on acceptance

    Returns:
        Decision with the updated record and seen-set
    """
    rejected = Decision(False, record, seen_sequences)

    if sequence < 0:
        logger.debug(f"Rejected negative seq {sequence} for {record.channel_id}")
        return rejected

    if sequence == 0:
        if timestamp <= record.last_event_timestamp:
            logger.debug(
                f"Stale timestamp {timestamp} for {record.channel_id} "
                f"(last={record.last_event_timestamp})"
            )
            return rejected
        updated = record.evolve(
            last_event_id=event_id,
            last_event_timestamp=timestamp,
            total_received=record.total_received + 1,
            last_sync_time=now,
        )
        return Decision(True, updated, seen_sequences)

    if catch_up:
        if sequence in seen_sequences:
            logger.debug(f"Duplicate seq {sequence} for {record.channel_id} (catch-up)")
            return rejected
        seen_sequences = seen_sequences | {sequence}
    elif sequence <= record.highest_sequence:
        logger.debug(
            f"Duplicate seq {sequence} for {record.channel_id} "
            f"(live, highest={record.highest_sequence})"
        )
        return rejected

    updated = record.evolve(
        total_received=record.total_received + 1,
        last_sync_time=now,
    )

    # Watermark fields move as one unit
    if sequence > record.highest_sequence:
        updated = updated.evolve(
            highest_sequence=sequence,
            last_event_sequence=sequence,
            last_event_id=event_id,
            last_event_timestamp=timestamp,
        )

    return Decision(True, updated, seen_sequences)
