"""Concurrency-safe store of channel sync state.

SyncStore is the single owner of every channel's SyncRecord and mode
state. All public methods run under one lock guarding the whole map, so
`record_event` is atomic with respect to any other call, and whole-map
operations such as `clear_all` and `get_all_records` never see a channel
half-updated.

Persistence is delegated to a PersistenceScheduler: accepted events only
move its deadline, the actual write happens on its worker thread.
"""

import atexit
import logging
import os
import threading
import time
from typing import Any, Callable, Dict, Iterable, Optional

from channel_sync.backends import get_backend
from channel_sync.backends.base import KeyValueStore
from channel_sync.config import SyncStoreConfig
from channel_sync.models import SyncRecord
from channel_sync.sync.detector import evaluate
from channel_sync.sync.modes import ModeController
from channel_sync.sync.scheduler import FlushResult, PersistenceScheduler

logger = logging.getLogger(__name__)


class SyncStore:
    """Tracks delivered events per channel and suppresses duplicates.

    Attributes:
        config: Store configuration
        backend: Key-value store holding the persisted blob

    Example:
        store = SyncStore(SyncStoreConfig(backend="file", store_path="./state"))

        # After a reconnect, before backlog frames arrive
        store.enable_catch_up("north_intrusion")

        if store.record_event("north_intrusion", "evt-17", 1700000000000, 17):
            forward(event)

        # Replay reached the live edge
        store.disable_catch_up("north_intrusion")

        # Before the process suspends
        store.force_flush()
    """

    def __init__(
        self,
        config: Optional[SyncStoreConfig] = None,
        backend: Optional[KeyValueStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the store and load persisted records.

        Args:
            config: Store configuration. Defaults to an in-memory backend.
            backend: Key-value store to use instead of the one named in config
            clock: Wall-clock source for last_sync_time
        """
        self.config = config or SyncStoreConfig()
        self.backend = backend or get_backend(
            self.config.backend.value, self.config.store_path
        )
        if not self.backend.is_available():
            logger.warning(
                f"Backend not available, sync state will not persist: "
                f"{self.backend.describe()}"
            )
        self._clock = clock

        self._lock = threading.RLock()
        self._records: Dict[str, SyncRecord] = {}
        self._modes = ModeController()
        self._atexit_registered = False

        self._setup_logging()

        self._scheduler = PersistenceScheduler(
            backend=self.backend,
            key=self.config.state_key,
            snapshot=self._snapshot,
            delay=self.config.debounce_seconds,
        )

        # Mode state is never persisted: every loaded channel starts LIVE
        self._records = self._scheduler.load()

        if self.config.flush_on_exit:
            atexit.register(self.close)
            self._atexit_registered = True
            logger.debug("Exit flush handler registered")

        logger.info(
            f"SyncStore ready with {len(self._records)} channels "
            f"on {self.backend.describe()}"
        )

    def _setup_logging(self) -> None:
        """Attach the configured log file to the package logger."""
        if self.config.log_file:
            package_logger = logging.getLogger("channel_sync")
            target = os.path.abspath(self.config.log_file)
            for handler in package_logger.handlers:
                if getattr(handler, "baseFilename", None) == target:
                    return
            self.config.log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(self.config.log_file, encoding="utf-8")
            handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            package_logger.addHandler(handler)

    def _snapshot(self) -> Dict[str, SyncRecord]:
        with self._lock:
            return dict(self._records)

    # -- Event recording --

    def record_event(
        self,
        channel_id: str,
        event_id: str,
        timestamp: int,
        sequence: int = 0,
    ) -> bool:
        """Record an incoming event and report whether it is new.

        Args:
            channel_id: Subscription channel the event arrived on
            event_id: Producer event identifier
            timestamp: Producer timestamp in milliseconds
            sequence: Producer sequence number, 0 when the transport has none

        Returns:
            True if the event is new and should be forwarded, False for
            duplicates, stale events and malformed input
        """
        if not isinstance(channel_id, str) or not channel_id:
            logger.debug("Rejected event with empty channel_id")
            return False
        if not isinstance(event_id, str) or not event_id:
            logger.debug(f"Rejected event with empty event_id on {channel_id}")
            return False
        try:
            timestamp = int(timestamp)
            sequence = int(sequence)
        except (TypeError, ValueError, OverflowError):
            logger.debug(f"Rejected event {event_id} with non-numeric fields")
            return False

        with self._lock:
            record = self._records.get(channel_id) or SyncRecord(channel_id=channel_id)
            catch_up, seen = self._modes.state(channel_id)

            decision = evaluate(
                record, catch_up, seen, event_id, timestamp, sequence, self._clock()
            )
            if not decision.accept:
                return False

            self._records[channel_id] = decision.record
            if catch_up:
                self._modes.update_seen(channel_id, decision.seen_sequences)
            self._scheduler.schedule()

        logger.debug(
            f"Recorded {channel_id}: seq={sequence} "
            f"({'CATCH-UP' if catch_up else 'LIVE'})"
        )
        return True

    # -- Catch-up mode management --

    def enable_catch_up(self, channel_id: str) -> None:
        """Switch a channel to catch-up mode ahead of backlog replay."""
        with self._lock:
            self._modes.enable_catch_up(channel_id)

    def disable_catch_up(self, channel_id: str) -> None:
        """Switch a channel back to live mode once replay is complete."""
        with self._lock:
            self._modes.disable_catch_up(channel_id)

    def is_catch_up(self, channel_id: str) -> bool:
        with self._lock:
            return self._modes.is_catch_up(channel_id)

    def progress(self, channel_id: str) -> int:
        """Distinct sequences accepted in the current catch-up episode."""
        with self._lock:
            return self._modes.progress(channel_id)

    # -- State access --

    def get_record(self, channel_id: str) -> Optional[SyncRecord]:
        with self._lock:
            return self._records.get(channel_id)

    def get_all_records(self) -> Dict[str, SyncRecord]:
        with self._lock:
            return dict(self._records)

    def last_event_id(self, channel_id: str) -> Optional[str]:
        with self._lock:
            record = self._records.get(channel_id)
            return record.last_event_id if record else None

    def last_sequence(self, channel_id: str) -> int:
        with self._lock:
            record = self._records.get(channel_id)
            return record.last_event_sequence if record else 0

    def highest_sequence(self, channel_id: str) -> int:
        with self._lock:
            record = self._records.get(channel_id)
            return record.highest_sequence if record else 0

    def total_accepted(self) -> int:
        """Accepted events summed over every channel."""
        with self._lock:
            return sum(r.total_received for r in self._records.values())

    def resume_state(self, channel_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Build resume cursors for a subscription request.

        Channels without a record are left out; an empty result tells the
        server to start the subscriber from scratch.

        Args:
            channel_ids: Channels about to be subscribed

        Returns:
            Dict of channel_id -> {"last_event_id", "last_timestamp", "last_seq"}
        """
        with self._lock:
            result = {}
            for channel_id in channel_ids:
                record = self._records.get(channel_id)
                if record is None:
                    continue
                result[channel_id] = {
                    "last_event_id": record.last_event_id or "",
                    "last_timestamp": record.last_event_timestamp,
                    "last_seq": record.highest_sequence,
                }
            return result

    def stats(self) -> Dict[str, Any]:
        """Get aggregate statistics for display.

        Returns:
            Dict with channel_count, total_events and per-channel entries
        """
        with self._lock:
            channels = [
                {
                    "channel": channel_id,
                    "last_event_id": record.last_event_id,
                    "last_seq": record.last_event_sequence,
                    "highest_seq": record.highest_sequence,
                    "total_received": record.total_received,
                    "last_sync_time": record.last_sync_time,
                    "mode": self._modes.mode(channel_id).value,
                    "tracked_sequences": self._modes.progress(channel_id),
                }
                for channel_id, record in sorted(self._records.items())
            ]
            return {
                "channel_count": len(self._records),
                "total_events": self.total_accepted(),
                "channels": channels,
            }

    # -- Channel management --

    def clear_channel(self, channel_id: str) -> None:
        """Forget one channel.

        The pending flush is re-armed; it snapshots at write time, so the
        persisted blob drops the channel too.
        """
        with self._lock:
            existed = self._records.pop(channel_id, None) is not None
            self._modes.remove(channel_id)
            if existed:
                self._scheduler.schedule()
        logger.info(f"Cleared sync state for {channel_id}")

    def clear_all(self) -> None:
        """Forget every channel and delete the persisted blob."""
        with self._lock:
            self._records.clear()
            self._modes.clear()
            self._scheduler.cancel()
        # Outside the store lock: a flush in progress holds the I/O lock
        # and needs the store lock for its snapshot.
        self._scheduler.discard()
        with self._lock:
            # Events recorded while the blob was being deleted
            if self._records:
                self._scheduler.schedule()
        logger.info("Cleared all sync state")

    # -- Persistence --

    def force_flush(self) -> FlushResult:
        """Persist the current state now, bypassing the debounce delay."""
        result = self._scheduler.force_flush()
        if result.success:
            logger.info(f"Force saved {result.channels_written} channel states")
        return result

    @property
    def flush_pending(self) -> bool:
        return self._scheduler.pending

    def close(self) -> FlushResult:
        """Flush unsaved changes and stop scheduling writes.

        Nothing is written when state is unchanged since the last write, so
        a blob removed by `clear_all` stays removed.
        """
        result = self._scheduler.flush_if_dirty()
        self._scheduler.shutdown()
        if self._atexit_registered:
            atexit.unregister(self.close)
            self._atexit_registered = False
        return result

    def __enter__(self) -> "SyncStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
