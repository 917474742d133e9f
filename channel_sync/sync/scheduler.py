"""Debounced persistence of sync records.

Every accepted event moves a single deadline. Only when the feed has been
quiet for the full debounce interval is the blob written, so a burst of
events costs one write.

The blob is always encoded from a snapshot taken when the write happens,
never from one captured when the deadline was set. A channel cleared while a
flush is pending is therefore never written back.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from channel_sync.backends.base import KeyValueStore
from channel_sync.models import SyncRecord

logger = logging.getLogger(__name__)

Snapshot = Callable[[], Dict[str, SyncRecord]]


@dataclass
class FlushResult:
    """Result of writing the blob."""

    success: bool
    channels_written: int = 0
    bytes_written: int = 0
    duration_ms: float = 0.0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "success": self.success,
            "channels_written": self.channels_written,
            "bytes_written": self.bytes_written,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }


def encode_records(records: Dict[str, SyncRecord]) -> bytes:
    """Encode a channel_id -> SyncRecord mapping as a JSON blob."""
    payload = {channel_id: record.to_dict() for channel_id, record in records.items()}
    return json.dumps(payload, sort_keys=True).encode("utf-8")


def decode_records(blob: bytes) -> Dict[str, SyncRecord]:
    """Decode a blob written by :func:`encode_records`.

    Entries that fail to parse are skipped.

    Raises:
        ValueError: If the blob is not a JSON object
    """
    data = json.loads(blob.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected JSON object, got {type(data).__name__}")

    records: Dict[str, SyncRecord] = {}
    for channel_id, entry in data.items():
        try:
            record = SyncRecord.from_dict(entry)
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Skipping malformed sync record for {channel_id}: {e}")
            continue
        if record.channel_id != channel_id:
            logger.warning(
                f"Skipping sync record keyed {channel_id} "
                f"but naming {record.channel_id}"
            )
            continue
        records[channel_id] = record
    return records


class PersistenceScheduler:
    """Coalesces record updates into debounced blob writes.

    One daemon worker thread, started on the first schedule, sleeps until
    the debounce deadline and then writes. Re-arming only moves the
    deadline.

    Attributes:
        backend: Key-value store receiving the blob
        key: Fixed blob identifier
        delay: Debounce interval in seconds
    """

    def __init__(
        self,
        backend: KeyValueStore,
        key: str,
        snapshot: Snapshot,
        delay: float = 0.5,
    ):
        """Initialize the scheduler.

        Args:
            backend: Key-value store receiving the blob
            key: Blob identifier
            snapshot: Returns the current records; called at write time
            delay: Debounce interval in seconds
        """
        self.backend = backend
        self.key = key
        self.delay = delay
        self._snapshot = snapshot

        # Guards the deadline, dirty and closed flags; never held while
        # acquiring another lock
        self._wake = threading.Condition(threading.Lock())
        self._deadline: Optional[float] = None
        self._dirty = False
        self._closed = False
        self._worker: Optional[threading.Thread] = None
        # Serializes blob writes and deletes
        self._io_lock = threading.Lock()

    @property
    def pending(self) -> bool:
        """True while a debounced flush is armed."""
        with self._wake:
            return self._deadline is not None

    @property
    def dirty(self) -> bool:
        """True if records changed since the last write or delete."""
        with self._wake:
            return self._dirty

    def schedule(self) -> None:
        """Mark records changed and arm or re-arm the debounce deadline."""
        with self._wake:
            if self._closed:
                return
            self._dirty = True
            self._deadline = time.monotonic() + self.delay
            if self._worker is None:
                self._worker = threading.Thread(
                    target=self._run, name="channel-sync-flush", daemon=True
                )
                self._worker.start()
            self._wake.notify()

    def cancel(self) -> None:
        """Drop a pending flush, if any."""
        with self._wake:
            self._deadline = None
            self._wake.notify()

    def _run(self) -> None:
        while True:
            with self._wake:
                while not self._closed:
                    if self._deadline is None:
                        self._wake.wait()
                        continue
                    remaining = self._deadline - time.monotonic()
                    if remaining <= 0:
                        break
                    self._wake.wait(remaining)
                if self._closed:
                    return
                self._deadline = None

            try:
                self.flush()
            except Exception as e:
                logger.error(f"Debounced flush failed: {e}")

    def flush(self) -> FlushResult:
        """Write the current records to the backend now."""
        started = time.perf_counter()
        with self._io_lock:
            with self._wake:
                self._dirty = False
            records = self._snapshot()
            try:
                blob = encode_records(records)
                self.backend.set(self.key, blob)
            except (OSError, ValueError, TypeError) as e:
                with self._wake:
                    self._dirty = True
                logger.warning(f"Failed to save {len(records)} channel states: {e}")
                return FlushResult(
                    success=False,
                    duration_ms=(time.perf_counter() - started) * 1000,
                    error=str(e),
                )

        result = FlushResult(
            success=True,
            channels_written=len(records),
            bytes_written=len(blob),
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        logger.debug(
            f"Saved {result.channels_written} channel states "
            f"({result.bytes_written} bytes) in {result.duration_ms:.1f}ms"
        )
        return result

    def force_flush(self) -> FlushResult:
        """Cancel the pending deadline and write synchronously."""
        self.cancel()
        return self.flush()

    def flush_if_dirty(self) -> FlushResult:
        """Like :meth:`force_flush`, but skip the write when nothing changed.

        A blob deleted by :meth:`discard` therefore stays deleted.
        """
        self.cancel()
        if not self.dirty:
            return FlushResult(success=True)
        return self.flush()

    def discard(self) -> bool:
        """Cancel the pending deadline and delete the blob.

        Returns:
            True if the blob was removed (or never existed)
        """
        with self._wake:
            self._deadline = None
            self._dirty = False
            self._wake.notify()
        with self._io_lock:
            try:
                self.backend.delete(self.key)
            except OSError as e:
                with self._wake:
                    self._dirty = True
                logger.warning(f"Failed to delete persisted sync state: {e}")
                return False
        return True

    def load(self) -> Dict[str, SyncRecord]:
        """Read and decode the blob once.

        A missing or unreadable blob means no prior state.
        """
        try:
            blob = self.backend.get(self.key)
        except OSError as e:
            logger.warning(f"Failed to read persisted sync state: {e}")
            return {}

        if blob is None:
            return {}

        try:
            records = decode_records(blob)
        except (UnicodeDecodeError, ValueError) as e:
            logger.warning(f"Discarding undecodable sync state: {e}")
            return {}

        logger.info(f"Loaded {len(records)} channel sync states")
        for channel_id, record in records.items():
            logger.debug(
                f"  - {channel_id}: last_seq={record.last_event_sequence}, "
                f"highest_seq={record.highest_sequence}"
            )
        return records

    def shutdown(self) -> None:
        """Drop the pending deadline, stop the worker and refuse new schedules."""
        with self._wake:
            self._closed = True
            self._deadline = None
            self._wake.notify_all()
