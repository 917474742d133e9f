"""Configuration dataclasses for the channel sync engine."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from enum import Enum


DEFAULT_STATE_KEY = "channel_sync_states"
DEFAULT_DEBOUNCE_SECONDS = 0.5


class SyncMode(Enum):
    """Delivery regime for a channel."""
    LIVE = "live"           # In-order feed, watermark comparison
    CATCH_UP = "catch_up"   # Backlog replay, seen-set comparison


class BackendKind(Enum):
    """Key-value backend used for the persisted blob."""
    MEMORY = "memory"
    FILE = "file"


@dataclass
class SyncStoreConfig:
    """Configuration for a SyncStore instance.

    Attributes:
        state_key: Key of the persisted blob in the key-value store
        debounce_seconds: Quiet period before a scheduled flush is written
        backend: Which key-value backend to build when none is passed in
        store_path: Directory for the file backend
        flush_on_exit: Register an atexit hook that flushes unsaved changes
        log_file: Optional path to an extra log file
    """
    state_key: str = DEFAULT_STATE_KEY
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    backend: BackendKind = BackendKind.MEMORY
    store_path: Optional[Path] = None
    flush_on_exit: bool = False
    log_file: Optional[Path] = None

    def __post_init__(self):
        """Coerce strings and validate values."""
        if isinstance(self.backend, str):
            self.backend = BackendKind(self.backend.lower())
        if isinstance(self.store_path, str):
            self.store_path = Path(self.store_path)
        if isinstance(self.log_file, str):
            self.log_file = Path(self.log_file)

        if not self.state_key:
            raise ValueError("state_key must not be empty")
        if self.debounce_seconds < 0:
            raise ValueError("debounce_seconds cannot be negative")
        if self.backend == BackendKind.FILE and self.store_path is None:
            raise ValueError("store_path is required for the file backend")
