"""Channel Sync - event synchronization and deduplication for live feeds.

Tracks, per subscription channel, which pushed events were already delivered
and decides whether an incoming event is new. Channels run in one of two
regimes:

    - LIVE: in-order feed, anything at or below the watermark is a duplicate
    - CATCH_UP: backlog replay after a reconnect, out-of-order safe

Key Features:
    - Thread-safe store with a single serialization point
    - Debounced persistence to a pluggable key-value backend
    - Resume cursors for subscription requests
    - Exit hook that flushes unsaved state

Quick Start:
    from channel_sync import SyncStore, SyncStoreConfig

    store = SyncStore(SyncStoreConfig(backend="file", store_path="./state"))

    store.enable_catch_up("north_intrusion")
    if store.record_event("north_intrusion", "evt-42", 1700000000000, 42):
        deliver(event)
    store.disable_catch_up("north_intrusion")

    store.force_flush()

Classes:
    SyncStore: Main interface for recording and querying events
    SyncStoreConfig: Store configuration
    SyncRecord: Durable per-channel state
    SyncMode: Enum for delivery regimes (LIVE, CATCH_UP)
    BackendKind: Enum for key-value backends (MEMORY, FILE)
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .config import (
    SyncStoreConfig,
    SyncMode,
    BackendKind,
)

from .models import SyncRecord

from .backends import (
    KeyValueStore,
    MemoryKeyValueStore,
    FileKeyValueStore,
    get_backend,
)

from .sync import (
    Decision,
    evaluate,
    ModeController,
    FlushResult,
    PersistenceScheduler,
    SyncStore,
)

__all__ = [
    "__version__",
    "__license__",
    "SyncStore",
    "SyncStoreConfig",
    "SyncRecord",
    "SyncMode",
    "BackendKind",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "get_backend",
    "Decision",
    "evaluate",
    "ModeController",
    "FlushResult",
    "PersistenceScheduler",
    "create_store",
]


def create_store(
    store_path: str = None,
    debounce_seconds: float = 0.5,
    flush_on_exit: bool = True,
) -> SyncStore:
    """Convenience function to create a configured SyncStore.

    Args:
        store_path: Directory for persisted state. None keeps state in memory.
        debounce_seconds: Quiet period before a flush is written
        flush_on_exit: Force-flush when the interpreter exits

    Returns:
        Configured SyncStore instance

    Example:
        store = create_store("./state")
    """
    config = SyncStoreConfig(
        backend=BackendKind.FILE if store_path else BackendKind.MEMORY,
        store_path=store_path,
        debounce_seconds=debounce_seconds,
        flush_on_exit=flush_on_exit,
    )
    return SyncStore(config)
