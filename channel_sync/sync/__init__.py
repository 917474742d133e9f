"""Synchronization module for the channel sync engine.

This module provides:
- evaluate: Pure duplicate detection for one incoming event
- ModeController: Live / catch-up mode per channel
- PersistenceScheduler: Debounced writes of the record blob
- SyncStore: Thread-safe aggregate exposing the public API

Live mode rejects anything at or below the watermark.
Catch-up mode rejects only sequences already seen in the current replay.
"""

from channel_sync.sync.detector import Decision, evaluate
from channel_sync.sync.modes import ModeController
from channel_sync.sync.scheduler import FlushResult, PersistenceScheduler
from channel_sync.sync.store import SyncStore

__all__ = [
    "Decision",
    "evaluate",
    "ModeController",
    "FlushResult",
    "PersistenceScheduler",
    "SyncStore",
]
