"""Live / catch-up mode tracking per channel.

Every channel starts in LIVE mode. The subscription controller switches a
channel to CATCH_UP right after a reconnect, before backlog frames arrive,
and back to LIVE once replay reaches the live edge.

ModeController is not thread-safe on its own; SyncStore owns it and only
calls it while holding the store lock.
"""

import logging
from typing import Dict, FrozenSet, Tuple

from channel_sync.config import SyncMode

logger = logging.getLogger(__name__)

_EMPTY: FrozenSet[int] = frozenset()


class ModeController:
    """Holds the catch-up flag and seen-sequence set of every channel."""

    def __init__(self):
        self._catch_up: Dict[str, bool] = {}
        self._seen: Dict[str, FrozenSet[int]] = {}

    def enable_catch_up(self, channel_id: str) -> None:
        """Enter catch-up mode with an empty seen-set."""
        self._catch_up[channel_id] = True
        self._seen[channel_id] = _EMPTY
        logger.info(f"Enabled catch-up mode for {channel_id}")

    def disable_catch_up(self, channel_id: str) -> None:
        """Return to live mode and drop the seen-set."""
        self._catch_up[channel_id] = False
        self._seen.pop(channel_id, None)
        logger.info(f"Disabled catch-up mode for {channel_id} (live)")

    def is_catch_up(self, channel_id: str) -> bool:
        return self._catch_up.get(channel_id, False)

    def mode(self, channel_id: str) -> SyncMode:
        return SyncMode.CATCH_UP if self.is_catch_up(channel_id) else SyncMode.LIVE

    def progress(self, channel_id: str) -> int:
        """Distinct sequences accepted in the current catch-up episode."""
        return len(self._seen.get(channel_id, _EMPTY))

    def state(self, channel_id: str) -> Tuple[bool, FrozenSet[int]]:
        """Return (catch_up, seen_sequences) for the detector."""
        return self.is_catch_up(channel_id), self._seen.get(channel_id, _EMPTY)

    def update_seen(self, channel_id: str, seen: FrozenSet[int]) -> None:
        """Store the seen-set produced by an accepted catch-up event.

        Ignored for live channels so a stale decision cannot repopulate a
        set that disable_catch_up already released.
        """
        if self.is_catch_up(channel_id):
            self._seen[channel_id] = seen

    def remove(self, channel_id: str) -> None:
        self._catch_up.pop(channel_id, None)
        self._seen.pop(channel_id, None)

    def clear(self) -> None:
        self._catch_up.clear()
        self._seen.clear()
