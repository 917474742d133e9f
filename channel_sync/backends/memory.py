"""In-process key-value backend.

Nothing survives the process; useful as the default store and in tests.
"""

import threading
from typing import Dict, Optional

from .base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store guarded by a lock."""

    def __init__(self):
        super().__init__()
        self._data: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        error = self.validate_key(key)
        if error:
            raise ValueError(error)
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def is_available(self) -> bool:
        return True

    def describe(self) -> str:
        with self._lock:
            return f"memory ({len(self._data)} keys)"
