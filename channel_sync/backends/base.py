"""Abstract base class for key-value backends.

A backend is the durable target for the persisted sync blob. It only moves
bytes; encoding and write scheduling belong to the PersistenceScheduler.
"""

from abc import ABC, abstractmethod
from typing import Optional
import logging


class KeyValueStore(ABC):
    """Abstract base class for key-value backends.

    Implementations must be safe to call from the scheduler's worker thread
    and from callers of force_flush at the same time.

    Example:
        class RedisStore(KeyValueStore):
            def get(self, key):
                return self.client.get(key)
            # ... implement other methods
    """

    def __init__(self):
        """Initialize the backend with a logger."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Read a blob.

        Args:
            key: Blob identifier

        Returns:
            bytes: Stored value, or None if the key is absent

        Raises:
            OSError: If the underlying storage cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Write a blob, replacing any previous value.

        Raises:
            OSError: If the underlying storage cannot be written
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a blob. Deleting a missing key is not an error.

        Raises:
            OSError: If the underlying storage cannot be modified
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the backend can currently store data."""
        pass

    @abstractmethod
    def describe(self) -> str:
        """Human-readable description, used in logs and CLI output."""
        pass

    def validate_key(self, key: str) -> Optional[str]:
        """Validate a blob key.

        Returns:
            str: Error message if invalid, None if valid
        """
        if not key:
            return "key is required"
        if "/" in key or "\\" in key or key in (".", ".."):
            return f"key cannot contain path separators: {key!r}"
        return None
