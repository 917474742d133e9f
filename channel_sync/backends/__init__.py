"""Key-value backends for the persisted sync blob.

Available backends:
    - MemoryKeyValueStore: in-process dictionary
    - FileKeyValueStore: one JSON file per key in a directory

Usage:
    from channel_sync.backends import get_backend

    backend = get_backend("file", path="./state")
    backend.set("channel_sync_states", b"{}")
"""

from pathlib import Path
from typing import Optional, Type, Union

from .base import KeyValueStore
from .file import FileKeyValueStore
from .memory import MemoryKeyValueStore


def get_backend(
    kind: str = "memory",
    path: Optional[Union[str, Path]] = None,
) -> KeyValueStore:
    """Build a backend by name.

    Args:
        kind: "memory" or "file"
        path: Directory for the file backend

    Returns:
        KeyValueStore: Backend instance

    Raises:
        ValueError: If the file backend is requested without a path
        NotImplementedError: If kind is not supported
    """
    backend_class = get_backend_class(kind)
    if backend_class is FileKeyValueStore:
        if path is None:
            raise ValueError("The file backend requires a path")
        return FileKeyValueStore(path)
    return backend_class()


def get_backend_class(kind: str) -> Type[KeyValueStore]:
    """Get the backend class for a backend name.

    Raises:
        NotImplementedError: If kind is not supported
    """
    kind = kind.lower()
    if kind == "memory":
        return MemoryKeyValueStore
    elif kind == "file":
        return FileKeyValueStore
    else:
        raise NotImplementedError(
            f"Backend '{kind}' is not supported. "
            f"Supported backends: memory, file"
        )


__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "get_backend",
    "get_backend_class",
]
