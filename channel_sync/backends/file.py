"""File-system key-value backend.

Each key is stored as ``<directory>/<key>.json``. Writes go to a temporary
file in the same directory and are moved into place with ``os.replace``, so
a reader sees either the previous blob or the new one, never a torn write.
"""

import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Union

from .base import KeyValueStore


class FileKeyValueStore(KeyValueStore):
    """Store blobs as files in a directory.

    Attributes:
        directory: Where blob files live (created on first write)
    """

    SUFFIX = ".json"

    def __init__(self, directory: Union[str, Path]):
        super().__init__()
        self.directory = Path(directory)
        self._lock = threading.Lock()

    def _path_for(self, key: str) -> Path:
        error = self.validate_key(key)
        if error:
            raise ValueError(error)
        return self.directory / f"{key}{self.SUFFIX}"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        with self._lock:
            if not path.exists():
                return None
            return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        path = self._path_for(key)
        with self._lock:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=".tmp", dir=self.directory
            )
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(value)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except OSError:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
                raise
            self.logger.debug(f"Wrote {len(value)} bytes to {path}")

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                pass

    def is_available(self) -> bool:
        if self.directory.exists():
            return self.directory.is_dir() and os.access(self.directory, os.W_OK)
        parent = self.directory.parent
        while not parent.exists() and parent != parent.parent:
            parent = parent.parent
        return os.access(parent, os.W_OK)

    def describe(self) -> str:
        return f"file ({self.directory})"
