"""
Local Blob Storage Implementations

DESIGN DECISION: The whole global state lives in one JSON file per key.
Each write replaces the file through a temporary sibling and an atomic
rename, so a crash mid-write leaves the previous blob intact.

TRADEOFFS:
- Every mutation rewrites the full blob (fine for one household)
- No locking between processes (one process owns the state)
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from pantry_ledger.services.storage.interface import (
    BlobStorageInterface,
    StorageError,
)


_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class JsonFileBlobStorage(BlobStorageInterface):
    """Stores each key as ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir: str):
        self._dir = Path(data_dir)

    def _path_for(self, key: str) -> Path:
        return self._dir / f"{_SAFE_KEY.sub('_', key)}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}")

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}")


class InMemoryBlobStorage(BlobStorageInterface):
    """Dictionary-backed store for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._blobs: dict[str, str] = dict(initial or {})
        self.write_count = 0

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, value: str) -> None:
        self._blobs[key] = value
        self.write_count += 1

    def delete(self, key: str) -> bool:
        return self._blobs.pop(key, None) is not None
