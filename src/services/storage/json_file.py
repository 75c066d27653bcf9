"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON object on disk mapping key -> serialized
value. This is the local stand-in for a mobile app's AsyncStorage:
1. No database setup required
2. The file is human-readable for debugging
3. Keys and values keep the exact format other clients expect

TRADEOFFS:
- Every operation reads the whole file (fine for one user's data)
- No transactions across keys (deposits handle this with a pending marker)

Writes go to a temporary file that then replaces the original, so a crash
mid-write leaves the previous contents intact.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from src.services.storage.interface import KeyValueStoreInterface, StorageError


class JsonFileKeyValueStore(KeyValueStoreInterface):
    """
    File-backed key-value store.

    Blocking file I/O runs in a worker thread so the event loop keeps
    serving other screens. A lock keeps read-modify-write cycles on the
    file from interleaving.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Load the whole store. A missing file is an empty store."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as e:
            raise StorageError(f"Store file {self._path} is corrupt: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read store {self._path}: {e}")

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Store file {self._path} is corrupt: {e}")

        if not isinstance(data, dict):
            raise StorageError(f"Store file {self._path} does not hold a JSON object")

        bad_keys = [key for key, value in data.items() if not isinstance(value, str)]
        if bad_keys:
            raise StorageError(
                f"Store file {self._path} is corrupt: non-string values under {bad_keys}"
            )
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        """Atomically replace the store file."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    json.dump(data, tmp, ensure_ascii=False, indent=2)
                    tmp.flush()
                    os.fsync(tmp.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write store {self._path}: {e}")

    def _set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    async def get_item(self, key: str) -> Optional[str]:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
        return data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._set, key, value)

    async def remove_item(self, key: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._remove, key)
