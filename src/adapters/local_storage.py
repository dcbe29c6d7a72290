"""Device-local key/value storage on a JSON file.

Why a single JSON file:
- The session is a handful of strings (token + cached profile).
- Writes go to a temp file in the same directory and are swapped in with
  `os.replace`, so a crash leaves either the old or the new file, never half.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path

from core.domain.errors import StorageError


class FileKeyValueStore:
    """`core.interfaces.storage.KeyValueStore` backed by one JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def get_item(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read)
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            data[key] = value
            await asyncio.to_thread(self._write, data)

    async def remove_items(self, keys: list[str]) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            if not any(k in data for k in keys):
                return
            for key in keys:
                data.pop(key, None)
            await asyncio.to_thread(self._write, data)

    def _read(self) -> dict[str, object]:
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"cannot read {self._path}: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise StorageError(f"corrupt storage file {self._path}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"unexpected storage layout in {self._path}")
        return data

    def _write(self, data: dict[str, object]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".storage-", suffix=".tmp", dir=self._path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, ensure_ascii=False, indent=2, sort_keys=True)
                    fh.write("\n")
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"cannot write {self._path}: {exc}") from exc
