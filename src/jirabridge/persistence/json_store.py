"""JSON-file backed :class:`~jirabridge.contracts.storage.Storage`."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

from jirabridge.contracts.exceptions import StorageError
from jirabridge.contracts.storage import Storage

logger = logging.getLogger(__name__)


class JsonFileStorage(Storage):
    """Stores every key in one JSON object on disk.

    Writes go through a temporary file and ``os.replace`` so a crash never
    leaves a half-written store behind. File I/O runs in a worker thread.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def get(self, key: str) -> Any:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            data[key] = value
            await asyncio.to_thread(self._write, data)

    async def delete(self, key: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            if key not in data:
                return
            del data[key]
            await asyncio.to_thread(self._write, data)

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            payload: Any = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"invalid store file: {self._path}") from exc
        if not isinstance(payload, dict):
            raise StorageError(f"invalid store file: {self._path}")
        return payload

    def _write(self, data: dict[str, Any]) -> None:
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StorageError(f"failed to persist store: {self._path}") from exc
        logger.debug("Wrote store %s", self._path)
