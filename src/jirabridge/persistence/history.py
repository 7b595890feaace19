"""Bounded audit log of sync attempts."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any

from pydantic import ValidationError

from jirabridge.constants import HISTORY_LIMIT, StorageKeys
from jirabridge.contracts.exceptions import StorageError
from jirabridge.contracts.storage import Storage
from jirabridge.contracts.sync import HistoryEntry, SyncDirection
from jirabridge.utils import utcnow

logger = logging.getLogger(__name__)


class SyncHistory:
    """Newest-first ring buffer of :class:`HistoryEntry` records.

    Once *capacity* entries are stored, each new record evicts the oldest one.
    """

    def __init__(self, storage: Storage, *, capacity: int = HISTORY_LIMIT) -> None:
        self._storage = storage
        self._capacity = capacity
        self._lock = asyncio.Lock()

    async def record(
        self,
        *,
        direction: SyncDirection,
        success: bool,
        local_id: str | None = None,
        remote_key: str | None = None,
        error: str | None = None,
        from_status: str | None = None,
        to_status: str | None = None,
    ) -> HistoryEntry:
        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            timestamp=utcnow(),
            direction=direction,
            local_id=local_id,
            remote_key=remote_key,
            success=success,
            error=error,
            from_status=from_status,
            to_status=to_status,
        )
        async with self._lock:
            entries = await self._load()
            entries.insert(0, entry)
            del entries[self._capacity :]
            await self._storage.set(StorageKeys.HISTORY, [item.model_dump(mode="json") for item in entries])
        return entry

    async def list(self, limit: int = 20) -> list[HistoryEntry]:
        entries = await self._load()
        return entries[: max(0, limit)]

    async def clear(self) -> None:
        async with self._lock:
            await self._storage.delete(StorageKeys.HISTORY)
        logger.info("Sync history cleared")

    async def _load(self) -> list[HistoryEntry]:
        raw: Any = await self._storage.get(StorageKeys.HISTORY) or []
        try:
            return [HistoryEntry.model_validate(item) for item in raw]
        except (TypeError, ValidationError) as exc:
            raise StorageError("invalid sync history payload") from exc
