"""The local-task ↔ Jira-issue mapping table."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from jirabridge.constants import StorageKeys
from jirabridge.contracts.exceptions import StorageError
from jirabridge.contracts.issue import Issue
from jirabridge.contracts.storage import Storage
from jirabridge.contracts.sync import Mapping, SyncDirection
from jirabridge.utils import utcnow

logger = logging.getLogger(__name__)


class MappingStore:
    """Persists :class:`Mapping` rows keyed by local task id.

    A local id maps to at most one Jira key. The same Jira key may be linked
    from several local tasks.
    """

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._lock = asyncio.Lock()

    async def all(self) -> dict[str, Mapping]:
        raw: Any = await self._storage.get(StorageKeys.MAPPINGS) or {}
        try:
            return {local_id: Mapping.model_validate(row) for local_id, row in raw.items()}
        except (AttributeError, ValidationError) as exc:
            raise StorageError("invalid mappings payload") from exc

    async def get(self, local_id: str) -> Mapping | None:
        return (await self.all()).get(local_id)

    async def remote_keys(self) -> list[str]:
        return list(dict.fromkeys(mapping.remote_key for mapping in (await self.all()).values()))

    async def by_remote_key(self) -> dict[str, list[Mapping]]:
        grouped: dict[str, list[Mapping]] = {}
        for mapping in (await self.all()).values():
            grouped.setdefault(mapping.remote_key, []).append(mapping)
        return grouped

    async def save(self, local_id: str, issue: Issue) -> Mapping:
        mapping = Mapping(
            local_id=local_id,
            remote_key=issue.key,
            remote_id=issue.id,
            remote_status=issue.status.name,
            last_synced_at=utcnow(),
            direction=SyncDirection.BOTH,
        )
        async with self._lock:
            mappings = await self.all()
            mappings[local_id] = mapping
            await self._persist(mappings)
        logger.info("Mapped task %s -> %s", local_id, issue.key)
        return mapping

    async def update_status(self, local_id: str, remote_status: str | None) -> Mapping | None:
        async with self._lock:
            mappings = await self.all()
            current = mappings.get(local_id)
            if current is None:
                return None
            updated = current.model_copy(update={"remote_status": remote_status, "last_synced_at": utcnow()})
            mappings[local_id] = updated
            await self._persist(mappings)
        return updated

    async def remove(self, local_id: str) -> Mapping | None:
        async with self._lock:
            mappings = await self.all()
            removed = mappings.pop(local_id, None)
            if removed is None:
                return None
            await self._persist(mappings)
        logger.info("Removed mapping for task %s", local_id)
        return removed

    async def _persist(self, mappings: dict[str, Mapping]) -> None:
        payload = {local_id: mapping.model_dump(mode="json") for local_id, mapping in mappings.items()}
        await self._storage.set(StorageKeys.MAPPINGS, payload)
