"""Persisted OAuth settings, sync configuration and sync state."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from jirabridge.constants import StorageKeys
from jirabridge.contracts.connection import OAuthSettings
from jirabridge.contracts.exceptions import ConfigurationError
from jirabridge.contracts.storage import Storage
from jirabridge.contracts.sync import StatusRule, SyncConfig, SyncState

ModelT = TypeVar("ModelT", bound=BaseModel)


class ConfigStore:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    async def load_settings(self) -> OAuthSettings:
        return await self._load(StorageKeys.SETTINGS, OAuthSettings)

    async def save_settings(self, settings: OAuthSettings) -> None:
        await self._storage.set(StorageKeys.SETTINGS, settings.model_dump(mode="json"))

    async def load_sync_config(self) -> SyncConfig:
        return await self._load(StorageKeys.CONFIG, SyncConfig)

    async def save_sync_config(self, config: SyncConfig) -> None:
        await self._storage.set(StorageKeys.CONFIG, config.model_dump(mode="json"))

    async def save_status_rules(self, rules: list[StatusRule]) -> SyncConfig:
        config = await self.load_sync_config()
        updated = config.model_copy(update={"status_rules": list(rules)})
        await self.save_sync_config(updated)
        return updated

    async def load_sync_state(self) -> SyncState:
        return await self._load(StorageKeys.SYNC_STATE, SyncState)

    async def update_sync_state(self, **changes: Any) -> SyncState:
        current = await self.load_sync_state()
        updated = current.model_copy(update=changes)
        await self._storage.set(StorageKeys.SYNC_STATE, updated.model_dump(mode="json"))
        return updated

    async def _load(self, key: str, model: type[ModelT]) -> ModelT:
        raw: Any = await self._storage.get(key)
        if raw is None:
            return model()
        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            raise ConfigurationError(f"invalid {key}: {exc}") from exc
