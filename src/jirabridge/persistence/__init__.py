"""Persistence helpers layered on the key-value :class:`Storage` contract."""

from jirabridge.persistence.config import ConfigStore
from jirabridge.persistence.history import SyncHistory
from jirabridge.persistence.json_store import JsonFileStorage
from jirabridge.persistence.mappings import MappingStore

__all__ = ["ConfigStore", "JsonFileStorage", "MappingStore", "SyncHistory"]
