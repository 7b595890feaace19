"""Sync engine and scheduler."""

from jirabridge.engine.engine import SyncEngine
from jirabridge.engine.scheduler import AutoSyncScheduler

__all__ = ["AutoSyncScheduler", "SyncEngine"]
