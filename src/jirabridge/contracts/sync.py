"""Sync contracts: mappings, status rules, history and engine results."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from jirabridge.contracts.issue import Issue


class SyncDirection(StrEnum):
    PUSH = "push"
    PULL = "pull"
    BOTH = "both"


class PushSkipReason(StrEnum):
    """Soft push outcomes that are not errors."""

    NOT_LINKED = "not-linked"
    NO_MAPPING = "no-mapping"
    NO_TRANSITION = "no-transition"


class Mapping(BaseModel):
    """Binds one local task to one Jira issue."""

    local_id: str
    remote_key: str
    remote_id: str
    remote_status: str | None = None
    last_synced_at: datetime
    direction: SyncDirection = SyncDirection.BOTH


class StatusRule(BaseModel):
    remote_status_id: str | None = None
    remote_status_name: str | None = None
    remote_category: str | None = None
    local_column: str


class SyncConfig(BaseModel):
    project_key: str | None = None
    extra_filter: str = ""
    push_enabled: bool = False
    poll_enabled: bool = False
    poll_interval_minutes: float = Field(default=5, gt=0)
    status_rules: list[StatusRule] = Field(default_factory=list)


class HistoryEntry(BaseModel):
    id: str
    timestamp: datetime
    direction: SyncDirection
    local_id: str | None = None
    remote_key: str | None = None
    success: bool
    error: str | None = None
    from_status: str | None = None
    to_status: str | None = None

    model_config = {"frozen": True}


class SyncState(BaseModel):
    last_sync: datetime | None = None
    in_progress: bool = False
    last_error: str | None = None


class PushResult(BaseModel):
    synced: bool
    reason: str | None = None
    remote_key: str | None = None
    available_transitions: list[str] | None = None


class PullUpdate(BaseModel):
    """A detected remote status change awaiting the caller's confirmation."""

    local_id: str
    remote_key: str
    previous_status: str | None
    new_status: str | None
    suggested_column: str
    issue: Issue


class PullResult(BaseModel):
    updates: list[PullUpdate] = Field(default_factory=list)
    checked: int = 0
    error: str | None = None
