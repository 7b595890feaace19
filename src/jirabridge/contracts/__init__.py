"""Public contracts for jirabridge."""

from jirabridge.contracts.connection import (
    AccessibleSite,
    AuthorizationResult,
    Connection,
    ConnectionInfo,
    MaskedSettings,
    OAuthSettings,
)
from jirabridge.contracts.exceptions import (
    AuthenticationError,
    ConfigurationError,
    CsrfError,
    JiraBridgeError,
    NoAccessibleSiteError,
    NotConnectedError,
    ReauthRequiredError,
    RemoteApiError,
    StorageError,
)
from jirabridge.contracts.importing import ImportBatch, ImportPreview, ImportResult, TaskDraft
from jirabridge.contracts.issue import (
    Assignee,
    Issue,
    IssueType,
    Priority,
    Project,
    RemoteStatus,
    SearchPage,
    Transition,
)
from jirabridge.contracts.storage import Storage
from jirabridge.contracts.sync import (
    HistoryEntry,
    Mapping,
    PullResult,
    PullUpdate,
    PushResult,
    PushSkipReason,
    StatusRule,
    SyncConfig,
    SyncDirection,
    SyncState,
)
from jirabridge.contracts.tasks import TaskStore

__all__ = [
    "AccessibleSite",
    "Assignee",
    "AuthenticationError",
    "AuthorizationResult",
    "ConfigurationError",
    "Connection",
    "ConnectionInfo",
    "CsrfError",
    "HistoryEntry",
    "ImportBatch",
    "ImportPreview",
    "ImportResult",
    "Issue",
    "IssueType",
    "JiraBridgeError",
    "Mapping",
    "MaskedSettings",
    "NoAccessibleSiteError",
    "NotConnectedError",
    "OAuthSettings",
    "Priority",
    "Project",
    "PullResult",
    "PullUpdate",
    "PushResult",
    "PushSkipReason",
    "ReauthRequiredError",
    "RemoteApiError",
    "RemoteStatus",
    "SearchPage",
    "StatusRule",
    "Storage",
    "StorageError",
    "SyncConfig",
    "SyncDirection",
    "SyncState",
    "TaskDraft",
    "TaskStore",
    "Transition",
]
