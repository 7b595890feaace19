"""Public API surface for jirabridge."""

__version__ = "0.1.0"

from jirabridge.auth import CredentialManager, TokenCipher
from jirabridge.client import TrackerClient, adf_to_text, create_http_client
from jirabridge.contracts.connection import AuthorizationResult, ConnectionInfo, OAuthSettings
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
from jirabridge.contracts.issue import Issue, Project, RemoteStatus, Transition
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
    SyncState,
)
from jirabridge.contracts.tasks import TaskStore
from jirabridge.engine import AutoSyncScheduler, SyncEngine
from jirabridge.importer import ImportPipeline, ImportProgress
from jirabridge.persistence import ConfigStore, JsonFileStorage, MappingStore, SyncHistory
from jirabridge.sdk import JiraConnector

__all__ = [
    "AuthenticationError",
    "AuthorizationResult",
    "AutoSyncScheduler",
    "ConfigStore",
    "ConfigurationError",
    "ConnectionInfo",
    "CredentialManager",
    "CsrfError",
    "HistoryEntry",
    "ImportBatch",
    "ImportPipeline",
    "ImportPreview",
    "ImportProgress",
    "ImportResult",
    "Issue",
    "JiraBridgeError",
    "JiraConnector",
    "JsonFileStorage",
    "Mapping",
    "MappingStore",
    "NoAccessibleSiteError",
    "NotConnectedError",
    "OAuthSettings",
    "Project",
    "PullResult",
    "PullUpdate",
    "PushResult",
    "PushSkipReason",
    "ReauthRequiredError",
    "RemoteApiError",
    "RemoteStatus",
    "StatusRule",
    "Storage",
    "StorageError",
    "SyncConfig",
    "SyncEngine",
    "SyncHistory",
    "SyncState",
    "TaskDraft",
    "TaskStore",
    "TokenCipher",
    "TrackerClient",
    "Transition",
    "__version__",
    "adf_to_text",
    "create_http_client",
]
