"""Fixed endpoints, scopes and lookup tables for Jira Cloud."""

from __future__ import annotations

from typing import Final

AUTH_URL: Final = "https://auth.atlassian.com/authorize"
TOKEN_URL: Final = "https://auth.atlassian.com/oauth/token"
API_URL: Final = "https://api.atlassian.com"
ACCESSIBLE_RESOURCES_URL: Final = f"{API_URL}/oauth/token/accessible-resources"
AUDIENCE: Final = "api.atlassian.com"

OAUTH_SCOPES: Final = (
    "read:jira-work",
    "read:jira-user",
    "write:jira-work",
    # Required for a refresh token.
    "offline_access",
)

DEFAULT_REDIRECT_URI: Final = "http://localhost:19846/callback"

# Refresh when the access token expires within this many seconds.
TOKEN_REFRESH_WINDOW_SECONDS: Final = 5 * 60

# Largest page the search endpoint honours.
MAX_SEARCH_PAGE_SIZE: Final = 100

DEFAULT_SEARCH_FIELDS: Final = (
    "summary",
    "description",
    "status",
    "priority",
    "assignee",
    "labels",
    "created",
    "updated",
    "issuetype",
)

HISTORY_LIMIT: Final = 100

# Jira status category key -> local column.
CATEGORY_COLUMNS: Final[dict[str, str]] = {
    "new": "backlog",
    "indeterminate": "doing",
    "done": "done",
}
DEFAULT_COLUMN: Final = "backlog"

# Jira priority name -> local priority.
PRIORITY_MAPPING: Final[dict[str, str]] = {
    "Highest": "critical",
    "High": "high",
    "Medium": "medium",
    "Low": "low",
    "Lowest": "low",
}
DEFAULT_PRIORITY: Final = "medium"

IMPORT_TAG: Final = "jira"


class StorageKeys:
    SETTINGS: Final = "settings"
    CONNECTION: Final = "connection"
    OAUTH_STATE: Final = "oauth_state"
    CONFIG: Final = "config"
    MAPPINGS: Final = "mappings"
    HISTORY: Final = "syncHistory"
    SYNC_STATE: Final = "syncState"
