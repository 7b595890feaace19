"""Exception hierarchy for jirabridge.

All jirabridge exceptions inherit from :class:`JiraBridgeError`, so callers can
catch any library error with a single ``except`` clause while still handling
specific failure modes.

Expected steady-state outcomes of a sync (an unlinked task, a column with no
status rule, an unreachable workflow status) are *not* exceptions; they are
reported through :class:`~jirabridge.contracts.sync.PushResult`.
"""

from __future__ import annotations


class JiraBridgeError(Exception):
    """Base exception for all jirabridge errors."""


class ConfigurationError(JiraBridgeError):
    """OAuth credentials or sync configuration are missing or invalid."""


class StorageError(JiraBridgeError):
    """The key-value store could not be read or written."""


class AuthenticationError(JiraBridgeError):
    """Base class for OAuth and connection failures."""


class CsrfError(AuthenticationError):
    """The OAuth callback ``state`` does not match the persisted nonce."""


class NoAccessibleSiteError(AuthenticationError):
    """The token is valid but grants access to no Jira site."""


class NotConnectedError(AuthenticationError):
    """No Jira connection has been established."""


class ReauthRequiredError(AuthenticationError):
    """The stored credentials are unusable; the user must authorize again."""


class RemoteApiError(JiraBridgeError):
    """The remote API answered with a non-2xx status or a body that cannot be read.

    Attributes:
        status: HTTP status code.
        body: Raw response body, kept for logs and diagnostics.
    """

    def __init__(self, status: int, body: str, *, message: str | None = None) -> None:
        self.status = status
        self.body = body
        super().__init__(message or f"Jira API error: {status}")
