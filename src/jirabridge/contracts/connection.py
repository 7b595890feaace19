"""OAuth settings and connection contracts."""

from __future__ import annotations

from pydantic import AwareDatetime, BaseModel, Field

from jirabridge.constants import DEFAULT_REDIRECT_URI


class OAuthSettings(BaseModel):
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = DEFAULT_REDIRECT_URI

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id and self.client_secret)


class MaskedSettings(BaseModel):
    """Display-safe view of :class:`OAuthSettings`."""

    client_id: str
    client_secret: str
    redirect_uri: str
    has_secret: bool


class Connection(BaseModel):
    """The single persisted binding to one Jira Cloud site.

    ``access_token`` and ``refresh_token`` hold ciphertext produced by
    :class:`~jirabridge.auth.cipher.TokenCipher`, never plaintext.
    """

    cloud_id: str
    site_url: str
    site_name: str
    access_token: str
    refresh_token: str | None = None
    token_expiry: AwareDatetime
    connected_at: AwareDatetime


class ConnectionInfo(BaseModel):
    cloud_id: str
    site_url: str
    site_name: str
    connected_at: AwareDatetime
    token_expiry: AwareDatetime


class AccessibleSite(BaseModel):
    id: str
    url: str
    name: str
    scopes: list[str] = Field(default_factory=list)


class AuthorizationResult(BaseModel):
    site: AccessibleSite
    sites: list[AccessibleSite]
