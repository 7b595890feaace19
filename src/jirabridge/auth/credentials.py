"""OAuth 2.0 (3LO) flow and token lifecycle for one Jira Cloud connection.

See https://developer.atlassian.com/cloud/jira/platform/oauth-2-3lo-apps/.
"""

from __future__ import annotations

import asyncio
import hmac
import logging
import secrets
from datetime import timedelta
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from jirabridge.auth.cipher import TokenCipher
from jirabridge.constants import (
    ACCESSIBLE_RESOURCES_URL,
    AUDIENCE,
    AUTH_URL,
    OAUTH_SCOPES,
    TOKEN_REFRESH_WINDOW_SECONDS,
    TOKEN_URL,
    StorageKeys,
)
from jirabridge.contracts.connection import (
    AccessibleSite,
    AuthorizationResult,
    Connection,
    ConnectionInfo,
    MaskedSettings,
    OAuthSettings,
)
from jirabridge.contracts.exceptions import (
    ConfigurationError,
    CsrfError,
    NoAccessibleSiteError,
    NotConnectedError,
    ReauthRequiredError,
    RemoteApiError,
    StorageError,
)
from jirabridge.contracts.storage import Storage
from jirabridge.persistence.config import ConfigStore
from jirabridge.utils import utcnow

logger = logging.getLogger(__name__)

_MASK = "********"


class _TokenResponse(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_in: int = 3600


class CredentialManager:
    """Owns the authorization-code flow, token storage and token refresh.

    Tokens are persisted encrypted with *cipher*. A failed refresh tears the
    connection down, because a dead refresh token cannot be recovered without
    the user authorizing again.

    Args:
        storage: Key-value store for settings, connection and OAuth state.
        cipher: Token encryption at rest.
        http_client: Client used for the token and accessible-resources calls.
    """

    def __init__(self, storage: Storage, cipher: TokenCipher, http_client: httpx.AsyncClient) -> None:
        self._storage = storage
        self._cipher = cipher
        self._http = http_client
        self._config = ConfigStore(storage)
        self._refresh_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def get_settings(self) -> OAuthSettings:
        return await self._config.load_settings()

    async def save_settings(self, settings: OAuthSettings) -> None:
        await self._config.save_settings(settings)
        logger.info("OAuth settings saved")

    async def get_masked_settings(self) -> MaskedSettings:
        settings = await self.get_settings()
        return MaskedSettings(
            client_id=settings.client_id,
            client_secret=_MASK if settings.client_secret else "",
            redirect_uri=settings.redirect_uri,
            has_secret=bool(settings.client_secret),
        )

    async def is_configured(self) -> bool:
        return (await self.get_settings()).is_complete

    # ------------------------------------------------------------------
    # Authorization flow
    # ------------------------------------------------------------------

    async def build_authorization_url(self) -> str:
        settings = await self.get_settings()
        if not settings.client_id:
            raise ConfigurationError("OAuth client id not configured")

        state = secrets.token_urlsafe(32)
        await self._storage.set(StorageKeys.OAUTH_STATE, state)

        url = httpx.URL(
            AUTH_URL,
            params={
                "audience": AUDIENCE,
                "client_id": settings.client_id,
                "scope": " ".join(OAUTH_SCOPES),
                "redirect_uri": settings.redirect_uri,
                "response_type": "code",
                "prompt": "consent",
                "state": state,
            },
        )
        return str(url)

    async def complete_authorization(self, code: str, returned_state: str) -> AuthorizationResult:
        """Exchange *code* for tokens and persist the first reachable Jira site.

        Raises:
            CsrfError: *returned_state* does not match the persisted nonce.
            ConfigurationError: Client id or secret is missing.
            RemoteApiError: The token or resources endpoint failed.
            NoAccessibleSiteError: The token reaches no Jira site.
        """
        saved_state: Any = await self._storage.get(StorageKeys.OAUTH_STATE)
        await self._storage.delete(StorageKeys.OAUTH_STATE)
        if not isinstance(saved_state, str) or not hmac.compare_digest(
            saved_state.encode("utf-8"), returned_state.encode("utf-8")
        ):
            logger.warning("OAuth state mismatch - aborting authorization")
            raise CsrfError("Invalid OAuth state - possible CSRF attack")

        settings = await self.get_settings()
        if not settings.is_complete:
            raise ConfigurationError("OAuth client id and secret must be configured")

        response = await self._http.post(
            TOKEN_URL,
            json={
                "grant_type": "authorization_code",
                "client_id": settings.client_id,
                "client_secret": settings.client_secret,
                "code": code,
                "redirect_uri": settings.redirect_uri,
            },
        )
        if not response.is_success:
            logger.error("Token exchange failed: %s %s", response.status_code, response.text)
            raise RemoteApiError(
                response.status_code,
                response.text,
                message=f"Failed to exchange code for tokens: {response.status_code}",
            )
        tokens = self._parse_tokens(response)
        logger.info("Obtained access tokens")

        sites = await self.get_accessible_resources(tokens.access_token)
        if not sites:
            raise NoAccessibleSiteError("No accessible Jira sites found")

        site = sites[0]
        now = utcnow()
        connection = Connection(
            cloud_id=site.id,
            site_url=site.url,
            site_name=site.name,
            access_token=self._cipher.encrypt(tokens.access_token),
            refresh_token=self._cipher.encrypt(tokens.refresh_token) if tokens.refresh_token else None,
            token_expiry=now + timedelta(seconds=tokens.expires_in),
            connected_at=now,
        )
        await self._save_connection(connection)
        logger.info("Connected to Jira site: %s (%s)", site.name, site.url)
        return AuthorizationResult(site=site, sites=sites)

    async def get_accessible_resources(self, access_token: str) -> list[AccessibleSite]:
        """Sites the token can reach, restricted to those with a Jira scope."""
        response = await self._http.get(
            ACCESSIBLE_RESOURCES_URL,
            headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
        )
        if not response.is_success:
            raise RemoteApiError(
                response.status_code,
                response.text,
                message="Failed to get accessible Jira sites",
            )
        try:
            resources = [AccessibleSite.model_validate(item) for item in response.json()]
        except (TypeError, ValueError) as exc:
            raise RemoteApiError(response.status_code, response.text, message="Malformed accessible-resources") from exc
        return [site for site in resources if any("jira" in scope for scope in site.scopes)]

    # ------------------------------------------------------------------
    # Token lifecycle
    # ------------------------------------------------------------------

    async def get_access_token(self) -> str:
        """Return a usable access token, refreshing it first when close to expiry."""
        connection = await self._require_connection()
        if not self._expires_soon(connection):
            return await self._decrypt(connection.access_token)

        async with self._refresh_lock:
            connection = await self._require_connection()
            if not self._expires_soon(connection):
                return await self._decrypt(connection.access_token)
            logger.info("Token expiring soon, refreshing")
            return await self._refresh(connection)

    async def refresh(self) -> str:
        async with self._refresh_lock:
            connection = await self._require_connection()
            return await self._refresh(connection)

    async def _refresh(self, connection: Connection) -> str:
        if not connection.refresh_token:
            await self.disconnect()
            raise ReauthRequiredError("No refresh token available - please reconnect to Jira")

        settings = await self.get_settings()
        refresh_token = await self._decrypt(connection.refresh_token)
        response = await self._http.post(
            TOKEN_URL,
            json={
                "grant_type": "refresh_token",
                "client_id": settings.client_id,
                "client_secret": settings.client_secret,
                "refresh_token": refresh_token,
            },
        )
        if not response.is_success:
            logger.error("Token refresh failed (%s) - user needs to reconnect", response.status_code)
            await self.disconnect()
            raise ReauthRequiredError("Token refresh failed - please reconnect to Jira")

        tokens = self._parse_tokens(response)
        updated = connection.model_copy(
            update={
                "access_token": self._cipher.encrypt(tokens.access_token),
                "refresh_token": (
                    self._cipher.encrypt(tokens.refresh_token) if tokens.refresh_token else connection.refresh_token
                ),
                "token_expiry": utcnow() + timedelta(seconds=tokens.expires_in),
            }
        )
        await self._save_connection(updated)
        logger.info("Access token refreshed")
        return tokens.access_token

    # ------------------------------------------------------------------
    # Connection state
    # ------------------------------------------------------------------

    async def get_connection(self) -> Connection | None:
        raw: Any = await self._storage.get(StorageKeys.CONNECTION)
        if raw is None:
            return None
        try:
            return Connection.model_validate(raw)
        except ValidationError as exc:
            raise StorageError("invalid connection payload") from exc

    async def is_connected(self) -> bool:
        connection = await self.get_connection()
        return connection is not None and bool(connection.access_token and connection.cloud_id)

    async def get_connection_info(self) -> ConnectionInfo | None:
        connection = await self.get_connection()
        if connection is None:
            return None
        return ConnectionInfo(
            cloud_id=connection.cloud_id,
            site_url=connection.site_url,
            site_name=connection.site_name,
            connected_at=connection.connected_at,
            token_expiry=connection.token_expiry,
        )

    async def disconnect(self) -> None:
        await self._storage.delete(StorageKeys.CONNECTION)
        await self._storage.delete(StorageKeys.OAUTH_STATE)
        logger.info("Disconnected from Jira")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_connection(self) -> Connection:
        connection = await self.get_connection()
        if connection is None:
            raise NotConnectedError("Not connected to Jira")
        return connection

    async def _save_connection(self, connection: Connection) -> None:
        await self._storage.set(StorageKeys.CONNECTION, connection.model_dump(mode="json"))

    async def _decrypt(self, value: str) -> str:
        try:
            return self._cipher.decrypt(value)
        except ReauthRequiredError:
            await self.disconnect()
            raise

    @staticmethod
    def _expires_soon(connection: Connection) -> bool:
        return connection.token_expiry < utcnow() + timedelta(seconds=TOKEN_REFRESH_WINDOW_SECONDS)

    @staticmethod
    def _parse_tokens(response: httpx.Response) -> _TokenResponse:
        try:
            return _TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise RemoteApiError(response.status_code, response.text, message="Malformed token response") from exc
