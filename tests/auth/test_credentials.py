from __future__ import annotations

import asyncio
import json
from datetime import timedelta

import httpx
import pytest

from jirabridge.auth import CredentialManager, TokenCipher
from jirabridge.constants import StorageKeys
from jirabridge.contracts.connection import OAuthSettings
from jirabridge.contracts.exceptions import (
    ConfigurationError,
    CsrfError,
    NoAccessibleSiteError,
    NotConnectedError,
    ReauthRequiredError,
    RemoteApiError,
    StorageError,
)
from jirabridge.utils import utcnow
from tests.fakes.jira import CLOUD_ID, SITE_URL, FakeJira
from tests.fakes.seed import seed_connection, seed_settings
from tests.fakes.storage import MemoryStorage


async def _start_flow(credentials: CredentialManager, storage: MemoryStorage) -> str:
    await seed_settings(storage)
    await credentials.build_authorization_url()
    return storage.data[StorageKeys.OAUTH_STATE]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_masked_settings_hide_the_secret(credentials: CredentialManager) -> None:
    await credentials.save_settings(OAuthSettings(client_id="client-1", client_secret="top-secret"))

    masked = await credentials.get_masked_settings()

    assert masked.client_id == "client-1"
    assert masked.client_secret == "********"
    assert masked.has_secret is True
    assert "top-secret" not in masked.model_dump_json()


@pytest.mark.asyncio
async def test_is_configured_requires_id_and_secret(credentials: CredentialManager) -> None:
    assert await credentials.is_configured() is False
    await credentials.save_settings(OAuthSettings(client_id="client-1"))
    assert await credentials.is_configured() is False
    await credentials.save_settings(OAuthSettings(client_id="client-1", client_secret="s"))
    assert await credentials.is_configured() is True


# ---------------------------------------------------------------------------
# Authorization URL
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_authorization_url_carries_oauth_parameters(
    credentials: CredentialManager, storage: MemoryStorage
) -> None:
    await seed_settings(storage)

    url = httpx.URL(await credentials.build_authorization_url())

    assert url.host == "auth.atlassian.com"
    assert url.path == "/authorize"
    assert url.params["audience"] == "api.atlassian.com"
    assert url.params["client_id"] == "client-1"
    assert url.params["scope"] == "read:jira-work read:jira-user write:jira-work offline_access"
    assert url.params["redirect_uri"] == "http://localhost:19846/callback"
    assert url.params["response_type"] == "code"
    assert url.params["prompt"] == "consent"
    assert url.params["state"] == storage.data[StorageKeys.OAUTH_STATE]


@pytest.mark.asyncio
async def test_each_authorization_url_gets_a_fresh_nonce(
    credentials: CredentialManager, storage: MemoryStorage
) -> None:
    await seed_settings(storage)

    first = httpx.URL(await credentials.build_authorization_url()).params["state"]
    second = httpx.URL(await credentials.build_authorization_url()).params["state"]

    assert first != second
    assert storage.data[StorageKeys.OAUTH_STATE] == second


@pytest.mark.asyncio
async def test_authorization_url_requires_client_id(credentials: CredentialManager) -> None:
    with pytest.raises(ConfigurationError, match="client id"):
        await credentials.build_authorization_url()


# ---------------------------------------------------------------------------
# Callback
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_state_mismatch_is_rejected_before_any_token_call(
    credentials: CredentialManager, storage: MemoryStorage, fake_jira: FakeJira
) -> None:
    await _start_flow(credentials, storage)

    with pytest.raises(CsrfError):
        await credentials.complete_authorization("code-1", "forged-state")

    assert fake_jira.calls("POST", "/oauth/token") == []
    assert StorageKeys.OAUTH_STATE not in storage.data
    assert await credentials.is_connected() is False


@pytest.mark.asyncio
async def test_callback_without_pending_flow_is_rejected(
    credentials: CredentialManager, storage: MemoryStorage, fake_jira: FakeJira
) -> None:
    await seed_settings(storage)

    with pytest.raises(CsrfError):
        await credentials.complete_authorization("code-1", "any-state")

    assert fake_jira.requests == []


@pytest.mark.asyncio
async def test_nonce_cannot_be_replayed(
    credentials: CredentialManager, storage: MemoryStorage, fake_jira: FakeJira
) -> None:
    state = await _start_flow(credentials, storage)
    await credentials.complete_authorization("code-1", state)

    with pytest.raises(CsrfError):
        await credentials.complete_authorization("code-2", state)


@pytest.mark.asyncio
async def test_successful_callback_stores_encrypted_connection(
    credentials: CredentialManager, storage: MemoryStorage, cipher: TokenCipher, fake_jira: FakeJira
) -> None:
    state = await _start_flow(credentials, storage)

    result = await credentials.complete_authorization("code-1", state)

    assert result.site.id == CLOUD_ID
    assert result.site.url == SITE_URL
    stored = storage.data[StorageKeys.CONNECTION]
    assert stored["access_token"] != "access-1"
    assert cipher.decrypt(stored["access_token"]) == "access-1"
    assert cipher.decrypt(stored["refresh_token"]) == "refresh-1"
    assert await credentials.get_access_token() == "access-1"

    (token_call,) = fake_jira.calls("POST", "/oauth/token")
    body = json.loads(token_call.content)
    assert body["grant_type"] == "authorization_code"
    assert body["code"] == "code-1"
    assert body["redirect_uri"] == "http://localhost:19846/callback"


@pytest.mark.asyncio
async def test_callback_keeps_only_jira_sites(
    credentials: CredentialManager, storage: MemoryStorage, fake_jira: FakeJira
) -> None:
    fake_jira.sites = [
        {"id": "conf-1", "url": "https://wiki.example.com", "name": "wiki", "scopes": ["read:confluence-content.all"]},
        {"id": CLOUD_ID, "url": SITE_URL, "name": "acme", "scopes": ["read:jira-work"]},
    ]
    state = await _start_flow(credentials, storage)

    result = await credentials.complete_authorization("code-1", state)

    assert result.site.id == CLOUD_ID
    assert [site.id for site in result.sites] == [CLOUD_ID]


@pytest.mark.asyncio
async def test_callback_without_jira_site_fails(
    credentials: CredentialManager, storage: MemoryStorage, fake_jira: FakeJira
) -> None:
    fake_jira.sites = [{"id": "conf-1", "url": "https://wiki.example.com", "name": "wiki", "scopes": ["read:me"]}]
    state = await _start_flow(credentials, storage)

    with pytest.raises(NoAccessibleSiteError):
        await credentials.complete_authorization("code-1", state)

    assert await credentials.is_connected() is False


@pytest.mark.asyncio
async def test_failed_code_exchange_raises_remote_error(
    credentials: CredentialManager, storage: MemoryStorage, fake_jira: FakeJira
) -> None:
    fake_jira.token_status = 400
    state = await _start_flow(credentials, storage)

    with pytest.raises(RemoteApiError) as exc_info:
        await credentials.complete_authorization("code-1", state)

    assert exc_info.value.status == 400
    assert "invalid_grant" in exc_info.value.body


# ---------------------------------------------------------------------------
# Token lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_access_token_requires_connection(credentials: CredentialManager) -> None:
    with pytest.raises(NotConnectedError):
        await credentials.get_access_token()


@pytest.mark.asyncio
async def test_fresh_token_is_returned_without_refresh(
    credentials: CredentialManager, storage: MemoryStorage, cipher: TokenCipher, fake_jira: FakeJira
) -> None:
    await seed_connection(storage, cipher, expires_in=timedelta(hours=1))

    assert await credentials.get_access_token() == "access-0"
    assert fake_jira.refresh_count == 0


@pytest.mark.asyncio
async def test_token_near_expiry_is_refreshed_exactly_once(
    credentials: CredentialManager, storage: MemoryStorage, cipher: TokenCipher, fake_jira: FakeJira
) -> None:
    await seed_connection(storage, cipher, expires_in=timedelta(minutes=2))

    token = await credentials.get_access_token()

    assert token == "access-r1"
    assert fake_jira.refresh_count == 1
    connection = await credentials.get_connection()
    assert connection is not None
    assert cipher.decrypt(connection.refresh_token or "") == "refresh-r1"
    assert connection.token_expiry > utcnow() + timedelta(minutes=50)

    assert await credentials.get_access_token() == "access-r1"
    assert fake_jira.refresh_count == 1


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh(
    credentials: CredentialManager, storage: MemoryStorage, cipher: TokenCipher, fake_jira: FakeJira
) -> None:
    await seed_connection(storage, cipher, expires_in=timedelta(minutes=1))

    tokens = await asyncio.gather(*(credentials.get_access_token() for _ in range(5)))

    assert set(tokens) == {"access-r1"}
    assert fake_jira.refresh_count == 1


@pytest.mark.asyncio
async def test_refresh_without_rotation_keeps_refresh_token(
    credentials: CredentialManager, storage: MemoryStorage, cipher: TokenCipher, fake_jira: FakeJira
) -> None:
    fake_jira.rotate_refresh_token = False
    await seed_connection(storage, cipher, expires_in=timedelta(minutes=2))

    await credentials.get_access_token()

    connection = await credentials.get_connection()
    assert connection is not None
    assert cipher.decrypt(connection.refresh_token or "") == "refresh-0"


@pytest.mark.asyncio
async def test_failed_refresh_disconnects(
    credentials: CredentialManager, storage: MemoryStorage, cipher: TokenCipher, fake_jira: FakeJira
) -> None:
    fake_jira.refresh_status = 400
    await seed_connection(storage, cipher, expires_in=timedelta(minutes=2))

    with pytest.raises(ReauthRequiredError):
        await credentials.get_access_token()

    assert await credentials.is_connected() is False
    assert await credentials.get_connection_info() is None


@pytest.mark.asyncio
async def test_missing_refresh_token_requires_reauth(
    credentials: CredentialManager, storage: MemoryStorage, cipher: TokenCipher, fake_jira: FakeJira
) -> None:
    await seed_connection(storage, cipher, expires_in=timedelta(minutes=2), refresh_token=None)

    with pytest.raises(ReauthRequiredError):
        await credentials.get_access_token()

    assert fake_jira.refresh_count == 0
    assert await credentials.is_connected() is False


@pytest.mark.asyncio
async def test_token_encrypted_with_another_key_requires_reauth(
    credentials: CredentialManager, storage: MemoryStorage
) -> None:
    await seed_connection(storage, TokenCipher.generate())

    with pytest.raises(ReauthRequiredError):
        await credentials.get_access_token()

    assert await credentials.is_connected() is False


@pytest.mark.asyncio
async def test_naive_token_expiry_is_rejected_as_invalid_payload(
    credentials: CredentialManager, storage: MemoryStorage, cipher: TokenCipher
) -> None:
    await seed_connection(storage, cipher)
    storage.data[StorageKeys.CONNECTION]["token_expiry"] = "2030-01-01T10:00:00"

    with pytest.raises(StorageError, match="invalid connection payload"):
        await credentials.get_access_token()

    assert storage.data[StorageKeys.CONNECTION]["token_expiry"] == "2030-01-01T10:00:00"


@pytest.mark.asyncio
async def test_connection_info_omits_tokens(
    credentials: CredentialManager, storage: MemoryStorage, cipher: TokenCipher
) -> None:
    await seed_connection(storage, cipher)

    info = await credentials.get_connection_info()

    assert info is not None
    assert info.site_url == SITE_URL
    assert "access_token" not in info.model_dump()


@pytest.mark.asyncio
async def test_disconnect_clears_connection_and_state(
    credentials: CredentialManager, storage: MemoryStorage, cipher: TokenCipher
) -> None:
    await seed_connection(storage, cipher)
    await credentials.build_authorization_url()

    await credentials.disconnect()

    assert StorageKeys.CONNECTION not in storage.data
    assert StorageKeys.OAUTH_STATE not in storage.data
    assert await credentials.is_connected() is False
