"""Shared test fixtures for jirabridge tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio

from jirabridge.auth import CredentialManager, TokenCipher
from jirabridge.client import TrackerClient, create_http_client
from jirabridge.persistence import ConfigStore, MappingStore, SyncHistory
from jirabridge.sdk import JiraConnector
from tests.fakes.jira import FakeJira
from tests.fakes.seed import seed_connection
from tests.fakes.storage import MemoryStorage


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def cipher() -> TokenCipher:
    return TokenCipher.generate()


@pytest.fixture
def fake_jira() -> FakeJira:
    return FakeJira()


@pytest_asyncio.fixture
async def http_client(fake_jira: FakeJira) -> AsyncIterator[httpx.AsyncClient]:
    async with create_http_client(transport=fake_jira.transport()) as client:
        yield client


@pytest_asyncio.fixture
async def connected(storage: MemoryStorage, cipher: TokenCipher) -> None:
    await seed_connection(storage, cipher)


@pytest.fixture
def credentials(storage: MemoryStorage, cipher: TokenCipher, http_client: httpx.AsyncClient) -> CredentialManager:
    return CredentialManager(storage, cipher, http_client)


@pytest.fixture
def tracker(credentials: CredentialManager, http_client: httpx.AsyncClient) -> TrackerClient:
    return TrackerClient(credentials, http_client)


@pytest.fixture
def mappings(storage: MemoryStorage) -> MappingStore:
    return MappingStore(storage)


@pytest.fixture
def history(storage: MemoryStorage) -> SyncHistory:
    return SyncHistory(storage)


@pytest.fixture
def config_store(storage: MemoryStorage) -> ConfigStore:
    return ConfigStore(storage)


@pytest_asyncio.fixture
async def connector(
    storage: MemoryStorage, cipher: TokenCipher, http_client: httpx.AsyncClient
) -> AsyncIterator[JiraConnector]:
    jira = JiraConnector.create(storage, cipher, http_client)
    yield jira
    await jira.deactivate()
