"""SDK composition root for jirabridge."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator

import httpx

from jirabridge.auth import CredentialManager, TokenCipher
from jirabridge.client import TrackerClient, create_http_client
from jirabridge.contracts.exceptions import JiraBridgeError
from jirabridge.contracts.importing import ImportResult
from jirabridge.contracts.storage import Storage
from jirabridge.contracts.sync import Mapping, PullUpdate, PushResult, PushSkipReason, StatusRule, SyncConfig
from jirabridge.contracts.tasks import TaskStore
from jirabridge.engine import AutoSyncScheduler, SyncEngine
from jirabridge.engine.scheduler import PullCallback
from jirabridge.importer import ImportPipeline, ImportProgress, NullImportProgress
from jirabridge.persistence import ConfigStore, MappingStore, SyncHistory

logger = logging.getLogger(__name__)


class JiraConnector:
    """Host-facing API tying credentials, client, importer and sync together.

    Use :meth:`open` to get a connector that owns its HTTP client::

        async with JiraConnector.open(storage, cipher) as jira:
            await jira.activate()
    """

    def __init__(
        self,
        *,
        credentials: CredentialManager,
        client: TrackerClient,
        config: ConfigStore,
        importer: ImportPipeline,
        engine: SyncEngine,
        scheduler: AutoSyncScheduler,
        progress: ImportProgress | None = None,
    ) -> None:
        self._credentials = credentials
        self._client = client
        self._config = config
        self._importer = importer
        self._engine = engine
        self._scheduler = scheduler
        self._progress: ImportProgress = progress or NullImportProgress()
        self._active = False

    @classmethod
    def create(
        cls,
        storage: Storage,
        cipher: TokenCipher,
        http_client: httpx.AsyncClient,
        *,
        progress: ImportProgress | None = None,
        on_pull: PullCallback | None = None,
    ) -> JiraConnector:
        config = ConfigStore(storage)
        mappings = MappingStore(storage)
        credentials = CredentialManager(storage, cipher, http_client)
        client = TrackerClient(credentials, http_client)
        engine = SyncEngine(client, mappings, SyncHistory(storage), config)
        return cls(
            credentials=credentials,
            client=client,
            config=config,
            importer=ImportPipeline(client, mappings, config, progress=progress),
            engine=engine,
            scheduler=AutoSyncScheduler(engine, config, on_result=on_pull),
            progress=progress,
        )

    @classmethod
    @contextlib.asynccontextmanager
    async def open(
        cls,
        storage: Storage,
        cipher: TokenCipher,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        progress: ImportProgress | None = None,
        on_pull: PullCallback | None = None,
    ) -> AsyncIterator[JiraConnector]:
        async with create_http_client(transport=transport) as http_client:
            connector = cls.create(storage, cipher, http_client, progress=progress, on_pull=on_pull)
            try:
                yield connector
            finally:
                await connector.deactivate()

    @property
    def credentials(self) -> CredentialManager:
        return self._credentials

    @property
    def client(self) -> TrackerClient:
        return self._client

    @property
    def importer(self) -> ImportPipeline:
        return self._importer

    @property
    def engine(self) -> SyncEngine:
        return self._engine

    @property
    def scheduler(self) -> AutoSyncScheduler:
        return self._scheduler

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def activate(self) -> bool:
        """Start background polling when the config enables it."""
        self._active = True
        return await self._scheduler.start()

    async def deactivate(self) -> None:
        self._active = False
        await self._scheduler.stop()

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    async def import_issues(
        self,
        task_store: TaskStore,
        *,
        project_key: str | None = None,
        extra_filter: str | None = None,
        include_existing: bool = False,
    ) -> ImportResult:
        """Create one local task per importable issue and link it.

        A task that fails to be created or linked is logged and counted in
        ``failed``; the rest of the batch still goes through.
        """
        batch = await self._importer.import_all(
            project_key=project_key,
            extra_filter=extra_filter,
            include_existing=include_existing,
        )

        task_ids: dict[str, str] = {}
        failed = 0
        self._progress.phase_start("Import", len(batch.drafts))
        for draft, issue in batch.pairs:
            try:
                task_id = await task_store.create_task(draft.title, draft.status)
                await task_store.update_task(
                    task_id,
                    {
                        "description": draft.description,
                        "priority": draft.priority,
                        "tags": draft.tags,
                        "acceptance_criteria": draft.acceptance_criteria,
                        "metadata": draft.metadata,
                    },
                )
                await self._importer.save_mapping(task_id, issue)
            except Exception:
                logger.exception("Failed to import %s", issue.key)
                failed += 1
            else:
                task_ids[issue.key] = task_id
            self._progress.item_done("Import")
        self._progress.phase_done("Import")

        logger.info("Imported %d of %d issues (%d skipped, %d failed)", len(task_ids), batch.total, batch.skipped, failed)
        return ImportResult(
            total=batch.total,
            created=len(task_ids),
            skipped=batch.skipped,
            failed=failed,
            task_ids=task_ids,
        )

    # ------------------------------------------------------------------
    # Sync hooks
    # ------------------------------------------------------------------

    async def on_task_moved(self, local_id: str, from_column: str, to_column: str) -> PushResult | None:
        """Status-change hook; ``None`` when nothing was attempted."""
        if from_column == to_column:
            return None
        try:
            config = await self._config.load_sync_config()
        except JiraBridgeError as exc:
            logger.error("Cannot read sync config: %s", exc)
            return None
        if not config.push_enabled:
            return None

        result = await self._engine.sync_task_to_jira(local_id, to_column)
        if result.synced:
            logger.info("Task %s pushed to %s", local_id, result.remote_key)
        elif result.reason != PushSkipReason.NOT_LINKED:
            logger.warning("Task %s not pushed: %s", local_id, result.reason)
        return result

    async def apply_update(self, task_store: TaskStore, update: PullUpdate) -> Mapping | None:
        """Move the local task to the suggested column, then commit the mapping."""
        await task_store.move_task(update.local_id, update.suggested_column)
        return await self._engine.apply_jira_update(update.local_id, update.new_status)

    # ------------------------------------------------------------------
    # Mappings
    # ------------------------------------------------------------------

    async def link(self, local_id: str, issue_key: str) -> Mapping:
        issue = await self._client.get_issue(issue_key)
        return await self._importer.save_mapping(local_id, issue)

    async def unlink(self, local_id: str) -> Mapping | None:
        return await self._importer.remove_mapping(local_id)

    async def issue_url(self, local_id: str) -> str | None:
        mapping = await self._importer.get_mapping(local_id)
        if mapping is None:
            return None
        info = await self._credentials.get_connection_info()
        if info is None:
            return None
        return f"{info.site_url.rstrip('/')}/browse/{mapping.remote_key}"

    # ------------------------------------------------------------------
    # Config
    # ------------------------------------------------------------------

    async def get_config(self) -> SyncConfig:
        return await self._config.load_sync_config()

    async def save_config(self, config: SyncConfig) -> None:
        await self._config.save_sync_config(config)
        if self._active:
            await self._scheduler.start()

    async def save_status_rules(self, rules: list[StatusRule]) -> SyncConfig:
        return await self._config.save_status_rules(rules)
