"""Periodic pull loop."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from jirabridge.contracts.sync import PullResult
from jirabridge.engine.engine import SyncEngine
from jirabridge.persistence.config import ConfigStore

logger = logging.getLogger(__name__)

PullCallback = Callable[[PullResult], Awaitable[None] | None]


class AutoSyncScheduler:
    """Runs :meth:`SyncEngine.sync_from_jira` every ``poll_interval_minutes``.

    At most one loop and at most one in-flight pull exist at a time. A failed
    cycle is logged and the loop keeps going.
    """

    def __init__(
        self,
        engine: SyncEngine,
        config: ConfigStore,
        *,
        on_result: PullCallback | None = None,
    ) -> None:
        self._engine = engine
        self._config = config
        self._on_result = on_result
        self._task: asyncio.Task[None] | None = None
        self._cycle_running = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> bool:
        """(Re)start polling from the current config; ``False`` when polling is off."""
        await self.stop()
        config = await self._config.load_sync_config()
        if not config.poll_enabled:
            return False

        interval = config.poll_interval_minutes * 60
        self._task = asyncio.create_task(self._loop(interval), name="jirabridge-auto-sync")
        logger.info("Auto-sync started (every %s minutes)", config.poll_interval_minutes)
        return True

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Auto-sync stopped")

    async def run_cycle(self) -> PullResult | None:
        """One pull; ``None`` when a previous cycle is still running or the pull crashed."""
        if self._cycle_running:
            logger.debug("Skipping auto-sync cycle; previous cycle still running")
            return None

        self._cycle_running = True
        try:
            result = await self._engine.sync_from_jira()
            if self._on_result is not None:
                outcome = self._on_result(result)
                if outcome is not None:
                    await outcome
            return result
        except Exception:
            logger.exception("Auto-sync cycle failed")
            return None
        finally:
            self._cycle_running = False

    async def _loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.run_cycle()
