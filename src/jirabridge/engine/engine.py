"""Bidirectional status reconciliation between local tasks and Jira issues."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from jirabridge.client.tracker import TrackerClient
from jirabridge.constants import MAX_SEARCH_PAGE_SIZE
from jirabridge.contracts.exceptions import JiraBridgeError
from jirabridge.contracts.issue import Issue, Transition
from jirabridge.contracts.sync import (
    HistoryEntry,
    Mapping,
    PullResult,
    PullUpdate,
    PushResult,
    PushSkipReason,
    StatusRule,
    SyncDirection,
    SyncState,
)
from jirabridge.persistence.config import ConfigStore
from jirabridge.persistence.history import SyncHistory
from jirabridge.persistence.mappings import MappingStore
from jirabridge.status import find_rule_for_column, resolve_local_column
from jirabridge.utils import quote_jql, utcnow

logger = logging.getLogger(__name__)

_SYNC_FAILURES = (JiraBridgeError, httpx.HTTPError)


def _error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def _log_failure(message: str, exc: Exception) -> str:
    """Log *exc* under *message*; unexpected exception types get a traceback."""
    text = _error_message(exc)
    if isinstance(exc, _SYNC_FAILURES):
        logger.error("%s: %s", message, text)
    else:
        logger.exception("%s: %s", message, text)
    return text


def _reaches(transition: Transition, rule: StatusRule) -> bool:
    target = transition.to
    if rule.remote_status_id is not None and target.id == rule.remote_status_id:
        return True
    return rule.remote_status_name is not None and target.name == rule.remote_status_name


class SyncEngine:
    """Reconciles task status in two independent directions.

    * **Push** (local → Jira) runs per status-change event; the local column
      is authoritative and is translated into a workflow transition.
    * **Pull** (Jira → local) runs on a schedule or on demand; the remote
      status is authoritative, but changes are only *proposed*. The caller
      commits each accepted one with :meth:`apply_jira_update`.

    Neither direction raises past this class: failures come back as
    :class:`PushResult` / :class:`PullResult` and are written to the history.
    Push and apply for the same local task are serialized.
    """

    def __init__(
        self,
        client: TrackerClient,
        mappings: MappingStore,
        history: SyncHistory,
        config: ConfigStore,
    ) -> None:
        self._client = client
        self._mappings = mappings
        self._history = history
        self._config = config
        self._row_locks: dict[str, asyncio.Lock] = {}
        self._row_users: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    async def sync_task_to_jira(self, local_id: str, status: str) -> PushResult:
        """Move the Jira issue linked to *local_id* into the status mapped to *status*."""
        async with self._row_lock(local_id):
            return await self._push(local_id, status)

    async def _push(self, local_id: str, status: str) -> PushResult:
        try:
            mapping = await self._mappings.get(local_id)
            if mapping is None:
                return PushResult(synced=False, reason=PushSkipReason.NOT_LINKED)
            rules = (await self._config.load_sync_config()).status_rules
        except JiraBridgeError as exc:
            logger.error("Cannot load sync state for task %s: %s", local_id, exc)
            return PushResult(synced=False, reason=_error_message(exc))

        rule = find_rule_for_column(rules, status)
        if rule is None:
            logger.warning("No status mapping found for column: %s", status)
            return PushResult(synced=False, reason=PushSkipReason.NO_MAPPING, remote_key=mapping.remote_key)

        try:
            transitions = await self._client.list_transitions(mapping.remote_key)
            transition = next((item for item in transitions if _reaches(item, rule)), None)
            if transition is None:
                logger.warning(
                    "No valid transition to %s for %s",
                    rule.remote_status_name or rule.remote_status_id,
                    mapping.remote_key,
                )
                return PushResult(
                    synced=False,
                    reason=PushSkipReason.NO_TRANSITION,
                    remote_key=mapping.remote_key,
                    available_transitions=[item.to.name or item.name for item in transitions],
                )
            await self._client.apply_transition(mapping.remote_key, transition.id)
        except Exception as exc:
            message = _log_failure(f"Failed to sync {mapping.remote_key}", exc)
            await self._record(
                direction=SyncDirection.PUSH,
                success=False,
                local_id=local_id,
                remote_key=mapping.remote_key,
                error=message,
            )
            return PushResult(synced=False, reason=message, remote_key=mapping.remote_key)

        new_status = rule.remote_status_name or transition.to.name
        try:
            await self._mappings.update_status(local_id, new_status)
        except JiraBridgeError as exc:
            logger.error("Transitioned %s but could not update its mapping: %s", mapping.remote_key, exc)
        await self._record(
            direction=SyncDirection.PUSH,
            success=True,
            local_id=local_id,
            remote_key=mapping.remote_key,
            from_status=mapping.remote_status,
            to_status=new_status,
        )
        logger.info("Synced %s: %s -> %s", mapping.remote_key, mapping.remote_status, new_status)
        return PushResult(synced=True, remote_key=mapping.remote_key)

    # ------------------------------------------------------------------
    # Pull
    # ------------------------------------------------------------------

    async def sync_from_jira(self) -> PullResult:
        """Compare every mapped issue's live status with the stored one.

        Mappings are left untouched; see :meth:`apply_jira_update`.
        """
        await self._update_state(in_progress=True)
        state: dict[str, Any] = {"in_progress": False}
        try:
            result = await self._pull()
        except Exception as exc:
            message = _log_failure("Sync from Jira failed", exc)
            state["last_error"] = message
            await self._record(direction=SyncDirection.PULL, success=False, error=message)
            return PullResult(error=message)
        else:
            state.update(last_sync=utcnow(), last_error=None)
            return result
        finally:
            await self._update_state(**state)

    async def _pull(self) -> PullResult:
        by_key = await self._mappings.by_remote_key()
        if not by_key:
            return PullResult(updates=[], checked=0)

        rules = (await self._config.load_sync_config()).status_rules
        issues = await self._fetch_issues(list(by_key))

        updates: list[PullUpdate] = []
        for issue in issues:
            for mapping in by_key.get(issue.key, []):
                if mapping.remote_status == issue.status.name:
                    continue
                updates.append(
                    PullUpdate(
                        local_id=mapping.local_id,
                        remote_key=issue.key,
                        previous_status=mapping.remote_status,
                        new_status=issue.status.name,
                        suggested_column=resolve_local_column(rules, issue.status),
                        issue=issue,
                    )
                )

        if updates:
            logger.info("Found %d updates from Jira", len(updates))
        return PullResult(updates=updates, checked=len(issues))

    async def _fetch_issues(self, keys: list[str]) -> list[Issue]:
        issues: list[Issue] = []
        for start in range(0, len(keys), MAX_SEARCH_PAGE_SIZE):
            chunk = keys[start : start + MAX_SEARCH_PAGE_SIZE]
            jql = f"key IN ({', '.join(quote_jql(key) for key in chunk)})"
            page = await self._client.search_issues(jql, max_results=len(chunk))
            issues.extend(page.issues)
        return issues

    async def apply_jira_update(self, local_id: str, remote_status: str | None) -> Mapping | None:
        """Commit an accepted pull update to the mapping of *local_id*."""
        async with self._row_lock(local_id):
            try:
                previous = await self._mappings.get(local_id)
                if previous is None:
                    return None
                updated = await self._mappings.update_status(local_id, remote_status)
            except JiraBridgeError as exc:
                logger.error("Failed to apply Jira update for task %s: %s", local_id, exc)
                await self._record(
                    direction=SyncDirection.PULL,
                    success=False,
                    local_id=local_id,
                    error=_error_message(exc),
                )
                return None

        await self._record(
            direction=SyncDirection.PULL,
            success=True,
            local_id=local_id,
            remote_key=previous.remote_key,
            from_status=previous.remote_status,
            to_status=remote_status,
        )
        return updated

    # ------------------------------------------------------------------
    # History and state
    # ------------------------------------------------------------------

    async def get_history(self, limit: int = 20) -> list[HistoryEntry]:
        return await self._history.list(limit)

    async def clear_history(self) -> None:
        await self._history.clear()

    async def get_sync_state(self) -> SyncState:
        return await self._config.load_sync_state()

    async def _record(self, **fields: Any) -> None:
        try:
            await self._history.record(**fields)
        except JiraBridgeError as exc:
            logger.error("Failed to record sync history: %s", exc)

    async def _update_state(self, **changes: Any) -> None:
        try:
            await self._config.update_sync_state(**changes)
        except JiraBridgeError as exc:
            logger.error("Failed to update sync state: %s", exc)

    @contextlib.asynccontextmanager
    async def _row_lock(self, local_id: str) -> AsyncIterator[None]:
        """Serialize work on one local task; the lock is dropped once nobody holds or waits for it."""
        lock = self._row_locks.setdefault(local_id, asyncio.Lock())
        self._row_users[local_id] = self._row_users.get(local_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._row_users[local_id] -= 1
            if not self._row_users[local_id]:
                del self._row_users[local_id]
                del self._row_locks[local_id]
