"""One-shot conversion of Jira issues into local task drafts."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from jirabridge.client.tracker import TrackerClient
from jirabridge.constants import DEFAULT_PRIORITY, IMPORT_TAG, PRIORITY_MAPPING
from jirabridge.contracts.exceptions import ConfigurationError
from jirabridge.contracts.importing import ImportBatch, ImportPreview, TaskDraft
from jirabridge.contracts.issue import Issue
from jirabridge.contracts.sync import Mapping, StatusRule
from jirabridge.importer.progress import ImportProgress, NullImportProgress
from jirabridge.persistence.config import ConfigStore
from jirabridge.persistence.mappings import MappingStore
from jirabridge.status import resolve_local_column, suggest_rules
from jirabridge.utils import utcnow

logger = logging.getLogger(__name__)


def build_description(issue: Issue) -> str:
    """Remote description followed by a metadata block about the issue."""
    parts: list[str] = []
    if issue.description:
        parts.append(issue.description)
    parts.append("\n---")
    parts.append(f"**Jira:** {issue.key}")
    if issue.issue_type.name:
        parts.append(f"**Type:** {issue.issue_type.name}")
    if issue.assignee is not None and issue.assignee.name:
        parts.append(f"**Assignee:** {issue.assignee.name}")
    if issue.status.name:
        parts.append(f"**Original Status:** {issue.status.name}")
    return "\n".join(parts)


def build_task_draft(issue: Issue, rules: Iterable[StatusRule]) -> TaskDraft:
    return TaskDraft(
        title=f"[{issue.key}] {issue.summary}",
        description=build_description(issue),
        status=resolve_local_column(rules, issue.status),
        priority=PRIORITY_MAPPING.get(issue.priority.name or "", DEFAULT_PRIORITY),
        tags=[*issue.labels, IMPORT_TAG],
        acceptance_criteria=[],
        metadata={
            "jira_key": issue.key,
            "jira_id": issue.id,
            "jira_status": issue.status.name,
            "jira_type": issue.issue_type.name,
            "imported_at": utcnow().isoformat(),
        },
    )


class ImportPipeline:
    """Turns a project's Jira issues into task drafts without duplicating imports.

    Issues whose key already appears in the mapping table count as
    *existing* and are only offered again when ``include_existing`` is set.
    Creating the local tasks is the caller's job; the caller then records
    each new task with :meth:`save_mapping`.
    """

    def __init__(
        self,
        client: TrackerClient,
        mappings: MappingStore,
        config: ConfigStore,
        *,
        progress: ImportProgress | None = None,
    ) -> None:
        self._client = client
        self._mappings = mappings
        self._config = config
        self._progress: ImportProgress = progress or NullImportProgress()

    async def preview(
        self,
        *,
        project_key: str | None = None,
        extra_filter: str | None = None,
        include_existing: bool = False,
    ) -> ImportPreview:
        config = await self._config.load_sync_config()
        project_key = project_key or config.project_key
        if not project_key:
            raise ConfigurationError("No Jira project configured")
        jql_filter = config.extra_filter if extra_filter is None else extra_filter

        self._progress.phase_start("Fetch")
        try:
            issues = await self._client.list_all_project_issues(
                project_key,
                jql_filter,
                on_page=lambda fetched, total: self._progress.phase_total("Fetch", fetched, total),
            )
        except BaseException as exc:
            self._progress.phase_error("Fetch", exc)
            raise
        self._progress.phase_done("Fetch")

        mapped_keys = set(await self._mappings.remote_keys())
        new_issues = [issue for issue in issues if issue.key not in mapped_keys]
        existing_issues = [issue for issue in issues if issue.key in mapped_keys]

        return ImportPreview(
            total=len(issues),
            new=new_issues,
            existing=existing_issues,
            to_import=list(issues) if include_existing else new_issues,
        )

    async def import_all(
        self,
        *,
        project_key: str | None = None,
        extra_filter: str | None = None,
        include_existing: bool = False,
    ) -> ImportBatch:
        preview = await self.preview(
            project_key=project_key,
            extra_filter=extra_filter,
            include_existing=include_existing,
        )
        rules = (await self._config.load_sync_config()).status_rules
        drafts = [build_task_draft(issue, rules) for issue in preview.to_import]
        logger.info("Prepared %d task drafts (%d already imported)", len(drafts), len(preview.existing))
        return ImportBatch(
            total=preview.total,
            skipped=len(preview.existing),
            drafts=drafts,
            issues=preview.to_import,
        )

    async def get_suggested_status_mapping(self, project_key: str) -> list[StatusRule]:
        statuses = await self._client.list_project_statuses(project_key)
        return suggest_rules(statuses)

    # ------------------------------------------------------------------
    # Mapping table
    # ------------------------------------------------------------------

    async def save_mapping(self, local_id: str, issue: Issue) -> Mapping:
        return await self._mappings.save(local_id, issue)

    async def get_mapping(self, local_id: str) -> Mapping | None:
        return await self._mappings.get(local_id)

    async def remove_mapping(self, local_id: str) -> Mapping | None:
        return await self._mappings.remove(local_id)

    async def get_all_mappings(self) -> dict[str, Mapping]:
        return await self._mappings.all()
