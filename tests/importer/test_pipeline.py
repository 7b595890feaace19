from __future__ import annotations

import json

import pytest

from jirabridge.client import TrackerClient
from jirabridge.client.mapper import issue_from_payload
from jirabridge.contracts.exceptions import ConfigurationError, RemoteApiError
from jirabridge.contracts.sync import StatusRule
from jirabridge.importer import ImportPipeline, ImportProgress, build_description, build_task_draft
from jirabridge.persistence import ConfigStore, MappingStore
from tests.fakes.jira import DONE, IN_REVIEW, FakeJira, make_issue
from tests.fakes.seed import REVIEW_RULES, seed_config
from tests.fakes.storage import MemoryStorage


class RecordingProgress(ImportProgress):
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def phase_start(self, phase: str, total: int | None = None) -> None:
        self.events.append(("start", phase, total))

    def phase_total(self, phase: str, completed: int, total: int) -> None:
        self.events.append(("total", phase, completed, total))

    def item_done(self, phase: str) -> None:
        self.events.append(("item", phase))

    def phase_done(self, phase: str) -> None:
        self.events.append(("done", phase))

    def phase_error(self, phase: str, error: BaseException) -> None:
        self.events.append(("error", phase, type(error).__name__))


@pytest.fixture
def progress() -> RecordingProgress:
    return RecordingProgress()


@pytest.fixture
def pipeline(
    tracker: TrackerClient, mappings: MappingStore, config_store: ConfigStore, progress: RecordingProgress
) -> ImportPipeline:
    return ImportPipeline(tracker, mappings, config_store, progress=progress)


# ---------------------------------------------------------------------------
# Draft building
# ---------------------------------------------------------------------------


def test_description_carries_metadata_block() -> None:
    issue = issue_from_payload(make_issue("ABC-1", description="Original text", assignee="Ada"))

    description = build_description(issue)

    assert description == "\n".join(
        [
            "Original text",
            "\n---",
            "**Jira:** ABC-1",
            "**Type:** Task",
            "**Assignee:** Ada",
            "**Original Status:** To Do",
        ]
    )


def test_description_without_body_or_assignee() -> None:
    issue = issue_from_payload(make_issue("ABC-1"))

    description = build_description(issue)

    assert description.startswith("\n---")
    assert "**Assignee:**" not in description


def test_task_draft_from_issue() -> None:
    issue = issue_from_payload(make_issue("ABC-1", summary="Fix login", priority="Highest", labels=["backend"], status=DONE))

    draft = build_task_draft(issue, [])

    assert draft.title == "[ABC-1] Fix login"
    assert draft.status == "done"
    assert draft.priority == "critical"
    assert draft.tags == ["backend", "jira"]
    assert draft.acceptance_criteria == []
    assert draft.metadata["jira_key"] == "ABC-1"
    assert draft.metadata["jira_id"] == issue.id
    assert draft.metadata["jira_status"] == "Done"
    assert draft.metadata["jira_type"] == "Task"
    assert "imported_at" in draft.metadata


def test_task_draft_uses_status_rules_and_default_priority() -> None:
    issue = issue_from_payload(make_issue("ABC-1", status=IN_REVIEW, priority="Blocker"))

    draft = build_task_draft(issue, REVIEW_RULES)

    assert draft.status == "review"
    assert draft.priority == "medium"


def test_task_draft_falls_back_to_category() -> None:
    issue = issue_from_payload(make_issue("ABC-1", status=IN_REVIEW))

    assert build_task_draft(issue, [StatusRule(remote_status_name="Other", local_column="todo")]).status == "doing"


# ---------------------------------------------------------------------------
# Preview / import
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.usefixtures("connected")
async def test_preview_splits_new_and_existing(
    pipeline: ImportPipeline, fake_jira: FakeJira, storage: MemoryStorage, mappings: MappingStore
) -> None:
    await seed_config(storage)
    for key in ("ABC-1", "ABC-2", "ABC-3"):
        fake_jira.add_issue(key)
    await mappings.save("task-9", issue_from_payload(fake_jira.issues["ABC-2"]))

    preview = await pipeline.preview()

    assert preview.total == 3
    assert [issue.key for issue in preview.new] == ["ABC-1", "ABC-3"]
    assert [issue.key for issue in preview.existing] == ["ABC-2"]
    assert [issue.key for issue in preview.to_import] == ["ABC-1", "ABC-3"]


@pytest.mark.asyncio
@pytest.mark.usefixtures("connected")
async def test_preview_can_include_existing(
    pipeline: ImportPipeline, fake_jira: FakeJira, storage: MemoryStorage, mappings: MappingStore
) -> None:
    await seed_config(storage)
    fake_jira.add_issue("ABC-1")
    fake_jira.add_issue("ABC-2")
    await mappings.save("task-9", issue_from_payload(fake_jira.issues["ABC-2"]))

    preview = await pipeline.preview(include_existing=True)

    assert [issue.key for issue in preview.to_import] == ["ABC-1", "ABC-2"]


@pytest.mark.asyncio
@pytest.mark.usefixtures("connected")
async def test_preview_arguments_override_config(pipeline: ImportPipeline, fake_jira: FakeJira, storage: MemoryStorage) -> None:
    await seed_config(storage, extra_filter="labels = old")
    fake_jira.add_issue("XYZ-1")

    preview = await pipeline.preview(project_key="XYZ", extra_filter="")

    assert preview.total == 1
    body = json.loads(fake_jira.calls("POST", "/search")[0].content)
    assert body["jql"] == 'project = "XYZ" ORDER BY created DESC'


@pytest.mark.asyncio
async def test_preview_requires_project(pipeline: ImportPipeline, fake_jira: FakeJira) -> None:
    with pytest.raises(ConfigurationError, match="No Jira project configured"):
        await pipeline.preview()

    assert fake_jira.requests == []


@pytest.mark.asyncio
@pytest.mark.usefixtures("connected")
async def test_preview_reports_fetch_progress(
    pipeline: ImportPipeline, fake_jira: FakeJira, storage: MemoryStorage, progress: RecordingProgress
) -> None:
    await seed_config(storage)
    fake_jira.add_issue("ABC-1")

    await pipeline.preview()

    assert progress.events == [("start", "Fetch", None), ("total", "Fetch", 1, 1), ("done", "Fetch")]


@pytest.mark.asyncio
@pytest.mark.usefixtures("connected")
async def test_preview_reports_fetch_error(
    pipeline: ImportPipeline, fake_jira: FakeJira, storage: MemoryStorage, progress: RecordingProgress
) -> None:
    await seed_config(storage)
    fake_jira.fail["POST /search"] = 500

    with pytest.raises(RemoteApiError):
        await pipeline.preview()

    assert progress.events[-1] == ("error", "Fetch", "RemoteApiError")


@pytest.mark.asyncio
@pytest.mark.usefixtures("connected")
async def test_import_all_pairs_drafts_with_issues(
    pipeline: ImportPipeline, fake_jira: FakeJira, storage: MemoryStorage, mappings: MappingStore
) -> None:
    await seed_config(storage)
    fake_jira.add_issue("ABC-1", status=IN_REVIEW)
    fake_jira.add_issue("ABC-2")
    await mappings.save("task-9", issue_from_payload(fake_jira.issues["ABC-2"]))

    batch = await pipeline.import_all()

    assert batch.total == 2
    assert batch.skipped == 1
    ((draft, issue),) = batch.pairs
    assert issue.key == "ABC-1"
    assert draft.title.startswith("[ABC-1]")
    assert draft.status == "review"
    assert await mappings.get("task-9") is not None


@pytest.mark.asyncio
@pytest.mark.usefixtures("connected")
async def test_suggested_status_mapping(pipeline: ImportPipeline) -> None:
    rules = await pipeline.get_suggested_status_mapping("ABC")

    assert [(rule.remote_status_name, rule.local_column) for rule in rules] == [
        ("To Do", "todo"),
        ("In Progress", "doing"),
        ("In Review", "review"),
        ("Done", "done"),
    ]
