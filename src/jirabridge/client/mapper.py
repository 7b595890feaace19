"""Translate raw Jira REST payloads into jirabridge contracts."""

from __future__ import annotations

from typing import Any

from jirabridge.client.adf import adf_to_text
from jirabridge.contracts.issue import (
    Assignee,
    Issue,
    IssueType,
    Priority,
    Project,
    RemoteStatus,
    Transition,
)


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _str_or_none(value: Any) -> str | None:
    return None if value is None else str(value)


def status_from_payload(payload: Any) -> RemoteStatus:
    status = _dict(payload)
    return RemoteStatus(
        id=_str_or_none(status.get("id")),
        name=status.get("name"),
        category=_dict(status.get("statusCategory")).get("key"),
    )


def project_from_payload(payload: dict[str, Any]) -> Project:
    return Project(
        id=str(payload["id"]),
        key=payload["key"],
        name=payload.get("name", payload["key"]),
        avatar_url=_dict(payload.get("avatarUrls")).get("48x48"),
        style=payload.get("style"),
    )


def issue_from_payload(payload: dict[str, Any]) -> Issue:
    fields = _dict(payload.get("fields"))
    issue_type = _dict(fields.get("issuetype"))
    priority = _dict(fields.get("priority"))
    assignee_raw = fields.get("assignee")

    assignee = None
    if isinstance(assignee_raw, dict):
        assignee = Assignee(
            id=assignee_raw.get("accountId"),
            name=assignee_raw.get("displayName"),
            avatar_url=_dict(assignee_raw.get("avatarUrls")).get("48x48"),
        )

    return Issue(
        id=str(payload["id"]),
        key=payload["key"],
        self_url=payload.get("self"),
        summary=fields.get("summary") or "",
        description=adf_to_text(fields.get("description")),
        issue_type=IssueType(
            id=_str_or_none(issue_type.get("id")),
            name=issue_type.get("name"),
            icon_url=issue_type.get("iconUrl"),
        ),
        status=status_from_payload(fields.get("status")),
        priority=Priority(id=_str_or_none(priority.get("id")), name=priority.get("name")),
        assignee=assignee,
        labels=list(fields.get("labels") or []),
        created=fields.get("created"),
        updated=fields.get("updated"),
    )


def transition_from_payload(payload: dict[str, Any]) -> Transition:
    return Transition(
        id=str(payload["id"]),
        name=payload.get("name", ""),
        to=status_from_payload(payload.get("to")),
    )


def flatten_project_statuses(payload: Any) -> list[RemoteStatus]:
    """Collapse the per-issue-type status lists into one list unique by id."""
    seen: dict[str, RemoteStatus] = {}
    for issue_type in payload if isinstance(payload, list) else []:
        for raw in _dict(issue_type).get("statuses") or []:
            status = status_from_payload(raw)
            if status.id is not None and status.id not in seen:
                seen[status.id] = status
    return list(seen.values())
