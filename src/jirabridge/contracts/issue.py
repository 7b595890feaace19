"""Normalized Jira entities returned by :class:`~jirabridge.client.tracker.TrackerClient`."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Project(BaseModel):
    id: str
    key: str
    name: str
    avatar_url: str | None = None
    style: str | None = None


class RemoteStatus(BaseModel):
    id: str | None = None
    name: str | None = None
    category: str | None = None


class IssueType(BaseModel):
    id: str | None = None
    name: str | None = None
    icon_url: str | None = None


class Priority(BaseModel):
    id: str | None = None
    name: str | None = None


class Assignee(BaseModel):
    id: str | None = None
    name: str | None = None
    avatar_url: str | None = None


class Issue(BaseModel):
    """A Jira issue with its description reduced to plain text."""

    id: str
    key: str
    self_url: str | None = None
    summary: str = ""
    description: str = ""
    issue_type: IssueType = Field(default_factory=IssueType)
    status: RemoteStatus = Field(default_factory=RemoteStatus)
    priority: Priority = Field(default_factory=Priority)
    assignee: Assignee | None = None
    labels: list[str] = Field(default_factory=list)
    created: str | None = None
    updated: str | None = None


class Transition(BaseModel):
    id: str
    name: str
    to: RemoteStatus


class SearchPage(BaseModel):
    total: int
    start_at: int
    max_results: int
    issues: list[Issue] = Field(default_factory=list)
