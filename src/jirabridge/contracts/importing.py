"""Import pipeline contracts."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from jirabridge.contracts.issue import Issue


class ImportPreview(BaseModel):
    total: int
    new: list[Issue] = Field(default_factory=list)
    existing: list[Issue] = Field(default_factory=list)
    to_import: list[Issue] = Field(default_factory=list)


class TaskDraft(BaseModel):
    """Local task fields derived from one Jira issue."""

    title: str
    description: str
    status: str
    priority: str
    tags: list[str] = Field(default_factory=list)
    acceptance_criteria: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ImportBatch(BaseModel):
    """Drafts paired index-for-index with the issues they came from."""

    total: int
    skipped: int
    drafts: list[TaskDraft] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_pairing(self) -> ImportBatch:
        if len(self.drafts) != len(self.issues):
            raise ValueError("drafts and issues must pair 1:1")
        return self

    @property
    def pairs(self) -> list[tuple[TaskDraft, Issue]]:
        return list(zip(self.drafts, self.issues, strict=True))


class ImportResult(BaseModel):
    total: int
    created: int
    skipped: int
    failed: int = 0
    task_ids: dict[str, str] = Field(default_factory=dict)
    """Jira key -> created local task id."""
