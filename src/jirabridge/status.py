"""Status-rule lookups shared by the import pipeline and the sync engine."""

from __future__ import annotations

from collections.abc import Iterable

from jirabridge.constants import CATEGORY_COLUMNS, DEFAULT_COLUMN
from jirabridge.contracts.issue import RemoteStatus
from jirabridge.contracts.sync import StatusRule

_REVIEW_WORDS = ("review", "test", "qa")
_DOING_WORDS = ("progress", "doing", "dev")
_TODO_WORDS = ("todo", "to do", "ready")
_NEW_TODO_WORDS = ("todo", "to do", "selected")


def find_rule_for_status(rules: Iterable[StatusRule], status: RemoteStatus) -> StatusRule | None:
    """First rule matching *status* by id or by name."""
    for rule in rules:
        if status.id is not None and rule.remote_status_id == status.id:
            return rule
        if status.name is not None and rule.remote_status_name == status.name:
            return rule
    return None


def find_rule_for_column(rules: Iterable[StatusRule], column: str) -> StatusRule | None:
    return next((rule for rule in rules if rule.local_column == column), None)


def category_column(category: str | None) -> str:
    return CATEGORY_COLUMNS.get(category or "", DEFAULT_COLUMN)


def resolve_local_column(rules: Iterable[StatusRule], status: RemoteStatus) -> str:
    """Column for *status*: an explicit rule wins, else the category fallback."""
    rule = find_rule_for_status(rules, status)
    if rule is not None:
        return rule.local_column
    return category_column(status.category)


def suggest_column(status: RemoteStatus) -> str:
    """Guess a column from the status category and name.

    A starting point for the user to review, not a guarantee.
    """
    name = (status.name or "").lower()
    if status.category == "done":
        return "done"
    if status.category == "indeterminate":
        if any(word in name for word in _REVIEW_WORDS):
            return "review"
        if any(word in name for word in _DOING_WORDS):
            return "doing"
        if any(word in name for word in _TODO_WORDS):
            return "todo"
        return "doing"
    if any(word in name for word in _NEW_TODO_WORDS):
        return "todo"
    return DEFAULT_COLUMN


def suggest_rules(statuses: Iterable[RemoteStatus]) -> list[StatusRule]:
    return [
        StatusRule(
            remote_status_id=status.id,
            remote_status_name=status.name,
            remote_category=status.category,
            local_column=suggest_column(status),
        )
        for status in statuses
    ]
