from __future__ import annotations

import pytest

from jirabridge.contracts.issue import RemoteStatus
from jirabridge.contracts.sync import StatusRule
from jirabridge.status import find_rule_for_column, resolve_local_column, suggest_column, suggest_rules


@pytest.mark.parametrize(
    ("name", "category", "expected"),
    [
        ("Done", "done", "done"),
        ("Closed", "done", "done"),
        ("In Review", "indeterminate", "review"),
        ("QA", "indeterminate", "review"),
        ("In Progress", "indeterminate", "doing"),
        ("Ready for Dev", "indeterminate", "doing"),
        ("Ready", "indeterminate", "todo"),
        ("Blocked", "indeterminate", "doing"),
        ("To Do", "new", "todo"),
        ("Selected for Development", "new", "todo"),
        ("Open", "new", "backlog"),
        ("Backlog", None, "backlog"),
    ],
)
def test_suggest_column(name: str, category: str | None, expected: str) -> None:
    assert suggest_column(RemoteStatus(id="1", name=name, category=category)) == expected


def test_suggest_rules_copies_status_identity() -> None:
    (rule,) = suggest_rules([RemoteStatus(id="10001", name="In Review", category="indeterminate")])

    assert rule == StatusRule(
        remote_status_id="10001",
        remote_status_name="In Review",
        remote_category="indeterminate",
        local_column="review",
    )


def test_explicit_rule_wins_over_category() -> None:
    rules = [StatusRule(remote_status_id="10001", remote_status_name="In Review", local_column="review")]

    assert resolve_local_column(rules, RemoteStatus(id="10001", name="In Review", category="indeterminate")) == "review"


def test_rule_matches_by_name_when_ids_differ() -> None:
    rules = [StatusRule(remote_status_id="other", remote_status_name="Blocked", local_column="todo")]

    assert resolve_local_column(rules, RemoteStatus(id="99", name="Blocked", category="indeterminate")) == "todo"


@pytest.mark.parametrize(
    ("category", "expected"),
    [("new", "backlog"), ("indeterminate", "doing"), ("done", "done"), ("undefined", "backlog"), (None, "backlog")],
)
def test_category_fallback(category: str | None, expected: str) -> None:
    assert resolve_local_column([], RemoteStatus(id="1", name="Anything", category=category)) == expected


def test_find_rule_for_column_returns_first_match() -> None:
    rules = [
        StatusRule(remote_status_name="In Progress", local_column="doing"),
        StatusRule(remote_status_name="Blocked", local_column="doing"),
    ]

    rule = find_rule_for_column(rules, "doing")

    assert rule is not None
    assert rule.remote_status_name == "In Progress"
    assert find_rule_for_column(rules, "done") is None
