"""Project browsing commands."""

from __future__ import annotations

import argparse

from jirabridge.cli.common import format_optional
from jirabridge.contracts.exceptions import ConfigurationError
from jirabridge.contracts.issue import Project, RemoteStatus
from jirabridge.contracts.sync import StatusRule


def format_projects(projects: list[Project]) -> str:
    if not projects:
        return "No projects found"
    width = max(len(project.key) for project in projects)
    return "\n".join(f"{project.key:<{width}}  {project.name}" for project in projects)


def format_statuses(statuses: list[RemoteStatus]) -> str:
    if not statuses:
        return "No statuses found"
    return "\n".join(
        f"{format_optional(status.id):>8}  {format_optional(status.name):<24} {format_optional(status.category)}"
        for status in statuses
    )


def format_rules(rules: list[StatusRule]) -> str:
    if not rules:
        return "No status rules"
    return "\n".join(
        f"{format_optional(rule.remote_status_name):<24} -> {rule.local_column}" for rule in rules
    )


async def run_projects(args: argparse.Namespace) -> None:
    import jirabridge.cli as cli

    async with cli.open_connector(args) as jira:
        if args.projects_command == "list":
            print(format_projects(await jira.client.list_projects()))
        elif args.projects_command == "statuses":
            print(format_statuses(await jira.client.list_project_statuses(args.key)))
        elif args.projects_command == "suggest":
            rules = await jira.importer.get_suggested_status_mapping(args.key)
            print(format_rules(rules))
            if args.save:
                await jira.save_status_rules(rules)
                print(f"\nSaved {len(rules)} status rules")
        else:
            raise ConfigurationError(f"unsupported projects command: {args.projects_command}")


__all__ = ["format_projects", "format_rules", "format_statuses", "run_projects"]
