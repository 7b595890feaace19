"""Import preview command."""

from __future__ import annotations

import argparse

from jirabridge.cli.progress.rich import RichImportProgress
from jirabridge.contracts.exceptions import ConfigurationError
from jirabridge.contracts.importing import ImportPreview


def format_preview(preview: ImportPreview) -> str:
    lines = [
        "",
        "jirabridge - import preview",
        "",
        f"  Issues:    {preview.total} total",
        f"  New:       {len(preview.new)}",
        f"  Existing:  {len(preview.existing)}",
        "",
    ]
    existing_keys = {issue.key for issue in preview.existing}
    for issue in preview.to_import:
        marker = "*" if issue.key in existing_keys else " "
        lines.append(f"  {marker} {issue.key:<12} [{issue.status.name or '-'}] {issue.summary}")
    if preview.to_import:
        lines.append("")
    if any(issue.key in existing_keys for issue in preview.to_import):
        lines.append("  * already imported")
        lines.append("")
    return "\n".join(lines)


async def run_import(args: argparse.Namespace) -> ImportPreview:
    import jirabridge.cli as cli

    if args.import_command != "preview":
        raise ConfigurationError(f"unsupported import command: {args.import_command}")

    options = {
        "project_key": args.project,
        "extra_filter": args.extra_filter,
        "include_existing": args.include_existing,
    }
    if not args.verbose:
        with RichImportProgress() as progress:
            async with cli.open_connector(args, progress=progress) as jira:
                preview = await jira.importer.preview(**options)
    else:
        async with cli.open_connector(args) as jira:
            preview = await jira.importer.preview(**options)

    print(format_preview(preview))
    return preview


__all__ = ["format_preview", "run_import"]
