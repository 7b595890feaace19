"""Mapping commands."""

from __future__ import annotations

import argparse

from jirabridge.cli.common import format_optional
from jirabridge.contracts.exceptions import ConfigurationError
from jirabridge.contracts.sync import Mapping


def format_mappings(mappings: dict[str, Mapping]) -> str:
    if not mappings:
        return "No mappings"
    width = max(len(local_id) for local_id in mappings)
    return "\n".join(
        f"{local_id:<{width}}  {mapping.remote_key:<12} {format_optional(mapping.remote_status)}"
        for local_id, mapping in sorted(mappings.items())
    )


async def run_mappings(args: argparse.Namespace) -> None:
    import jirabridge.cli as cli

    async with cli.open_connector(args) as jira:
        if args.mappings_command == "list":
            print(format_mappings(await jira.importer.get_all_mappings()))
        elif args.mappings_command == "link":
            mapping = await jira.link(args.local_id, args.key)
            print(f"Linked {mapping.local_id} -> {mapping.remote_key} ({format_optional(mapping.remote_status)})")
        elif args.mappings_command == "unlink":
            removed = await jira.unlink(args.local_id)
            if removed is None:
                print(f"{args.local_id} is not linked")
            else:
                print(f"Unlinked {removed.local_id} from {removed.remote_key}")
        else:
            raise ConfigurationError(f"unsupported mappings command: {args.mappings_command}")


__all__ = ["format_mappings", "run_mappings"]
