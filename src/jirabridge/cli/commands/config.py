"""Sync config commands."""

from __future__ import annotations

import argparse
from typing import Any

from pydantic import ValidationError

from jirabridge.contracts.exceptions import ConfigurationError
from jirabridge.contracts.sync import SyncConfig


def apply_config_changes(config: SyncConfig, args: argparse.Namespace) -> SyncConfig:
    """Return *config* with every option given on the command line applied."""
    changes: dict[str, Any] = {
        "project_key": args.project,
        "extra_filter": args.extra_filter,
        "push_enabled": args.push,
        "poll_enabled": args.poll,
        "poll_interval_minutes": args.interval,
    }
    payload = config.model_dump(mode="json")
    payload.update({key: value for key, value in changes.items() if value is not None})
    try:
        return SyncConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid config: {exc}") from exc


async def run_config(args: argparse.Namespace) -> None:
    import jirabridge.cli as cli

    async with cli.open_connector(args) as jira:
        if args.config_command == "show":
            print((await jira.get_config()).model_dump_json(indent=2))
        elif args.config_command == "set":
            updated = apply_config_changes(await jira.get_config(), args)
            await jira.save_config(updated)
            print(updated.model_dump_json(indent=2))
        else:
            raise ConfigurationError(f"unsupported config command: {args.config_command}")


__all__ = ["apply_config_changes", "run_config"]
