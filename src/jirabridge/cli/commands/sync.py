"""Sync commands."""

from __future__ import annotations

import argparse
import asyncio

from jirabridge.cli.common import format_optional
from jirabridge.contracts.exceptions import ConfigurationError
from jirabridge.contracts.sync import HistoryEntry, PullResult, SyncState


def format_pull_result(result: PullResult) -> str:
    if result.error is not None:
        return f"Sync from Jira failed: {result.error}"
    lines = [f"Checked {result.checked} issues, {len(result.updates)} changed"]
    for update in result.updates:
        lines.append(
            f"  {update.local_id}  {update.remote_key}: "
            f"{format_optional(update.previous_status)} -> {format_optional(update.new_status)} "
            f"(suggested column: {update.suggested_column})"
        )
    return "\n".join(lines)


def format_history(entries: list[HistoryEntry]) -> str:
    if not entries:
        return "No sync history"
    lines: list[str] = []
    for entry in entries:
        outcome = "ok" if entry.success else f"failed: {entry.error}"
        target = entry.remote_key or entry.local_id or "-"
        change = ""
        if entry.from_status is not None or entry.to_status is not None:
            change = f" {format_optional(entry.from_status)} -> {format_optional(entry.to_status)}"
        lines.append(f"{entry.timestamp.isoformat()}  {entry.direction:<4}  {target}{change}  {outcome}")
    return "\n".join(lines)


def format_state(state: SyncState) -> str:
    last_sync = state.last_sync.isoformat() if state.last_sync is not None else "never"
    line = f"Last sync: {last_sync}"
    if state.last_error:
        line += f" (last error: {state.last_error})"
    return line


async def _print_result(result: PullResult) -> None:
    print(format_pull_result(result), flush=True)


async def run_sync(args: argparse.Namespace) -> None:
    import jirabridge.cli as cli

    if args.sync_command == "watch":
        async with cli.open_connector(args, on_pull=_print_result) as jira:
            if not await jira.activate():
                raise ConfigurationError("Polling is disabled; enable it with 'jirabridge config set --poll'")
            print(format_state(await jira.engine.get_sync_state()), flush=True)
            await asyncio.Event().wait()
        return

    async with cli.open_connector(args) as jira:
        if args.sync_command == "check":
            print(format_pull_result(await jira.engine.sync_from_jira()))
        elif args.sync_command == "history":
            print(format_history(await jira.engine.get_history(args.limit)))
        elif args.sync_command == "clear-history":
            await jira.engine.clear_history()
            print("Sync history cleared")
        else:
            raise ConfigurationError(f"unsupported sync command: {args.sync_command}")


__all__ = ["format_history", "format_pull_result", "format_state", "run_sync"]
