"""Shared CLI helpers."""

from __future__ import annotations

import argparse
import contextlib
import os
from collections.abc import AsyncIterator
from pathlib import Path

from jirabridge.auth import TokenCipher
from jirabridge.engine.scheduler import PullCallback
from jirabridge.importer import ImportProgress
from jirabridge.persistence import JsonFileStorage
from jirabridge.sdk import JiraConnector

DEFAULT_HOME = Path("~/.jirabridge")


def resolve_store_path(args: argparse.Namespace) -> Path:
    value = args.store or os.environ.get("JIRABRIDGE_STORE") or DEFAULT_HOME / "store.json"
    return Path(value).expanduser()


def resolve_key_path(args: argparse.Namespace) -> Path:
    value = args.key_file or os.environ.get("JIRABRIDGE_KEY_FILE") or DEFAULT_HOME / "token.key"
    return Path(value).expanduser()


@contextlib.asynccontextmanager
async def open_connector(
    args: argparse.Namespace,
    *,
    progress: ImportProgress | None = None,
    on_pull: PullCallback | None = None,
) -> AsyncIterator[JiraConnector]:
    storage = JsonFileStorage(resolve_store_path(args))
    cipher = TokenCipher.from_key_file(resolve_key_path(args))
    async with JiraConnector.open(storage, cipher, progress=progress, on_pull=on_pull) as connector:
        yield connector


def format_optional(value: object | None) -> str:
    if value is None or value == "":
        return "-"
    return str(value)


def format_comma_or_none(values: list[str]) -> str:
    if not values:
        return "none"
    return ", ".join(values)
