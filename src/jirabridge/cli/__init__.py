"""Command-line interface for jirabridge."""

from __future__ import annotations

import asyncio as asyncio
import logging as logging

from jirabridge.cli.app import main as main
from jirabridge.cli.commands import auth as auth_command
from jirabridge.cli.commands import config as config_command
from jirabridge.cli.commands import importing as import_command
from jirabridge.cli.commands import mappings as mappings_command
from jirabridge.cli.commands import projects as projects_command
from jirabridge.cli.commands import sync as sync_command
from jirabridge.cli.common import open_connector as open_connector
from jirabridge.cli.parser import build_parser as build_parser

COMMANDS = {
    "auth": auth_command.run_auth,
    "projects": projects_command.run_projects,
    "config": config_command.run_config,
    "import": import_command.run_import,
    "sync": sync_command.run_sync,
    "mappings": mappings_command.run_mappings,
}
