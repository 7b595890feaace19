"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("jirabridge")
    except PackageNotFoundError:
        return "0.0.0"


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--store",
        default=None,
        help="Path to the JSON store (default: $JIRABRIDGE_STORE or ~/.jirabridge/store.json)",
    )
    common.add_argument(
        "--key-file",
        default=None,
        help="Path to the token encryption key (default: $JIRABRIDGE_KEY_FILE or ~/.jirabridge/token.key)",
    )
    common.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return common


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jirabridge")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    common = _common_options()

    subparsers = parser.add_subparsers(dest="command", required=True)

    auth_parser = subparsers.add_parser("auth", help="Manage the Jira Cloud connection")
    auth_sub = auth_parser.add_subparsers(dest="auth_command", required=True)
    configure = auth_sub.add_parser("configure", parents=[common], help="Store OAuth client settings")
    configure.add_argument("--client-id", default=None, help="OAuth client id")
    configure.add_argument("--client-secret", default=None, help="OAuth client secret")
    configure.add_argument("--redirect-uri", default=None, help="OAuth redirect URI")
    auth_sub.add_parser("url", parents=[common], help="Print the authorization URL to open in a browser")
    complete = auth_sub.add_parser("complete", parents=[common], help="Finish authorization with the callback values")
    complete.add_argument("code", help="Authorization code from the callback")
    complete.add_argument("state", help="State value from the callback")
    auth_sub.add_parser("status", parents=[common], help="Show settings and connection status")
    auth_sub.add_parser("disconnect", parents=[common], help="Forget the stored connection")

    projects_parser = subparsers.add_parser("projects", help="Browse Jira projects")
    projects_sub = projects_parser.add_subparsers(dest="projects_command", required=True)
    projects_sub.add_parser("list", parents=[common], help="List visible projects")
    statuses = projects_sub.add_parser("statuses", parents=[common], help="List a project's workflow statuses")
    statuses.add_argument("key", help="Project key")
    suggest = projects_sub.add_parser("suggest", parents=[common], help="Suggest status rules for a project")
    suggest.add_argument("key", help="Project key")
    suggest.add_argument("--save", action="store_true", help="Store the suggested rules in the sync config")

    config_parser = subparsers.add_parser("config", help="Sync configuration")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)
    config_sub.add_parser("show", parents=[common], help="Print the sync configuration")
    config_set = config_sub.add_parser("set", parents=[common], help="Update the sync configuration")
    config_set.add_argument("--project", default=None, help="Jira project key")
    config_set.add_argument("--filter", dest="extra_filter", default=None, help="Extra JQL filter")
    config_set.add_argument("--push", action=argparse.BooleanOptionalAction, default=None, help="Push task moves")
    config_set.add_argument("--poll", action=argparse.BooleanOptionalAction, default=None, help="Poll Jira")
    config_set.add_argument("--interval", type=float, default=None, help="Poll interval in minutes")

    import_parser = subparsers.add_parser("import", help="Import Jira issues")
    import_sub = import_parser.add_subparsers(dest="import_command", required=True)
    preview = import_sub.add_parser("preview", parents=[common], help="Show which issues would be imported")
    preview.add_argument("--project", default=None, help="Project key (default: configured project)")
    preview.add_argument("--filter", dest="extra_filter", default=None, help="Extra JQL filter")
    preview.add_argument("--include-existing", action="store_true", help="Also list already imported issues")

    sync_parser = subparsers.add_parser("sync", help="Status synchronization")
    sync_sub = sync_parser.add_subparsers(dest="sync_command", required=True)
    sync_sub.add_parser("check", parents=[common], help="Pull once and list remote status changes")
    history = sync_sub.add_parser("history", parents=[common], help="Show recent sync history")
    history.add_argument("--limit", type=int, default=20, help="Number of entries to show (default: 20)")
    sync_sub.add_parser("clear-history", parents=[common], help="Delete the sync history")
    sync_sub.add_parser("watch", parents=[common], help="Poll Jira until interrupted")

    mappings_parser = subparsers.add_parser("mappings", help="Task to issue mappings")
    mappings_sub = mappings_parser.add_subparsers(dest="mappings_command", required=True)
    mappings_sub.add_parser("list", parents=[common], help="List mappings")
    link = mappings_sub.add_parser("link", parents=[common], help="Link a local task to a Jira issue")
    link.add_argument("local_id", help="Local task id")
    link.add_argument("key", help="Jira issue key")
    unlink = mappings_sub.add_parser("unlink", parents=[common], help="Remove a task's mapping")
    unlink.add_argument("local_id", help="Local task id")

    return parser


__all__ = ["build_parser"]
