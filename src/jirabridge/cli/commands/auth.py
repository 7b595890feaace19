"""Auth commands."""

from __future__ import annotations

import argparse

from jirabridge.cli.common import format_optional
from jirabridge.contracts.connection import AuthorizationResult, ConnectionInfo, MaskedSettings
from jirabridge.contracts.exceptions import ConfigurationError


def format_settings(settings: MaskedSettings) -> str:
    return "\n".join(
        [
            f"  Client ID:     {format_optional(settings.client_id)}",
            f"  Client secret: {settings.client_secret if settings.has_secret else '-'}",
            f"  Redirect URI:  {settings.redirect_uri}",
        ]
    )


def format_status(settings: MaskedSettings, info: ConnectionInfo | None) -> str:
    lines = ["", "jirabridge - auth status", "", format_settings(settings), ""]
    if info is None:
        lines.append("  Connection:    not connected")
    else:
        lines.extend(
            [
                f"  Site:          {info.site_name} ({info.site_url})",
                f"  Cloud ID:      {info.cloud_id}",
                f"  Connected at:  {info.connected_at.isoformat()}",
                f"  Token expiry:  {info.token_expiry.isoformat()}",
            ]
        )
    lines.append("")
    return "\n".join(lines)


def format_authorization(result: AuthorizationResult) -> str:
    lines = ["", f"Connected to {result.site.name} ({result.site.url})"]
    others = [site for site in result.sites if site.id != result.site.id]
    if others:
        lines.append("  Other accessible sites (not used):")
        lines.extend(f"    {site.name} ({site.url})" for site in others)
    lines.append("")
    return "\n".join(lines)


async def run_auth(args: argparse.Namespace) -> None:
    import jirabridge.cli as cli

    async with cli.open_connector(args) as jira:
        credentials = jira.credentials
        if args.auth_command == "configure":
            current = await credentials.get_settings()
            changes = {
                "client_id": args.client_id,
                "client_secret": args.client_secret,
                "redirect_uri": args.redirect_uri,
            }
            updated = current.model_copy(update={key: value for key, value in changes.items() if value is not None})
            await credentials.save_settings(updated)
            print(format_settings(await credentials.get_masked_settings()))
        elif args.auth_command == "url":
            print(await credentials.build_authorization_url())
        elif args.auth_command == "complete":
            print(format_authorization(await credentials.complete_authorization(args.code, args.state)))
        elif args.auth_command == "status":
            settings = await credentials.get_masked_settings()
            print(format_status(settings, await credentials.get_connection_info()))
        elif args.auth_command == "disconnect":
            await credentials.disconnect()
            print("Disconnected from Jira")
        else:
            raise ConfigurationError(f"unsupported auth command: {args.auth_command}")


__all__ = ["format_authorization", "format_settings", "format_status", "run_auth"]
