"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from jirabridge.contracts.exceptions import (
    AuthenticationError,
    ConfigurationError,
    JiraBridgeError,
    RemoteApiError,
    StorageError,
)


def main(argv: list[str] | None = None) -> int:
    import jirabridge.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        cli.asyncio.run(cli.COMMANDS[args.command](args))
        return 0
    except (ConfigurationError, StorageError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except (AuthenticationError, RemoteApiError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except JiraBridgeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
