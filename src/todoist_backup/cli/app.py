"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from todoist_backup.contracts.exceptions import (
    AuthenticationError,
    ConfigError,
    GatewayError,
    SourceError,
    SyncError,
)
from todoist_backup.contracts.sync import SyncStatus


def main(argv: list[str] | None = None) -> int:
    import todoist_backup.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    level = cli.logging.DEBUG if args.verbose else cli.logging.WARNING
    cli.logging.basicConfig(level=level, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        if args.command == "sync":
            outcome = cli.asyncio.run(cli._run_sync(args))
        elif args.command == "watch":
            outcome = cli.asyncio.run(cli._run_watch(args))
        else:  # pragma: no cover
            print(f"error: unsupported command: {args.command}", file=sys.stderr)
            return 2
    except KeyboardInterrupt:
        print("stopped", file=sys.stderr)
        return 0
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except (AuthenticationError, SourceError, GatewayError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except SyncError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover
        print(f"error: {exc}", file=sys.stderr)
        return 1

    return 0 if outcome.status == SyncStatus.COMPLETED else 2


__all__ = ["main"]
