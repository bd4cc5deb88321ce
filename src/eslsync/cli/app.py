"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from eslsync import AuthenticationError, ConfigError, GatewayError, ReconcileError, RepositoryError


def main(argv: list[str] | None = None) -> int:
    import eslsync.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    cli.configure_logging(verbose=args.verbose, format_type=args.log_format)

    try:
        if args.command == "reconcile":
            cli.asyncio.run(cli._run_reconcile(args))
        elif args.command == "run":
            cli.asyncio.run(cli._run_scheduler(args))
        return 0
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except (AuthenticationError, GatewayError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except (RepositoryError, ReconcileError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - defensive fallback
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
