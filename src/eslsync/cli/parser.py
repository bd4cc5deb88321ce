"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("eslsync")
    except PackageNotFoundError:
        return "0.0.0"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default="./eslsync.json", help="Path to eslsync.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-format",
        choices=("text", "json"),
        default="text",
        help="Log output format (default: text)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="eslsync")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile_parser = subparsers.add_parser("reconcile", help="Reconcile AIMS with the database once")
    _add_common_arguments(reconcile_parser)
    reconcile_parser.add_argument("--store", default=None, help="Reconcile a single store by id")
    reconcile_parser.add_argument("--dry-run", action="store_true", help="Preview mode; nothing is written")
    reconcile_parser.add_argument("--json", action="store_true", help="Print results as JSON")

    run_parser = subparsers.add_parser("run", help="Run the periodic reconciliation job until interrupted")
    _add_common_arguments(run_parser)

    return parser


__all__ = ["build_parser"]
