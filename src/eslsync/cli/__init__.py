"""Command-line interface for eslsync."""

from __future__ import annotations

import asyncio as asyncio

from eslsync import EslSync as EslSync
from eslsync import load_config as load_config
from eslsync.cli.app import main as main
from eslsync.cli.commands import reconcile as reconcile_command
from eslsync.cli.commands import run as run_command
from eslsync.cli.log_setup import configure_logging as configure_logging
from eslsync.cli.parser import build_parser as build_parser

_format_summary = reconcile_command.format_reconcile_summary
_format_json = reconcile_command.format_reconcile_json

_run_reconcile = reconcile_command.run_reconcile
_run_scheduler = run_command.run_scheduler
