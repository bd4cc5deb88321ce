"""Long-running scheduler command."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal

_LOG = logging.getLogger(__name__)

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _install_signal_handlers(stop_event: asyncio.Event) -> list[signal.Signals]:
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in _STOP_SIGNALS:
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform; KeyboardInterrupt still stops the loop.
            continue
        installed.append(sig)
    return installed


async def run_scheduler(args: argparse.Namespace, *, stop_event: asyncio.Event | None = None) -> None:
    import eslsync.cli as cli

    config = cli.load_config(args.config)
    stop_event = stop_event or asyncio.Event()
    installed = _install_signal_handlers(stop_event)
    try:
        async with await cli.EslSync.from_config(config) as sync:
            _LOG.info("eslsync scheduler running; press Ctrl+C to stop")
            await sync.run(stop_event)
    finally:
        loop = asyncio.get_running_loop()
        for sig in installed:
            loop.remove_signal_handler(sig)
    _LOG.info("eslsync scheduler stopped")


__all__ = ["run_scheduler"]
