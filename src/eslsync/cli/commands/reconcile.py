"""Reconcile command and summary formatting."""

from __future__ import annotations

import argparse
import json
from collections.abc import Sequence

from eslsync import EslSync, ReconcileError, ReconcileStoreResult
from eslsync.cli.progress.rich import RichReconcileProgress
from eslsync.gateway import DryRunOperation


def format_reconcile_summary(
    results: Sequence[ReconcileStoreResult],
    *,
    dry_run: bool,
    operations: Sequence[DryRunOperation] = (),
) -> str:
    mode = "dry-run" if dry_run else "apply"
    failed = [result for result in results if not result.success]
    lines = [
        "",
        f"eslsync - reconcile complete ({mode})",
        "",
        f"  Stores:    {len(results)} total, {len(failed)} failed",
        f"  Pushed:    {sum(result.pushed for result in results)}",
        f"  Deleted:   {sum(result.deleted for result in results)}",
        f"  Repaired:  {sum(result.repaired for result in results)}",
        f"  Unchanged: {sum(result.unchanged for result in results)}",
    ]

    if results:
        lines.append("")
    for result in results:
        status = "ok" if result.success else "FAILED"
        line = (
            f"  [{status}] {result.store_name} ({result.mode.value}): "
            f"{result.total_expected} expected, {result.total_in_aims} in AIMS"
        )
        if result.truncated:
            line += " (listing truncated)"
        lines.append(line)
        if result.error:
            lines.append(f"         {result.error}")

    if dry_run:
        lines.append("")
        for operation in operations:
            lines.append(
                f"  [dry-run] #{operation.sequence} {operation.name} {len(operation.article_ids)} "
                f"article(s) in store {operation.store_id}"
            )
        lines.append("  [dry-run] No changes were made")

    lines.append("")
    return "\n".join(lines)


def format_reconcile_json(results: Sequence[ReconcileStoreResult], *, dry_run: bool) -> str:
    payload = {
        "dry_run": dry_run,
        "results": [result.model_dump(mode="json") for result in results],
    }
    return json.dumps(payload, indent=2)


async def _reconcile(sync: EslSync, store_id: str | None) -> list[ReconcileStoreResult]:
    if store_id is not None:
        return [await sync.reconcile_store(store_id)]
    return await sync.reconcile_all()


async def run_reconcile(args: argparse.Namespace) -> list[ReconcileStoreResult]:
    import eslsync.cli as cli

    config = cli.load_config(args.config)

    if not args.verbose and not args.json:
        with RichReconcileProgress() as progress:
            async with await cli.EslSync.from_config(config, dry_run=args.dry_run, progress=progress) as sync:
                results = await _reconcile(sync, args.store)
                operations = getattr(sync.gateway, "operations", ())
    else:
        async with await cli.EslSync.from_config(config, dry_run=args.dry_run) as sync:
            results = await _reconcile(sync, args.store)
            operations = getattr(sync.gateway, "operations", ())

    if args.json:
        print(format_reconcile_json(results, dry_run=args.dry_run))
    else:
        print(format_reconcile_summary(results, dry_run=args.dry_run, operations=operations))

    failed = sum(1 for result in results if not result.success)
    if failed:
        raise ReconcileError(f"{failed} of {len(results)} store(s) failed to reconcile")
    return results


__all__ = ["format_reconcile_json", "format_reconcile_summary", "run_reconcile"]
