"""Gateway implementations."""

from eslsync.gateway.aims import AimsGateway
from eslsync.gateway.dry_run import DryRunGateway, DryRunOperation

__all__ = ["AimsGateway", "DryRunGateway", "DryRunOperation"]
