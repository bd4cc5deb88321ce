"""Store-level progress events emitted by ``ReconcileEngine.reconcile_all``.

A pass over all eligible stores is one ``Reconcile`` phase whose total is the
store count; each finished store, successful or not, advances it by one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ReconcileProgress(ABC):
    """Receives the store-count events of one reconciliation pass."""

    @abstractmethod
    def phase_start(self, phase: str, total: int | None = None) -> None:
        """A pass over *total* eligible stores is starting."""
        ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: str) -> None:
        """One store finished reconciling, whatever its outcome."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_done(self, phase: str) -> None:
        """Every store in the pass has been reconciled."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: str, error: BaseException) -> None:
        """The pass was cancelled or crashed outside per-store handling."""
        ...  # pragma: no cover


class NullReconcileProgress(ReconcileProgress):
    """Discards events; the engine default when no progress is passed."""

    def phase_start(self, phase: str, total: int | None = None) -> None:
        pass

    def item_done(self, phase: str) -> None:
        pass

    def phase_done(self, phase: str) -> None:
        pass

    def phase_error(self, phase: str, error: BaseException) -> None:
        pass
