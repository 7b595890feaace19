"""Progress reporting protocol for the import pipeline.

The pipeline emits phase lifecycle events; consumers (e.g. the CLI's Rich
progress bar) implement ``ImportProgress`` to render feedback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ImportProgress(ABC):
    """Observer interface for import progress events."""

    @abstractmethod
    def phase_start(self, phase: str, total: int | None = None) -> None:
        """A phase is starting. *total* is ``None`` for indeterminate phases."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_total(self, phase: str, completed: int, total: int) -> None:
        """The size of *phase* became known or changed."""
        ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: str) -> None:
        """One item within *phase* has completed."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_done(self, phase: str) -> None:
        """The *phase* has finished successfully."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: str, error: BaseException) -> None:
        """The *phase* was interrupted by *error*."""
        ...  # pragma: no cover


class NullImportProgress(ImportProgress):
    def phase_start(self, phase: str, total: int | None = None) -> None:
        return None

    def phase_total(self, phase: str, completed: int, total: int) -> None:
        return None

    def item_done(self, phase: str) -> None:
        return None

    def phase_done(self, phase: str) -> None:
        return None

    def phase_error(self, phase: str, error: BaseException) -> None:
        return None
