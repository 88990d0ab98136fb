"""ResultStore protocol: every storage backend must satisfy this."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pluginguard.jobs.models import JobProgress
from pluginguard.scanner.models import ScanResult


@runtime_checkable
class ResultStore(Protocol):
    """Keyed storage for in-flight progress and terminal results.

    Unknown job ids are reported as ``None``, never as an error, so a caller
    can tell "unknown job" (no progress) from "still running" (progress but
    no result).
    """

    async def set_progress(self, job_id: str, progress: JobProgress) -> None:
        ...

    async def get_progress(self, job_id: str) -> JobProgress | None:
        ...

    async def set_result(self, job_id: str, result: ScanResult) -> None:
        """Store the terminal result. Raises ResultExistsError on a second write."""
        ...

    async def finish(
        self, job_id: str, result: ScanResult, progress: JobProgress
    ) -> None:
        """Store the terminal result and its final progress as one write.

        Readers see either neither or both. Raises ResultExistsError, leaving
        progress untouched, when a result is already stored.
        """
        ...

    async def get_result(self, job_id: str) -> ScanResult | None:
        ...

    async def list_results(
        self, limit: int = 20, newest_first: bool = True
    ) -> list[ScanResult]:
        """At most ``limit`` results ordered by scan date."""
        ...
