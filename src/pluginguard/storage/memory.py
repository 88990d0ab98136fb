"""In-process ResultStore backed by two dicts."""

from __future__ import annotations

import threading

from pluginguard.errors import ResultExistsError
from pluginguard.jobs.models import JobProgress
from pluginguard.scanner.models import ScanResult


class MemoryResultStore:
    """Thread-safe in-memory store; contents are lost on restart."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._progress: dict[str, JobProgress] = {}
        self._results: dict[str, ScanResult] = {}

    async def set_progress(self, job_id: str, progress: JobProgress) -> None:
        with self._lock:
            self._progress[job_id] = progress

    async def get_progress(self, job_id: str) -> JobProgress | None:
        with self._lock:
            return self._progress.get(job_id)

    async def set_result(self, job_id: str, result: ScanResult) -> None:
        with self._lock:
            if job_id in self._results:
                raise ResultExistsError(job_id)
            self._results[job_id] = result

    async def finish(
        self, job_id: str, result: ScanResult, progress: JobProgress
    ) -> None:
        with self._lock:
            if job_id in self._results:
                raise ResultExistsError(job_id)
            self._results[job_id] = result
            self._progress[job_id] = progress

    async def get_result(self, job_id: str) -> ScanResult | None:
        with self._lock:
            return self._results.get(job_id)

    async def list_results(
        self, limit: int = 20, newest_first: bool = True
    ) -> list[ScanResult]:
        if limit <= 0:
            return []
        with self._lock:
            results = list(self._results.values())
        results.sort(key=lambda r: r.scan_date, reverse=newest_first)
        return results[:limit]
