"""Scan orchestrator: drives each job through its stages in a background task."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from pluginguard.errors import AcquisitionError, JobStateError
from pluginguard.jobs.models import JobProgress, Stage
from pluginguard.scanner.engine import ScanEngine
from pluginguard.scanner.models import Finding, ResultStatus, ScanResult
from pluginguard.sources.base import ScanSource, SourceKind, SourceProvider, SubjectMetadata
from pluginguard.storage.base import ResultStore

logger = logging.getLogger(__name__)

# Overall progress at the start of each stage
_ACQUIRE_PROGRESS = 20.0
_ANALYZE_PROGRESS = 40.0
_SCAN_PROGRESS = 60.0
_SCAN_SPAN = 30.0
_REPORT_PROGRESS = 95.0
_DONE_PROGRESS = 100.0


@dataclass
class _Job:
    """Orchestrator-private state for one job; only its own task touches it."""

    id: str
    source: ScanSource
    stage: Stage = Stage.INITIALIZING
    progress: float = 0.0
    started: float = field(default_factory=time.time)


class ScanOrchestrator:
    """Owns the per-job state machine and the only writer to each job's store slot."""

    def __init__(
        self,
        store: ResultStore,
        provider: SourceProvider,
        engine: ScanEngine | None = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._engine = engine or ScanEngine()
        self._tasks: dict[str, asyncio.Task[None]] = {}

    @property
    def store(self) -> ResultStore:
        return self._store

    @property
    def engine(self) -> ScanEngine:
        return self._engine

    async def submit_scan(self, source: ScanSource) -> str:
        """Start a job in the background and return its id immediately."""
        job = _Job(id=str(uuid.uuid4()), source=source)
        await self._store.set_progress(
            job.id,
            JobProgress(Stage.INITIALIZING, 0.0, "Starting security scan..."),
        )

        task = asyncio.create_task(self._supervise(job), name=f"scan-{job.id}")
        self._tasks[job.id] = task
        task.add_done_callback(lambda _: self._tasks.pop(job.id, None))
        logger.info("Submitted scan %s for %s", job.id, source.display_name)
        return job.id

    async def get_progress(self, job_id: str) -> JobProgress | None:
        return await self._store.get_progress(job_id)

    async def get_result(self, job_id: str) -> ScanResult | None:
        return await self._store.get_result(job_id)

    async def list_history(self, limit: int = 20) -> list[ScanResult]:
        return await self._store.list_results(limit, newest_first=True)

    @property
    def running(self) -> list[str]:
        return list(self._tasks)

    async def wait(self, job_id: str) -> None:
        """Block until the job reaches a terminal state (no-op if already there)."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.shield(task)

    async def shutdown(self) -> None:
        """Wait for every running job to finish."""
        tasks = list(self._tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _supervise(self, job: _Job) -> None:
        try:
            await self._run(job)
        except Exception:
            # Only reachable when the store itself fails while recording an error
            logger.exception("Scan %s could not record its outcome", job.id)

    async def _run(self, job: _Job) -> None:
        root: Path | None = None
        metadata = SubjectMetadata()
        try:
            root = await self._acquire(job)
            if root is None:
                return
            metadata = await self._analyze(job, root)
            findings = await self._scan(job, root)
            await self._report(job, metadata, findings)
        except Exception as e:
            logger.exception("Scan %s failed during %s", job.id, job.stage.value)
            await self._fail(job, str(e) or type(e).__name__, metadata)
        finally:
            if root is not None:
                await self._cleanup(root)

    async def _acquire(self, job: _Job) -> Path | None:
        if job.source.kind == SourceKind.REPOSITORY:
            await self._advance(
                job, Stage.CLONING, _ACQUIRE_PROGRESS, "Cloning repository..."
            )
        else:
            await self._advance(
                job, Stage.EXTRACTING, _ACQUIRE_PROGRESS, "Extracting plugin files..."
            )

        try:
            return await asyncio.to_thread(self._provider.acquire, job.source)
        except AcquisitionError as e:
            logger.warning("Scan %s: acquisition failed: %s", job.id, e)
            await self._fail(job, str(e) or "Acquisition failed", SubjectMetadata())
            return None

    async def _analyze(self, job: _Job, root: Path) -> SubjectMetadata:
        await self._advance(
            job, Stage.ANALYZING, _ANALYZE_PROGRESS, "Analyzing plugin structure..."
        )
        try:
            return await asyncio.to_thread(self._provider.extract_metadata, root)
        except Exception:
            logger.warning(
                "Scan %s: metadata extraction failed, using defaults",
                job.id,
                exc_info=True,
            )
            return SubjectMetadata()

    async def _scan(self, job: _Job, root: Path) -> list[Finding]:
        await self._advance(
            job, Stage.SCANNING, _SCAN_PROGRESS, "Running security checks..."
        )
        loop = asyncio.get_running_loop()

        def on_progress(fraction: float) -> None:
            # Runs in the worker thread; waiting keeps updates ordered
            future = asyncio.run_coroutine_threadsafe(
                self._advance(
                    job,
                    Stage.SCANNING,
                    _SCAN_PROGRESS + fraction * _SCAN_SPAN,
                    "Scanning for vulnerabilities...",
                ),
                loop,
            )
            future.result()

        return await asyncio.to_thread(self._engine.scan, root, on_progress)

    async def _report(
        self, job: _Job, metadata: SubjectMetadata, findings: list[Finding]
    ) -> None:
        await self._advance(
            job, Stage.REPORTING, _REPORT_PROGRESS, "Finalizing scan results..."
        )
        result = ScanResult(
            job_id=job.id,
            subject_name=metadata.name or job.source.fallback_name,
            subject_version=metadata.version,
            status=ResultStatus.COMPLETED,
            findings=tuple(findings),
            scan_date=job.started,
            duration=time.time() - job.started,
        )
        await self._finish(job, result, Stage.COMPLETE, "Scan completed successfully")
        logger.info(
            "Scan %s complete: %d issues (%d critical)",
            job.id,
            result.total_issues,
            result.critical_issues,
        )

    async def _fail(self, job: _Job, message: str, metadata: SubjectMetadata) -> None:
        if job.stage.terminal:
            return
        if await self._store.get_result(job.id) is not None:
            await self._advance(
                job, Stage.ERROR, _DONE_PROGRESS, f"Scan failed: {message}"
            )
            return
        result = ScanResult(
            job_id=job.id,
            subject_name=metadata.name or job.source.fallback_name,
            subject_version=metadata.version,
            status=ResultStatus.FAILED,
            scan_date=job.started,
            duration=time.time() - job.started,
            error=message,
        )
        await self._finish(job, result, Stage.ERROR, f"Scan failed: {message}")

    async def _finish(
        self, job: _Job, result: ScanResult, stage: Stage, message: str
    ) -> None:
        # Result and terminal progress land together, so pollers never see one alone
        snapshot = self._next(job, stage, _DONE_PROGRESS, message)
        await self._store.finish(job.id, result, snapshot)
        job.stage = stage
        job.progress = snapshot.progress

    async def _advance(
        self, job: _Job, stage: Stage, progress: float, message: str
    ) -> None:
        snapshot = self._next(job, stage, progress, message)
        await self._store.set_progress(job.id, snapshot)
        job.stage = stage
        job.progress = snapshot.progress

    def _next(
        self, job: _Job, stage: Stage, progress: float, message: str
    ) -> JobProgress:
        """Validate a transition and build its snapshot without touching the job."""
        if stage != job.stage and not job.stage.can_advance_to(stage):
            raise JobStateError(
                f"Scan {job.id}: illegal transition {job.stage.value} -> {stage.value}"
            )
        value = max(job.progress, min(progress, _DONE_PROGRESS))
        return JobProgress(stage, round(value, 1), message)

    async def _cleanup(self, root: Path) -> None:
        try:
            await asyncio.to_thread(self._provider.cleanup, root)
        except Exception:
            logger.warning("Cleanup of %s failed", root, exc_info=True)
