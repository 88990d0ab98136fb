"""Persistent ResultStore on SQLite via aiosqlite."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import aiosqlite

from pluginguard.errors import ResultExistsError
from pluginguard.jobs.models import JobProgress, Stage
from pluginguard.rules.models import Confidence, Severity
from pluginguard.scanner.models import Finding, FixSuggestion, ResultStatus, ScanResult
from pluginguard.storage.db import get_db


class SqliteResultStore:
    """ResultStore that survives restarts.

    Reads and writes share one lock on the single connection, so readers
    never see a result or its final progress half written.
    """

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    @classmethod
    async def open(cls, db_path: str | Path) -> SqliteResultStore:
        return cls(await get_db(db_path))

    async def close(self) -> None:
        await self._db.close()

    async def set_progress(self, job_id: str, progress: JobProgress) -> None:
        async with self._lock:
            await self._write_progress(job_id, progress)
            await self._db.commit()

    async def get_progress(self, job_id: str) -> JobProgress | None:
        async with self._lock:
            cursor = await self._db.execute(
                "SELECT * FROM scan_progress WHERE job_id = ?", (job_id,)
            )
            row = await cursor.fetchone()
        if not row:
            return None
        return JobProgress(
            stage=Stage(row["stage"]),
            progress=row["progress"],
            message=row["message"],
        )

    async def set_result(self, job_id: str, result: ScanResult) -> None:
        async with self._lock:
            await self._ensure_no_result(job_id)
            try:
                await self._write_result(job_id, result)
                await self._db.commit()
            except BaseException:
                await self._db.rollback()
                raise

    async def finish(
        self, job_id: str, result: ScanResult, progress: JobProgress
    ) -> None:
        async with self._lock:
            await self._ensure_no_result(job_id)
            try:
                await self._write_result(job_id, result)
                await self._write_progress(job_id, progress)
                await self._db.commit()
            except BaseException:
                await self._db.rollback()
                raise

    async def _ensure_no_result(self, job_id: str) -> None:
        cursor = await self._db.execute(
            "SELECT 1 FROM scan_results WHERE id = ?", (job_id,)
        )
        if await cursor.fetchone():
            raise ResultExistsError(job_id)

    async def _write_progress(self, job_id: str, progress: JobProgress) -> None:
        await self._db.execute(
            "INSERT OR REPLACE INTO scan_progress "
            "(job_id, stage, progress, message) VALUES (?, ?, ?, ?)",
            (job_id, progress.stage.value, progress.progress, progress.message),
        )

    async def _write_result(self, job_id: str, result: ScanResult) -> None:
        await self._db.execute(
            "INSERT INTO scan_results "
            "(id, subject_name, subject_version, status, error, "
            "duration, scan_date) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                job_id,
                result.subject_name,
                result.subject_version,
                result.status.value,
                result.error,
                result.duration,
                result.scan_date,
            ),
        )
        await self._db.executemany(
            "INSERT INTO scan_findings "
            "(id, scan_id, position, rule_id, title, description, "
            "severity, category, file_path, line, col, code, "
            "confidence, cwe, owasp, suggested_fix, refs, fix) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                (
                    f.id,
                    job_id,
                    position,
                    f.rule_id,
                    f.title,
                    f.description,
                    f.severity.value,
                    f.category,
                    f.file_path,
                    f.line,
                    f.column,
                    f.code,
                    f.confidence.value,
                    f.cwe,
                    f.owasp,
                    f.suggested_fix,
                    json.dumps(list(f.references)),
                    json.dumps(f.fix.to_dict()) if f.fix else None,
                )
                for position, f in enumerate(result.findings)
            ],
        )

    async def get_result(self, job_id: str) -> ScanResult | None:
        async with self._lock:
            return await self._read_result(job_id)

    async def list_results(
        self, limit: int = 20, newest_first: bool = True
    ) -> list[ScanResult]:
        if limit <= 0:
            return []
        order = "DESC" if newest_first else "ASC"
        async with self._lock:
            cursor = await self._db.execute(
                f"SELECT id FROM scan_results ORDER BY scan_date {order} LIMIT ?",
                (limit,),
            )
            ids = [row["id"] async for row in cursor]

            results: list[ScanResult] = []
            for job_id in ids:
                result = await self._read_result(job_id)
                if result is not None:
                    results.append(result)
            return results

    async def _read_result(self, job_id: str) -> ScanResult | None:
        cursor = await self._db.execute(
            "SELECT * FROM scan_results WHERE id = ?", (job_id,)
        )
        row = await cursor.fetchone()
        if not row:
            return None

        cursor = await self._db.execute(
            "SELECT * FROM scan_findings WHERE scan_id = ? ORDER BY position",
            (job_id,),
        )
        findings = tuple([_finding_from_row(r) async for r in cursor])
        return ScanResult(
            job_id=row["id"],
            subject_name=row["subject_name"],
            subject_version=row["subject_version"],
            status=ResultStatus(row["status"]),
            error=row["error"],
            duration=row["duration"],
            scan_date=row["scan_date"],
            findings=findings,
        )


def _finding_from_row(row: aiosqlite.Row) -> Finding:
    fix = None
    if row["fix"]:
        data = json.loads(row["fix"])
        fix = FixSuggestion(
            title=data["title"],
            description=data["description"],
            code_example=data["code_example"],
            references=tuple(data["references"]),
            confidence=Confidence(data["confidence"]),
            priority=int(data["priority"]),
        )
    return Finding(
        id=row["id"],
        rule_id=row["rule_id"],
        title=row["title"],
        description=row["description"],
        severity=Severity(row["severity"]),
        category=row["category"],
        file_path=row["file_path"],
        line=row["line"],
        column=row["col"],
        code=row["code"],
        confidence=Confidence(row["confidence"]),
        cwe=row["cwe"],
        owasp=row["owasp"],
        suggested_fix=row["suggested_fix"],
        references=tuple(json.loads(row["refs"])),
        fix=fix,
    )
