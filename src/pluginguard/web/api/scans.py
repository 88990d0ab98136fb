"""REST API for scan submission, progress, results and history."""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pluginguard.fixes.suggester import FixSuggester
from pluginguard.sources.base import ScanSource

router = APIRouter(tags=["scans"])

ALLOWED_EXTENSIONS = (".zip", ".tar", ".gz", ".tgz")
_CHUNK_SIZE = 1024 * 1024


class RepositoryScanRequest(BaseModel):
    url: str = ""


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


@router.post("/scan/upload")
async def upload_scan(request: Request, plugin: UploadFile | None = File(None)):
    if plugin is None or not plugin.filename:
        return _error(400, "No file uploaded")

    original_name = Path(plugin.filename).name
    if (
        not original_name.lower().endswith(ALLOWED_EXTENSIONS)
        and plugin.content_type != "application/zip"
    ):
        return _error(400, "Only archive files are allowed")

    config = request.app.state.config
    upload_dir = config.work_dir / "uploads"
    await asyncio.to_thread(upload_dir.mkdir, parents=True, exist_ok=True)
    archive_path = upload_dir / f"{uuid.uuid4().hex}-{original_name}"

    if not await _save_upload(plugin, archive_path, config.max_upload_size):
        return _error(400, "File too large")

    source = ScanSource.upload(archive_path, original_name, remove_archive=True)
    scan_id = await request.app.state.orchestrator.submit_scan(source)
    return {
        "success": True,
        "scan_id": scan_id,
        "message": "Scan initiated successfully",
    }


async def _save_upload(upload: UploadFile, path: Path, max_size: int) -> bool:
    """Stream the upload to disk off the event loop; False (and no file) if too big."""
    written = 0
    out = await asyncio.to_thread(path.open, "wb")
    try:
        while True:
            chunk = await upload.read(_CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > max_size:
                break
            await asyncio.to_thread(out.write, chunk)
    finally:
        await asyncio.to_thread(out.close)

    if written > max_size:
        await asyncio.to_thread(path.unlink, missing_ok=True)
        return False
    return True


@router.post("/scan/repository")
async def repository_scan(body: RepositoryScanRequest, request: Request):
    url = body.url.strip()
    if not url:
        return _error(400, "Repository URL is required")

    scan_id = await request.app.state.orchestrator.submit_scan(
        ScanSource.repository(url)
    )
    return {
        "success": True,
        "scan_id": scan_id,
        "message": "Repository scan initiated successfully",
    }


@router.get("/scan/{scan_id}/progress")
async def scan_progress(scan_id: str, request: Request):
    progress = await request.app.state.orchestrator.get_progress(scan_id)
    if progress is None:
        return _error(404, "Scan not found")
    return {"success": True, "data": progress.to_dict()}


@router.get("/scan/{scan_id}/results")
async def scan_results(scan_id: str, request: Request):
    orchestrator = request.app.state.orchestrator
    result = await orchestrator.get_result(scan_id)
    if result is not None:
        return {"success": True, "data": result.to_dict()}

    progress = await orchestrator.get_progress(scan_id)
    if progress is None:
        return _error(404, "Scan results not found")
    return JSONResponse(
        status_code=202,
        content={
            "success": False,
            "error": "Scan still running",
            "data": progress.to_dict(),
        },
    )


@router.get("/scan/{scan_id}/recommendations")
async def scan_recommendations(scan_id: str, request: Request):
    result = await request.app.state.orchestrator.get_result(scan_id)
    if result is None:
        return _error(404, "Scan results not found")
    recommendations = FixSuggester().recommendations(result)
    return {"success": True, "data": [r.to_dict() for r in recommendations]}


@router.get("/scans/history")
async def scan_history(request: Request, limit: int | None = None):
    config = request.app.state.config
    limit = config.history_limit if limit is None else max(0, limit)
    history = await request.app.state.orchestrator.list_history(limit)
    return {"success": True, "data": [r.to_dict() for r in history]}


@router.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
