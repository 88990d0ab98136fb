"""Filesystem-backed SourceProvider used by the CLI and the web app."""

from __future__ import annotations

import logging
import shutil
import tempfile
import threading
from pathlib import Path

from pluginguard.errors import AcquisitionError
from pluginguard.sources.archive import extract_archive
from pluginguard.sources.base import ScanSource, SourceKind, SubjectMetadata
from pluginguard.sources.metadata import extract_metadata
from pluginguard.sources.repository import clone_repository

logger = logging.getLogger(__name__)


class LocalSourceProvider:
    """Extracts or clones each source into its own workspace under ``work_dir``."""

    def __init__(self, work_dir: str | Path | None = None) -> None:
        self._work_dir = Path(work_dir) if work_dir else None
        self._lock = threading.Lock()
        # scan root -> paths to delete on cleanup
        self._owned: dict[Path, list[Path]] = {}

    def acquire(self, source: ScanSource) -> Path:
        if self._work_dir is not None:
            self._work_dir.mkdir(parents=True, exist_ok=True)
        workspace = Path(
            tempfile.mkdtemp(prefix="pluginguard_", dir=self._work_dir)
        )
        owned = [workspace]
        if source.remove_archive:
            owned.append(Path(source.location))

        try:
            if source.kind == SourceKind.UPLOAD:
                root = extract_archive(source.location, workspace / "src")
            elif source.kind == SourceKind.REPOSITORY:
                root = clone_repository(source.location, workspace / "repo")
            else:
                raise AcquisitionError(f"Unsupported source kind: {source.kind}")
        except BaseException:
            _remove_all(owned)
            raise

        with self._lock:
            self._owned[root] = owned
        return root

    def extract_metadata(self, root: Path) -> SubjectMetadata:
        try:
            return extract_metadata(root)
        except Exception:
            logger.warning("Metadata extraction failed for %s", root, exc_info=True)
            return SubjectMetadata()

    def cleanup(self, root: Path) -> None:
        with self._lock:
            owned = self._owned.pop(root, [])
        _remove_all(owned)


def _remove_all(paths: list[Path]) -> None:
    for path in paths:
        try:
            if path.is_dir():
                shutil.rmtree(path)
            elif path.exists():
                path.unlink()
        except OSError as e:
            logger.warning("Error cleaning up %s: %s", path, e)
