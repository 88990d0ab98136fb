"""Archive extraction for uploaded bundles."""

from __future__ import annotations

import logging
import os
import tarfile
import zipfile
from pathlib import Path

from pluginguard.errors import AcquisitionError

logger = logging.getLogger(__name__)


def extract_archive(archive_path: str | Path, dest_dir: str | Path) -> Path:
    """Extract a zip or tar archive and return the root directory to scan.

    If the archive contains a single top-level directory (common when zipping
    a project folder), descend into it automatically.
    """
    archive_path = Path(archive_path)
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)

    try:
        if zipfile.is_zipfile(archive_path):
            _extract_zip(archive_path, dest_dir)
        elif tarfile.is_tarfile(archive_path):
            with tarfile.open(archive_path, "r:*") as tf:
                tf.extractall(dest_dir, filter="data")
        else:
            raise AcquisitionError(
                f"Unsupported archive format: {archive_path.name}. "
                "Supported formats: .zip, .tar.gz, .tgz, .tar"
            )
    except (OSError, zipfile.BadZipFile, tarfile.TarError) as e:
        raise AcquisitionError(f"Failed to extract archive: {e}") from e

    logger.info("Extracted %s to %s", archive_path.name, dest_dir)

    # Auto-descend into single top-level directory
    entries = [e for e in os.listdir(dest_dir) if not e.startswith(".")]
    if len(entries) == 1:
        single = dest_dir / entries[0]
        if single.is_dir():
            return single

    return dest_dir


def _extract_zip(archive_path: Path, dest_dir: Path) -> None:
    base = dest_dir.resolve()
    with zipfile.ZipFile(archive_path, "r") as zf:
        for member in zf.infolist():
            target = (base / member.filename).resolve()
            if target != base and not target.is_relative_to(base):
                raise AcquisitionError(
                    f"Failed to extract archive: entry {member.filename!r} "
                    "escapes the extraction directory"
                )
        zf.extractall(base)
