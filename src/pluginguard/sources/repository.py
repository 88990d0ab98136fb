"""Shallow git clones for repository scans."""

from __future__ import annotations

import logging
from pathlib import Path

from pluginguard.errors import AcquisitionError

logger = logging.getLogger(__name__)


def clone_repository(repo_url: str, dest_dir: str | Path) -> Path:
    """Shallow-clone ``repo_url`` into ``dest_dir`` and return it."""
    # GitPython needs a git binary at import time, so load it lazily
    try:
        from git import Repo
        from git.exc import GitCommandError
    except ImportError as e:
        raise AcquisitionError(f"Failed to clone repository: git unavailable ({e})") from e

    dest_dir = Path(dest_dir)
    try:
        Repo.clone_from(repo_url, dest_dir, depth=1)
    except GitCommandError as e:
        raise AcquisitionError(f"Failed to clone repository: {e.stderr.strip() or e}") from e
    logger.info("Cloned %s into %s", repo_url, dest_dir)
    return dest_dir
