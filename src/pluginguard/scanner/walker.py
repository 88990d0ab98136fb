"""Corpus walker: enumerates the source files eligible for scanning."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

# Directories to always skip (exact name match)
SKIP_DIRS = frozenset(
    {
        "node_modules",
        "bower_components",
        "vendor",
        ".git",
        ".hg",
        ".svn",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".tox",
        ".venv",
        "venv",
        "dist",
        "build",
    }
)

# Source extensions worth scanning
SOURCE_EXTENSIONS = frozenset(
    {
        ".js",
        ".jsx",
        ".ts",
        ".tsx",
        ".php",
        ".py",
        ".java",
        ".go",
        ".rb",
        ".cs",
        ".cpp",
        ".c",
        ".h",
    }
)

# Max file size to scan (1 MB)
DEFAULT_MAX_FILE_SIZE = 1_048_576


class CorpusWalker:
    """Yields eligible files under a root in a stable, sorted order."""

    def __init__(
        self,
        skip_dirs: Iterable[str] = SKIP_DIRS,
        extensions: Iterable[str] = SOURCE_EXTENSIONS,
        max_file_size: int | None = DEFAULT_MAX_FILE_SIZE,
    ) -> None:
        self._skip_dirs = frozenset(skip_dirs)
        self._extensions = frozenset(ext.lower() for ext in extensions)
        self._max_file_size = max_file_size

    def walk(self, root: str | Path) -> Iterator[Path]:
        root = Path(root)
        for dirpath, dirs, files in os.walk(root):
            # Prune skipped directories in-place; sorting keeps the walk deterministic
            dirs[:] = sorted(d for d in dirs if d not in self._skip_dirs)

            for name in sorted(files):
                path = Path(dirpath) / name
                if path.suffix.lower() not in self._extensions:
                    continue
                # Links may point outside the root; only regular files are scanned
                if path.is_symlink():
                    logger.debug("Skipping symlink %s", path)
                    continue
                if not path.is_file():
                    continue
                if self._max_file_size is not None:
                    try:
                        size = path.stat().st_size
                    except OSError as e:
                        logger.debug("Skipping %s: %s", path, e)
                        continue
                    if size > self._max_file_size:
                        logger.debug("Skipping %s: %d bytes exceeds limit", path, size)
                        continue
                yield path

    def collect(self, root: str | Path) -> list[Path]:
        return list(self.walk(root))
