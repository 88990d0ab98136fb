"""SourceProvider protocol and the records it exchanges with the orchestrator."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol, runtime_checkable

ARCHIVE_SUFFIXES = (".tar.gz", ".tgz", ".tar", ".zip", ".gz")


class SourceKind(enum.Enum):
    """Where the code to scan comes from."""

    UPLOAD = "upload"
    REPOSITORY = "repository"


@dataclass(frozen=True)
class ScanSource:
    """A request to scan an uploaded archive or a remote repository."""

    kind: SourceKind
    location: str
    display_name: str = ""
    # Delete the archive at ``location`` during cleanup
    remove_archive: bool = False

    @classmethod
    def upload(
        cls,
        archive_path: str | Path,
        original_name: str | None = None,
        remove_archive: bool = False,
    ) -> ScanSource:
        archive_path = Path(archive_path)
        return cls(
            kind=SourceKind.UPLOAD,
            location=str(archive_path),
            display_name=original_name or archive_path.name,
            remove_archive=remove_archive,
        )

    @classmethod
    def repository(cls, url: str) -> ScanSource:
        return cls(kind=SourceKind.REPOSITORY, location=url, display_name=url)

    @property
    def fallback_name(self) -> str:
        """Subject name to use when no metadata file names the project."""
        name = PurePosixPath(self.display_name.rstrip("/")).name or self.location
        if self.kind == SourceKind.REPOSITORY:
            return name[: -len(".git")] if name.endswith(".git") else name
        lowered = name.lower()
        for suffix in ARCHIVE_SUFFIXES:
            if lowered.endswith(suffix):
                return name[: -len(suffix)]
        return name


@dataclass(frozen=True)
class SubjectMetadata:
    """Best-effort identity of the scanned project."""

    name: str | None = None
    version: str | None = None
    description: str | None = None
    author: str | None = None
    license: str | None = None


@runtime_checkable
class SourceProvider(Protocol):
    """Collaborator that turns a ScanSource into a directory and back."""

    def acquire(self, source: ScanSource) -> Path:
        """Materialize the source on disk. Raises AcquisitionError."""
        ...

    def extract_metadata(self, root: Path) -> SubjectMetadata:
        """Recover name/version; never raises."""
        ...

    def cleanup(self, root: Path) -> None:
        """Remove everything ``acquire`` created for ``root``; never raises."""
        ...
