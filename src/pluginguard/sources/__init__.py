"""Acquisition collaborators: archive extraction, git clone, metadata and cleanup."""

from pluginguard.sources.base import (
    ScanSource,
    SourceKind,
    SourceProvider,
    SubjectMetadata,
)
from pluginguard.sources.local import LocalSourceProvider

__all__ = [
    "LocalSourceProvider",
    "ScanSource",
    "SourceKind",
    "SourceProvider",
    "SubjectMetadata",
]
