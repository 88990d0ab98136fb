"""Job data models: stages of the scan state machine and progress snapshots."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class Stage(enum.Enum):
    """Named phase of a scan job."""

    INITIALIZING = "Initializing"
    EXTRACTING = "Extracting"
    CLONING = "Cloning"
    ANALYZING = "Analyzing"
    SCANNING = "Scanning"
    REPORTING = "Reporting"
    COMPLETE = "Complete"
    ERROR = "Error"

    @property
    def terminal(self) -> bool:
        return self in (Stage.COMPLETE, Stage.ERROR)

    def can_advance_to(self, target: Stage) -> bool:
        if self.terminal:
            return False
        if target == Stage.ERROR:
            return True
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[Stage, frozenset[Stage]] = {
    Stage.INITIALIZING: frozenset({Stage.EXTRACTING, Stage.CLONING}),
    Stage.EXTRACTING: frozenset({Stage.ANALYZING}),
    Stage.CLONING: frozenset({Stage.ANALYZING}),
    Stage.ANALYZING: frozenset({Stage.SCANNING}),
    # Scanning re-enters itself for every per-file progress update
    Stage.SCANNING: frozenset({Stage.SCANNING, Stage.REPORTING}),
    Stage.REPORTING: frozenset({Stage.COMPLETE}),
}


@dataclass(frozen=True)
class JobProgress:
    """Snapshot of an in-flight (or finished) job."""

    stage: Stage
    progress: float
    message: str

    @property
    def done(self) -> bool:
        return self.stage.terminal

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage.value,
            "progress": self.progress,
            "message": self.message,
        }
