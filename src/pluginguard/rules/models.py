"""Rule data models: immutable records shared by the matcher and the fix suggester."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field


class Severity(enum.Enum):
    """Finding severity, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        """1 for critical through 5 for info."""
        return _SEVERITY_RANKS[self]


_SEVERITY_RANKS = {
    Severity.CRITICAL: 1,
    Severity.HIGH: 2,
    Severity.MEDIUM: 3,
    Severity.LOW: 4,
    Severity.INFO: 5,
}


class Confidence(enum.Enum):
    """How likely a finding or a fix suggestion is to be accurate."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Rule:
    """A named detection pattern with severity and remediation metadata."""

    id: str
    pattern: str
    severity: Severity
    category: str
    title: str
    description: str
    cwe: str | None = None
    owasp: str | None = None
    suggested_fix: str | None = None
    references: tuple[str, ...] = ()
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Compiled once here so a bad pattern fails at catalog construction
        object.__setattr__(self, "regex", re.compile(self.pattern, re.IGNORECASE))
