"""Scanner data models: findings, fix suggestions and scan results."""

from __future__ import annotations

import enum
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pluginguard.rules.models import Confidence, Severity


class ResultStatus(enum.Enum):
    """Terminal outcome of a scan job."""

    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class FixSuggestion:
    """Remediation guidance attached to a finding."""

    title: str
    description: str
    code_example: str
    references: tuple[str, ...]
    confidence: Confidence
    priority: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "code_example": self.code_example,
            "references": list(self.references),
            "confidence": self.confidence.value,
            "priority": self.priority,
        }


@dataclass
class Finding:
    """A single rule match in one file.

    Everything needed to display the finding is copied from the rule when it
    is created, so a finding stays valid on its own.
    """

    rule_id: str
    title: str
    description: str
    severity: Severity
    category: str
    file_path: str
    line: int
    column: int
    code: str
    confidence: Confidence
    cwe: str | None = None
    owasp: str | None = None
    suggested_fix: str | None = None
    references: tuple[str, ...] = ()
    fix: FixSuggestion | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "rule_id": self.rule_id,
            "title": self.title,
            "description": self.description,
            "severity": self.severity.value,
            "category": self.category,
            "file": self.file_path,
            "line": self.line,
            "column": self.column,
            "code": self.code,
            "cwe": self.cwe,
            "owasp": self.owasp,
            "confidence": self.confidence.value,
            "suggested_fix": self.suggested_fix,
            "references": list(self.references),
            "fix": self.fix.to_dict() if self.fix else None,
        }


@dataclass(frozen=True)
class ScanResult:
    """Terminal artifact of a scan job.

    Severity counts are derived from ``findings`` so they can never disagree
    with the finding list.
    """

    job_id: str
    subject_name: str
    status: ResultStatus
    findings: tuple[Finding, ...] = ()
    subject_version: str | None = None
    scan_date: float = field(default_factory=time.time)
    duration: float = 0.0
    error: str | None = None

    def count(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity == severity)

    @property
    def total_issues(self) -> int:
        return len(self.findings)

    @property
    def critical_issues(self) -> int:
        return self.count(Severity.CRITICAL)

    @property
    def high_issues(self) -> int:
        return self.count(Severity.HIGH)

    @property
    def medium_issues(self) -> int:
        return self.count(Severity.MEDIUM)

    @property
    def low_issues(self) -> int:
        return self.count(Severity.LOW)

    @property
    def info_issues(self) -> int:
        return self.count(Severity.INFO)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.job_id,
            "subject_name": self.subject_name,
            "subject_version": self.subject_version,
            "scan_date": datetime.fromtimestamp(self.scan_date, tz=timezone.utc).isoformat(),
            "duration": round(self.duration, 3),
            "total_issues": self.total_issues,
            "critical_issues": self.critical_issues,
            "high_issues": self.high_issues,
            "medium_issues": self.medium_issues,
            "low_issues": self.low_issues,
            "info_issues": self.info_issues,
            "issues": [f.to_dict() for f in self.findings],
            "status": self.status.value,
            "error": self.error,
        }
