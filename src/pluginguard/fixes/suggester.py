"""Fix suggester: remediation guidance per finding and per scan."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pluginguard.fixes.templates import FIX_TEMPLATES, FixTemplate
from pluginguard.rules.models import Confidence, Severity
from pluginguard.scanner.models import Finding, FixSuggestion, ScanResult

_URGENCY = {
    Severity.CRITICAL: "immediately address",
    Severity.HIGH: "urgently fix",
    Severity.MEDIUM: "should be resolved",
    Severity.LOW: "consider fixing",
}
_DEFAULT_URGENCY = "review and improve"

# Vulnerability classes common enough that generic advice is still on target
_KNOWN_CLASSES = (
    "sql injection",
    "xss",
    "cross-site scripting",
    "code injection",
    "path traversal",
)

_GENERIC_REFERENCES = (
    "https://owasp.org/www-community/",
    "https://cheatsheetseries.owasp.org/",
)

_UNKNOWN_PRIORITY = len(Severity) + 1


@dataclass(frozen=True)
class Recommendation:
    """A cross-cutting recommendation derived from a whole scan."""

    type: str
    title: str
    description: str
    actions: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "actions": list(self.actions),
        }


def priority_for(severity: Severity | str) -> int:
    """Fix priority: 1 for critical through 5 for info; anything else ranks last."""
    if isinstance(severity, str):
        try:
            severity = Severity(severity)
        except ValueError:
            return _UNKNOWN_PRIORITY
    return severity.rank


def is_known_class(category: str) -> bool:
    lowered = category.lower()
    return any(name in lowered for name in _KNOWN_CLASSES)


class FixSuggester:
    """Maps findings to fix suggestions using templates keyed by rule id."""

    def __init__(self, templates: Mapping[str, FixTemplate] | None = None) -> None:
        self._templates = FIX_TEMPLATES if templates is None else templates

    def has_template(self, rule_id: str) -> bool:
        return rule_id in self._templates

    def suggest(self, finding: Finding) -> FixSuggestion:
        template = self._templates.get(finding.rule_id)
        if template is not None:
            return FixSuggestion(
                title=template.title,
                description=template.description,
                code_example=template.code_example,
                references=template.references,
                confidence=Confidence.HIGH,
                priority=priority_for(finding.severity),
            )
        return self._generic(finding)

    def _generic(self, finding: Finding) -> FixSuggestion:
        urgency = _URGENCY.get(finding.severity, _DEFAULT_URGENCY)
        location = finding.file_path
        if finding.line:
            location += f" at line {finding.line}"

        code_example = (
            f"// Review the code in {location}\n"
            f"// {finding.description}\n"
            "\n"
            "// Consider implementing proper input validation,\n"
            "// output encoding, and security controls."
        )
        confidence = (
            Confidence.MEDIUM if is_known_class(finding.category) else Confidence.LOW
        )
        return FixSuggestion(
            title=f"Fix {finding.category} vulnerability",
            description=(
                f"Recommended action for this {finding.severity.value} "
                f"severity issue: {urgency}."
            ),
            code_example=code_example,
            references=_GENERIC_REFERENCES,
            confidence=confidence,
            priority=priority_for(finding.severity),
        )

    def recommendations(self, result: ScanResult) -> list[Recommendation]:
        """Prioritized recommendations for a whole scan; same input, same output."""
        recommendations: list[Recommendation] = []
        findings = result.findings

        critical = sum(1 for f in findings if f.severity == Severity.CRITICAL)
        if critical:
            recommendations.append(
                Recommendation(
                    type="critical",
                    title="Immediate Action Required",
                    description=(
                        f"Found {critical} critical security issues that need "
                        "immediate attention."
                    ),
                    actions=(
                        "Review all critical issues immediately",
                        "Implement fixes before deploying to production",
                        "Consider temporary workarounds if fixes take time",
                    ),
                )
            )

        high = sum(1 for f in findings if f.severity == Severity.HIGH)
        if high:
            recommendations.append(
                Recommendation(
                    type="high",
                    title="High Priority Security Issues",
                    description=(
                        f"Found {high} high-severity issues that should be "
                        "addressed soon."
                    ),
                    actions=(
                        "Plan fixes for high-priority issues",
                        "Implement additional monitoring",
                        "Review security controls",
                    ),
                )
            )

        if any("sql injection" in f.category.lower() for f in findings):
            recommendations.append(
                Recommendation(
                    type="pattern",
                    title="SQL Injection Vulnerabilities Detected",
                    description=(
                        "SQL injection issues found. Consider implementing a "
                        "comprehensive database security strategy."
                    ),
                    actions=(
                        "Implement parameterized queries across the application",
                        "Add input validation for all database inputs",
                        "Consider using an ORM with built-in protection",
                        "Implement database access controls",
                    ),
                )
            )

        if any(_is_xss(f.category) for f in findings):
            recommendations.append(
                Recommendation(
                    type="pattern",
                    title="Cross-Site Scripting (XSS) Vulnerabilities",
                    description=(
                        "XSS issues detected. Implement proper output encoding "
                        "and input validation."
                    ),
                    actions=(
                        "Implement Content Security Policy (CSP)",
                        "Use proper output encoding for all user-generated content",
                        "Validate and sanitize all user inputs",
                        "Consider using a templating engine with auto-escaping",
                    ),
                )
            )

        return recommendations


def _is_xss(category: str) -> bool:
    lowered = category.lower()
    return "xss" in lowered or "cross-site scripting" in lowered
