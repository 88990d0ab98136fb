"""Scan engine: orchestrates rule matching across a corpus."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from pluginguard.fixes.suggester import FixSuggester
from pluginguard.rules.catalog import RuleCatalog
from pluginguard.scanner import matcher
from pluginguard.scanner.models import Finding
from pluginguard.scanner.walker import CorpusWalker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class BinaryFileError(ValueError):
    """File content is not text."""


class ScanEngine:
    """Runs the rule catalog over every eligible file under a root directory."""

    def __init__(
        self,
        catalog: RuleCatalog | None = None,
        suggester: FixSuggester | None = None,
        walker: CorpusWalker | None = None,
    ) -> None:
        self._catalog = catalog or RuleCatalog.default()
        self._suggester = suggester or FixSuggester()
        self._walker = walker or CorpusWalker()

    @property
    def catalog(self) -> RuleCatalog:
        return self._catalog

    def scan(
        self,
        root: str | Path,
        on_progress: ProgressCallback | None = None,
    ) -> list[Finding]:
        """Scan a directory tree and return all findings in walk order."""
        root = Path(root).resolve()
        files = self._walker.collect(root)
        total = len(files)
        logger.info("Scanning %d files under %s", total, root)

        findings: list[Finding] = []
        if total == 0 and on_progress:
            on_progress(1.0)

        for done, file_path in enumerate(files, start=1):
            try:
                file_findings = self.scan_file(file_path, root)
            except (OSError, ValueError) as e:
                logger.warning("Skipping %s: %s", file_path, e)
            else:
                logger.debug("%d findings in %s", len(file_findings), file_path)
                findings.extend(file_findings)

            if on_progress:
                on_progress(done / total)

        logger.info("Scan of %s complete: %d findings", root, len(findings))
        return findings

    def scan_file(self, file_path: Path, root: Path) -> list[Finding]:
        """Findings for one file, ordered by line, column, then catalog order."""
        data = file_path.read_bytes()
        if b"\x00" in data:
            raise BinaryFileError("binary content")
        text = data.decode("utf-8")
        return self.scan_text(text, file_path.relative_to(root).as_posix())

    def scan_text(self, text: str, relative_path: str) -> list[Finding]:
        findings: list[Finding] = []
        for raw in matcher.match(text, self._catalog.rules()):
            finding = self._build_finding(text, relative_path, raw)
            fix = self._suggester.suggest(finding)
            finding.suggested_fix = fix.code_example
            finding.fix = fix
            findings.append(finding)

        findings.sort(
            key=lambda f: (f.line, f.column, self._catalog.index_of(f.rule_id))
        )
        return findings

    @staticmethod
    def _build_finding(text: str, relative_path: str, raw: matcher.RawMatch) -> Finding:
        rule = raw.rule
        line, column = matcher.locate(text, raw.offset)
        return Finding(
            rule_id=rule.id,
            title=rule.title,
            description=rule.description,
            severity=rule.severity,
            category=rule.category,
            file_path=relative_path,
            line=line,
            column=column,
            code=matcher.line_at(text, raw.offset).strip(),
            confidence=matcher.derive_confidence(rule),
            cwe=rule.cwe,
            owasp=rule.owasp,
            suggested_fix=rule.suggested_fix,
            references=rule.references,
        )
