"""Tests for the scan engine and corpus walker."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from pluginguard.rules.models import Confidence, Severity
from pluginguard.scanner.engine import ScanEngine
from pluginguard.scanner.models import ResultStatus, ScanResult
from pluginguard.scanner.walker import CorpusWalker


class TestCorpusWalker:
    def test_sorted_and_filtered(self, make_tree):
        root = make_tree(
            {
                "b.js": "",
                "a.py": "",
                "README.md": "",
                "lib/z.php": "",
                "image.png": b"\x89PNG",
            }
        )
        files = [p.relative_to(root).as_posix() for p in CorpusWalker().walk(root)]
        assert files == ["a.py", "b.js", "lib/z.php"]

    def test_skip_dirs(self, make_tree):
        root = make_tree(
            {
                "src/app.js": "",
                "node_modules/dep/index.js": "",
                ".git/hooks/pre-commit.py": "",
                "vendor/lib.php": "",
            }
        )
        files = [p.relative_to(root).as_posix() for p in CorpusWalker().collect(root)]
        assert files == ["src/app.js"]

    def test_extension_case_insensitive(self, make_tree):
        root = make_tree({"LEGACY.JS": ""})
        assert len(CorpusWalker().collect(root)) == 1

    def test_max_file_size(self, make_tree):
        root = make_tree({"small.js": "x", "big.js": "x" * 100})
        files = CorpusWalker(max_file_size=10).collect(root)
        assert [p.name for p in files] == ["small.js"]

    def test_custom_extensions(self, make_tree):
        root = make_tree({"tmpl.twig": "", "app.js": ""})
        files = CorpusWalker(extensions=[".twig"]).collect(root)
        assert [p.name for p in files] == ["tmpl.twig"]

    def test_symlinks_not_followed(self, tmp_path: Path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.js").write_text("")
        root = tmp_path / "corpus"
        root.mkdir()
        (root / "app.js").write_text("")
        (root / "leak.js").symlink_to(outside / "secret.js")
        (root / "linked").symlink_to(outside, target_is_directory=True)

        files = [p.relative_to(root).as_posix() for p in CorpusWalker().collect(root)]
        assert files == ["app.js"]


class TestScanEngine:
    def test_sample_corpus(self, sample_corpus: Path):
        findings = ScanEngine().scan(sample_corpus)
        result = ScanResult(
            job_id="job-1",
            subject_name="sample",
            status=ResultStatus.COMPLETED,
            findings=tuple(findings),
        )

        assert result.total_issues == 2
        assert result.critical_issues == 2
        assert result.high_issues == 0

        by_file = {f.file_path: f for f in findings}
        assert set(by_file) == {"a.js", "b.js"}
        assert by_file["a.js"].category == "Code Injection"
        assert by_file["a.js"].rule_id == "eval-usage"
        assert by_file["b.js"].category == "SQL Injection"
        assert by_file["b.js"].rule_id == "js-sql-injection"

    def test_finding_fields(self, sample_corpus: Path):
        finding = next(
            f for f in ScanEngine().scan(sample_corpus) if f.file_path == "a.js"
        )
        assert finding.line == 1
        assert finding.column == len("const result = ") + 1
        assert finding.code == "const result = eval(userInput);"
        assert finding.severity == Severity.CRITICAL
        assert finding.confidence == Confidence.HIGH
        assert finding.cwe == "CWE-95"
        assert finding.fix is not None
        assert finding.suggested_fix == finding.fix.code_example

    def test_deterministic(self, sample_corpus: Path):
        engine = ScanEngine()

        def key(findings):
            return [(f.file_path, f.line, f.column, f.rule_id) for f in findings]

        assert key(engine.scan(sample_corpus)) == key(engine.scan(sample_corpus))

    def test_finding_ids_unique(self, make_tree):
        root = make_tree({"x.js": "eval(a);\neval(b);\neval(c);\n"})
        findings = ScanEngine().scan(root)
        assert len(findings) == 3
        assert len({f.id for f in findings}) == 3

    def test_same_location_ordered_by_catalog(self):
        engine = ScanEngine()
        findings = engine.scan_text('exec(`rm ${path}`);\n', "run.js")
        assert [f.rule_id for f in findings] == [
            "js-sql-injection",
            "js-command-injection",
        ]
        assert all(f.column == 1 for f in findings)

    def test_findings_ordered_by_line(self):
        text = 'fetch("http://a.org");\nx = eval(y);\n'
        findings = ScanEngine().scan_text(text, "f.js")
        assert [(f.line, f.rule_id) for f in findings] == [
            (1, "generic-http-urls"),
            (2, "eval-usage"),
        ]

    def test_binary_and_undecodable_files_skipped(self, make_tree):
        root = make_tree(
            {
                "a.js": "eval(x);\n",
                "blob.js": b"eval(x);\x00\x01\x02",
                "latin1.js": "eval(x); // caf\xe9".encode("latin-1"),
                "z.js": "eval(y);\n",
            }
        )
        findings = ScanEngine().scan(root)
        assert sorted(f.file_path for f in findings) == ["a.js", "z.js"]

    def test_relative_posix_paths(self, make_tree):
        root = make_tree({"src/lib/util.js": "eval(x);\n"})
        findings = ScanEngine().scan(root)
        assert findings[0].file_path == "src/lib/util.js"

    def test_file_linked_outside_root_not_read(self, tmp_path: Path):
        outside = tmp_path / "outside"
        outside.mkdir()
        secret = outside / "secret.js"
        secret.write_text('const api_key = "SUPERSECRETVALUE123";\n')
        corpus = tmp_path / "corpus"
        corpus.mkdir()
        (corpus / "leak.js").symlink_to(secret)

        assert ScanEngine().scan(corpus) == []

    def test_progress_callback(self, sample_corpus: Path):
        seen: list[float] = []
        ScanEngine().scan(sample_corpus, on_progress=seen.append)
        assert seen == sorted(seen)
        assert len(seen) == 3
        assert seen[-1] == 1.0

    def test_progress_on_empty_corpus(self, make_tree):
        root = make_tree({"README.md": "# nothing to scan\n"})
        seen: list[float] = []
        assert ScanEngine().scan(root, on_progress=seen.append) == []
        assert seen == [1.0]

    def test_custom_suggester(self, sample_corpus: Path):
        suggester = MagicMock()
        suggester.suggest.return_value.code_example = "// fixed"
        findings = ScanEngine(suggester=suggester).scan(sample_corpus)
        assert suggester.suggest.call_count == len(findings) == 2
        assert all(f.suggested_fix == "// fixed" for f in findings)


class TestScanResult:
    def test_counts_follow_findings(self):
        findings = ScanEngine().scan_text(
            'const password = "hunter2hunter2";\nx = Math.random();\n', "s.js"
        )
        result = ScanResult(
            job_id="j",
            subject_name="s",
            status=ResultStatus.COMPLETED,
            findings=tuple(findings),
        )
        assert result.total_issues == 2
        assert result.high_issues == 1
        assert result.low_issues == 1
        assert (
            result.critical_issues
            + result.high_issues
            + result.medium_issues
            + result.low_issues
            + result.info_issues
        ) == result.total_issues

    def test_to_dict(self):
        result = ScanResult(
            job_id="j",
            subject_name="demo",
            subject_version="1.2.3",
            status=ResultStatus.FAILED,
            scan_date=0.0,
            error="boom",
        )
        data = result.to_dict()
        assert data["id"] == "j"
        assert data["status"] == "failed"
        assert data["error"] == "boom"
        assert data["issues"] == []
        assert data["scan_date"].startswith("1970-01-01T00:00:00")
