"""Tests for CLI commands using Click's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from pluginguard.cli import main


def test_main_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "PluginGuard" in result.output
    assert "scan" in result.output
    assert "rules" in result.output
    assert "server" in result.output


def test_main_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_scan_help():
    runner = CliRunner()
    result = runner.invoke(main, ["scan", "--help"])
    assert result.exit_code == 0
    assert "TARGET" in result.output
    assert "--repo" in result.output


def test_rules_lists_catalog():
    runner = CliRunner()
    result = runner.invoke(main, ["rules"])
    assert result.exit_code == 0
    assert "16 rules" in result.output


def test_rules_with_extra_file(extra_rules_path: Path):
    runner = CliRunner()
    result = runner.invoke(main, ["--rules", str(extra_rules_path), "rules"])
    assert result.exit_code == 0
    assert "18 rules" in result.output


def test_rules_with_broken_file(tmp_path: Path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("rules:\n  - id: x\n")
    runner = CliRunner()
    result = runner.invoke(main, ["--rules", str(bad), "rules"])
    assert result.exit_code == 1
    assert "missing" in result.output


def test_scan_directory_with_critical_findings(sample_corpus: Path):
    runner = CliRunner()
    result = runner.invoke(main, ["scan", str(sample_corpus)])
    assert result.exit_code == 1
    assert "Total findings: 2" in result.output
    assert "Immediate Action Required" in result.output


def test_scan_clean_directory(make_tree):
    root = make_tree({"ok.js": "const ok = 1;\n"})
    runner = CliRunner()
    result = runner.invoke(main, ["scan", str(root)])
    assert result.exit_code == 0
    assert "No findings." in result.output


def test_scan_min_severity_hides_findings(make_tree):
    root = make_tree({"r.js": "x = Math.random();\n"})
    runner = CliRunner()
    result = runner.invoke(main, ["scan", str(root), "--min-severity", "high"])
    assert result.exit_code == 0
    assert "No findings." in result.output
    assert "Total findings: 1" in result.output


def test_scan_json_output(sample_corpus: Path, tmp_path: Path):
    out = tmp_path / "report.json"
    runner = CliRunner()
    result = runner.invoke(main, ["scan", str(sample_corpus), "--json-output", str(out)])
    assert result.exit_code == 1
    data = json.loads(out.read_text())
    assert data["status"] == "completed"
    assert data["total_issues"] == 2
    assert data["critical_issues"] == 2
    assert sorted(issue["file"] for issue in data["issues"]) == ["a.js", "b.js"]


def test_scan_missing_target(tmp_path: Path):
    runner = CliRunner()
    result = runner.invoke(main, ["scan", str(tmp_path / "nope")])
    assert result.exit_code == 2
    assert "does not exist" in result.output


def test_scan_archive(make_zip, tmp_path: Path):
    archive = make_zip({"plugin/index.js": "eval(x);\n"})
    runner = CliRunner(env={"PLUGINGUARD_WORK_DIR": str(tmp_path / "work")})
    result = runner.invoke(main, ["scan", str(archive)])
    assert result.exit_code == 1
    assert "Total findings: 1" in result.output
    assert archive.exists()


def test_scan_bad_archive(tmp_path: Path):
    archive = tmp_path / "broken.zip"
    archive.write_text("not an archive")
    runner = CliRunner(env={"PLUGINGUARD_WORK_DIR": str(tmp_path / "work")})
    result = runner.invoke(main, ["scan", str(archive)])
    assert result.exit_code == 2
    assert "Scan failed" in result.output
