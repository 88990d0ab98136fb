"""Rich rendering of findings, summaries and recommendations."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from pluginguard.fixes.suggester import Recommendation
from pluginguard.rules.models import Severity
from pluginguard.scanner.models import Finding, ResultStatus, ScanResult

SEVERITY_COLORS = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "bright_red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
    Severity.INFO: "dim",
}


def print_findings(console: Console, findings: list[Finding]) -> None:
    # Sort by severity (critical first), then file, then line
    ordered = sorted(findings, key=lambda f: (f.severity.rank, f.file_path, f.line))

    table = Table(title="Findings", show_lines=False)
    table.add_column("Severity", style="bold", width=10)
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Category")
    table.add_column("Title")
    table.add_column("Code", max_width=50)

    for finding in ordered:
        color = SEVERITY_COLORS.get(finding.severity, "white")
        table.add_row(
            f"[{color}]{finding.severity.value}[/{color}]",
            finding.file_path,
            f"{finding.line}:{finding.column}",
            finding.category,
            finding.title,
            finding.code[:50],
        )

    console.print(table)


def print_summary(console: Console, result: ScanResult) -> None:
    if result.status == ResultStatus.FAILED:
        console.print(f"\n[red]Scan failed:[/red] {result.error}")
        return

    version = f" {result.subject_version}" if result.subject_version else ""
    console.print(
        f"\n[bold]{result.subject_name}{version}[/bold] scanned "
        f"in {result.duration:.2f}s"
    )
    console.print(
        f"Total findings: {result.total_issues} "
        f"([red]{result.critical_issues} critical[/red], "
        f"{result.high_issues} high, {result.medium_issues} medium, "
        f"{result.low_issues} low, {result.info_issues} info)"
    )


def print_recommendations(console: Console, recommendations: list[Recommendation]) -> None:
    for rec in recommendations:
        console.print(f"\n[bold]{rec.title}[/bold] [dim]({rec.type})[/dim]")
        console.print(f"  {rec.description}")
        for action in rec.actions:
            console.print(f"  • {action}")
