"""CLI command: pluginguard scan <target> (static security analysis)."""

from __future__ import annotations

import asyncio
import json
import sys
import time
import uuid
from pathlib import Path

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from pluginguard.cli.render import print_findings, print_recommendations, print_summary
from pluginguard.config import PluginGuardConfig
from pluginguard.errors import RuleLoadError
from pluginguard.fixes.suggester import FixSuggester
from pluginguard.jobs.orchestrator import ScanOrchestrator
from pluginguard.rules.catalog import RuleCatalog
from pluginguard.rules.models import Severity
from pluginguard.scanner.engine import ScanEngine
from pluginguard.scanner.models import ResultStatus, ScanResult
from pluginguard.scanner.walker import CorpusWalker
from pluginguard.sources.base import ScanSource
from pluginguard.sources.local import LocalSourceProvider
from pluginguard.sources.metadata import extract_metadata
from pluginguard.storage.memory import MemoryResultStore

console = Console(stderr=True)
stdout_console = Console()

_POLL_INTERVAL = 0.1


@click.command()
@click.argument("target")
@click.option("--repo", is_flag=True, help="Treat TARGET as a git repository URL.")
@click.option(
    "--json-output",
    type=click.Path(dir_okay=False),
    help="Write the full result to a JSON file.",
)
@click.option(
    "--min-severity",
    type=click.Choice([s.value for s in Severity]),
    default=Severity.INFO.value,
    help="Lowest severity to display (default: info).",
)
@click.pass_context
def scan(
    ctx: click.Context,
    target: str,
    repo: bool,
    json_output: str | None,
    min_severity: str,
) -> None:
    """Scan a directory, an archive (.zip/.tar.gz) or, with --repo, a git URL."""
    config = PluginGuardConfig.load()
    try:
        catalog = RuleCatalog.default(ctx.obj.get("rule_files", []))
    except RuleLoadError as e:
        raise click.ClickException(str(e)) from e
    engine = ScanEngine(
        catalog=catalog,
        walker=CorpusWalker(max_file_size=config.max_file_size),
    )

    if repo:
        console.print(f"[bold]PluginGuard[/bold] cloning [cyan]{target}[/cyan]\n")
        result = _run_job(engine, ScanSource.repository(target), config)
    else:
        path = Path(target)
        if not path.exists():
            raise click.BadParameter(f"{target} does not exist", param_hint="TARGET")
        console.print(f"[bold]PluginGuard[/bold] scanning [cyan]{target}[/cyan]\n")
        if path.is_dir():
            result = _scan_directory(engine, path)
        else:
            result = _run_job(engine, ScanSource.upload(path), config)

    threshold = Severity(min_severity).rank
    shown = [f for f in result.findings if f.severity.rank <= threshold]

    if result.status == ResultStatus.COMPLETED:
        if shown:
            print_findings(stdout_console, shown)
        else:
            stdout_console.print("[green]No findings.[/green]")
    print_summary(stdout_console, result)
    print_recommendations(stdout_console, FixSuggester().recommendations(result))

    if json_output:
        Path(json_output).write_text(
            json.dumps(result.to_dict(), indent=2), encoding="utf-8"
        )
        console.print(f"\n[green]Results exported to {json_output}[/green]")

    if result.status == ResultStatus.FAILED:
        sys.exit(2)
    if result.critical_issues > 0:
        console.print(f"\n[red]{result.critical_issues} critical finding(s)[/red]")
        sys.exit(1)


def _progress_bar() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def _scan_directory(engine: ScanEngine, directory: Path) -> ScanResult:
    """Scan a local directory in-process; nothing is copied or cleaned up."""
    start = time.time()
    with _progress_bar() as progress:
        task_id = progress.add_task("Scanning...", total=1.0)
        findings = engine.scan(
            directory,
            on_progress=lambda fraction: progress.update(task_id, completed=fraction),
        )

    metadata = extract_metadata(directory)
    return ScanResult(
        job_id=str(uuid.uuid4()),
        subject_name=metadata.name or directory.resolve().name,
        subject_version=metadata.version,
        status=ResultStatus.COMPLETED,
        findings=tuple(findings),
        scan_date=start,
        duration=time.time() - start,
    )


def _run_job(engine: ScanEngine, source: ScanSource, config: PluginGuardConfig) -> ScanResult:
    """Run one job through the orchestrator, mirroring its progress on a bar."""

    async def _run() -> ScanResult | None:
        orchestrator = ScanOrchestrator(
            store=MemoryResultStore(),
            provider=LocalSourceProvider(config.work_dir),
            engine=engine,
        )
        job_id = await orchestrator.submit_scan(source)
        with _progress_bar() as progress:
            task_id = progress.add_task("Initializing", total=100)
            while True:
                snapshot = await orchestrator.get_progress(job_id)
                if snapshot is not None:
                    progress.update(
                        task_id,
                        completed=snapshot.progress,
                        description=snapshot.stage.value,
                    )
                    if snapshot.done:
                        break
                await asyncio.sleep(_POLL_INTERVAL)
        await orchestrator.wait(job_id)
        return await orchestrator.get_result(job_id)

    result = asyncio.run(_run())
    if result is None:
        raise click.ClickException("Scan finished without a result")
    return result
