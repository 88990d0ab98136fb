"""CLI command: pluginguard rules (list the detection catalog)."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from pluginguard.cli.render import SEVERITY_COLORS
from pluginguard.errors import RuleLoadError
from pluginguard.rules.catalog import RuleCatalog

console = Console()


@click.command()
@click.pass_context
def rules(ctx: click.Context) -> None:
    """List the detection rules that scans apply."""
    try:
        catalog = RuleCatalog.default(ctx.obj.get("rule_files", []))
    except RuleLoadError as e:
        raise click.ClickException(str(e)) from e

    table = Table(title=f"{len(catalog)} rules", show_lines=False)
    table.add_column("ID", style="cyan")
    table.add_column("Severity", style="bold", width=10)
    table.add_column("Category")
    table.add_column("Title")
    table.add_column("CWE")

    for rule in catalog:
        color = SEVERITY_COLORS.get(rule.severity, "white")
        table.add_row(
            rule.id,
            f"[{color}]{rule.severity.value}[/{color}]",
            rule.category,
            rule.title,
            rule.cwe or "",
        )

    console.print(table)
