"""CLI command: pluginguard server (start the web API)."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from pluginguard.config import PluginGuardConfig

console = Console(stderr=True)


@click.command()
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to listen on (default: 3001).",
)
@click.option(
    "--store",
    type=click.Choice(["memory", "sqlite"]),
    default=None,
    help="Where scan results are kept (default: memory).",
)
@click.pass_context
def server(ctx: click.Context, port: int | None, store: str | None) -> None:
    """Start the PluginGuard web API."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]Web dependencies not installed.[/red]\n"
            "Install with: pip install pluginguard[web]"
        )
        raise SystemExit(1)

    config = PluginGuardConfig.load()
    if port is not None:
        config.web_port = port
    if store is not None:
        config.store = store
    config.rule_files.extend(Path(p) for p in ctx.obj.get("rule_files", []))

    console.print(
        f"[bold]PluginGuard[/bold] API starting on "
        f"[cyan]http://{config.web_host}:{config.web_port}[/cyan]"
    )
    console.print(f"  [dim]Result store: {config.store}[/dim]\n")

    from pluginguard.web.app import create_app

    uvicorn.run(
        create_app(config),
        host=config.web_host,
        port=config.web_port,
        log_level="info",
    )
