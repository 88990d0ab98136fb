"""CLI entry point: Click group with global options."""

from __future__ import annotations

import logging

import click

from pluginguard import __version__


@click.group()
@click.version_option(version=__version__, prog_name="pluginguard")
@click.option(
    "--rules",
    "-r",
    "rule_files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Extra YAML rule file (repeatable).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, rule_files: tuple[str, ...], verbose: bool) -> None:
    """PluginGuard: static security scanning for plugins and repositories."""
    ctx.ensure_object(dict)
    ctx.obj["rule_files"] = list(rule_files)
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from pluginguard.cli.rules import rules  # noqa: F811
    from pluginguard.cli.scan import scan  # noqa: F811
    from pluginguard.cli.server import server  # noqa: F811

    main.add_command(scan)
    main.add_command(rules)
    main.add_command(server)


_register_commands()
