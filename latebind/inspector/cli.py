"""Command-line interface for inspecting bodyless member bindings."""

from __future__ import annotations

import importlib
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from latebind.inspector.report import TypeReport, build_report

STATE_STYLES = {
    "unresolved": "dim",
    "resolving": "yellow",
    "resolved": "green",
    "failed": "bold red",
}


def load_class(target: str) -> type:
    """Import ``module:Class`` (or ``module:Outer.Inner``) and return the class."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise click.ClickException(f"Target must look like module:Class, got {target!r}")

    try:
        obj: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.ClickException(f"Cannot import {module_name}: {exc}") from exc

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise click.ClickException(f"{target} not found") from exc

    if not isinstance(obj, type):
        raise click.ClickException(f"{target} is not a class")
    return obj


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log resolution details")
def cli(verbose: bool) -> None:
    """Inspect bodyless members and their bindings."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


@cli.command()
@click.argument("target")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--resolve", is_flag=True, help="Resolve every member before reporting")
def info(target: str, output_json: bool, resolve: bool) -> None:
    """Display the bodyless members of a class and how they are bound."""
    report = build_report(load_class(target), resolve=resolve)

    if output_json:
        click.echo(report.to_json(indent=2))
    else:
        _output_plain(report)


@cli.command()
@click.argument("targets", nargs=-1, required=True)
def check(targets: tuple[str, ...]) -> None:
    """Resolve every bodyless member of the given classes.

    Exits with status 1 if any member has no usable binding.
    """
    console = Console()
    failed = 0

    for target in targets:
        report = build_report(load_class(target), resolve=True)
        for member in report.failures:
            failed += 1
            console.print(f"[red]FAILED[/red] {report.name}.{member.name} ({member.kind}): {member.error}")
        if not report.failures:
            console.print(f"[green]ok[/green] {report.name} ({len(report.members)} accessors)")

    if failed:
        console.print(f"{failed} accessor{'s' if failed != 1 else ''} failed to resolve")
        sys.exit(1)


def _output_plain(report: TypeReport) -> None:
    """Output a report using rich text formatting."""
    console = Console()

    console.print(f"[bold cyan]{report.module}.{report.name}[/bold cyan]")
    providers = ", ".join(report.providers) if report.providers else "none"
    console.print(f"[dim]Providers (nearest first):[/dim] {providers}")
    console.print()

    if not report.members:
        console.print("No bodyless members")
        return

    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Member", style="white")
    table.add_column("Kind", style="dim")
    table.add_column("Type", style="yellow")
    table.add_column("State")
    table.add_column("Provider", style="green")
    table.add_column("Binding", style="dim")

    for member in report.members:
        name = f"{member.name} (static)" if member.static else member.name
        style = STATE_STYLES.get(member.state, "white")
        table.add_row(
            name,
            member.kind,
            member.value_type or "",
            f"[{style}]{member.state}[/{style}]",
            member.provider or "",
            member.shape or "",
        )

    console.print(table)

    for member in report.failures:
        console.print(f"[red]{member.name} ({member.kind}):[/red] {member.error}")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
