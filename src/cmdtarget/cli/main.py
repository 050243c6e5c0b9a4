"""CLI entry point for cmdtarget.

Invoked as::

    cmdtarget [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m cmdtarget.cli.main

Commands
--------
resolve     Build a command payload and resolve its target aggregate
inspect     List the marked members of a payload class
resolvers   List registered resolver implementations
version     Show version information

Payload classes and markers are given as import paths of the form
``package.module:Name``.
"""
from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cmdtarget import (
    AnnotationCommandTargetResolver,
    InvalidCommandTargetError,
    Marker,
    __version__,
    resolvers,
)
from cmdtarget.markers import expand_meta_markers
from cmdtarget.shape import describe

console = Console()
err_console = Console(stderr=True)


def _import_object(path: str) -> Any:
    """Import ``module:attribute`` and return the attribute, exiting on error."""
    module_name, _, attribute_path = path.partition(":")
    if not module_name or not attribute_path:
        err_console.print(f"[red]Error:[/red] Expected 'module:attribute', got {path!r}")
        sys.exit(1)
    try:
        obj: Any = importlib.import_module(module_name)
        for part in attribute_path.split("."):
            obj = getattr(obj, part)
    except ImportError as exc:
        err_console.print(f"[red]Error:[/red] Cannot import {module_name}: {escape(str(exc))}")
        sys.exit(1)
    except AttributeError:
        err_console.print(f"[red]Error:[/red] {module_name} has no attribute {attribute_path!r}")
        sys.exit(1)
    except Exception as exc:
        err_console.print(
            f"[red]Error:[/red] Importing {escape(path)} failed: "
            f"{type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(1)
    return obj


def _import_marker(path: str) -> Marker:
    obj = _import_object(path)
    if not isinstance(obj, Marker):
        err_console.print(f"[red]Error:[/red] {path} is not a Marker")
        sys.exit(1)
    return obj


def _load_data(path: str | None) -> dict[str, Any]:
    """Read payload constructor arguments from a YAML or JSON file."""
    if path is None:
        return {}
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {escape(str(exc))}")
        sys.exit(1)
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        err_console.print(f"[red]Error:[/red] {path} is not valid YAML or JSON: {escape(str(exc))}")
        sys.exit(1)
    if data is None:
        return {}
    if not isinstance(data, dict):
        err_console.print(f"[red]Error:[/red] {path} must contain a mapping of field names to values")
        sys.exit(1)
    return data


def _forget_path(entry: str) -> None:
    if entry in sys.path:
        sys.path.remove(entry)


def _marker_names(markers: tuple[Marker, ...]) -> str:
    direct = [m.name for m in markers]
    implied = sorted(m.name for m in expand_meta_markers(markers) if m not in markers)
    if implied:
        return ", ".join(direct) + f" [dim](implies {', '.join(implied)})[/dim]"
    return ", ".join(direct)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="cmdtarget")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.option(
    "--app-dir",
    default=".",
    show_default=True,
    help="Directory prepended to sys.path before importing payload modules",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, app_dir: str) -> None:
    """Resolve the target aggregate of command payloads."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    resolved = str(Path(app_dir).resolve())
    if resolved not in sys.path:
        sys.path.insert(0, resolved)
        ctx.call_on_close(lambda: _forget_path(resolved))


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    table = Table(show_header=False, box=None)
    table.add_row("[bold]cmdtarget[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# resolvers command
# ---------------------------------------------------------------------------


@cli.command(name="resolvers")
@click.option("--entrypoints/--no-entrypoints", default=True, help="Also load installed resolver plugins")
def resolvers_command(entrypoints: bool) -> None:
    """List registered resolver implementations."""
    if entrypoints:
        resolvers.load_entrypoints()

    table = Table(title="Resolvers")
    table.add_column("Name", style="bold")
    table.add_column("Implementation")
    for name, cls in resolvers.items():
        table.add_row(name, f"{cls.__module__}.{cls.__qualname__}")
    console.print(table)


# ---------------------------------------------------------------------------
# inspect command
# ---------------------------------------------------------------------------


@cli.command(name="inspect")
@click.argument("target")
def inspect_command(target: str) -> None:
    """List the marked members of a payload class.

    TARGET is the import path of the payload class, e.g. ``orders.commands:ShipOrder``.
    Members are listed in the order the resolver searches them.
    """
    payload_type = _import_object(target)
    if not isinstance(payload_type, type):
        err_console.print(f"[red]Error:[/red] {target} is not a class")
        sys.exit(1)

    members = describe(payload_type)
    if not members:
        console.print(f"[yellow]No marked members[/yellow] in {payload_type.__qualname__}")
        return

    table = Table(title=f"Marked members: {payload_type.__qualname__}")
    table.add_column("#", justify="right")
    table.add_column("Kind", min_width=6)
    table.add_column("Member")
    table.add_column("Markers")
    for index, member in enumerate(members, start=1):
        table.add_row(str(index), member.kind.value, member.qualified_name, _marker_names(member.markers))
    console.print(table)


# ---------------------------------------------------------------------------
# resolve command
# ---------------------------------------------------------------------------


@cli.command(name="resolve")
@click.argument("target")
@click.option("--data", "-d", default=None, help="YAML or JSON file with constructor arguments")
@click.option("--identifier-marker", default=None, help="Import path of a custom identifier marker")
@click.option("--version-marker", default=None, help="Import path of a custom version marker")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format",
)
def resolve_command(
    target: str,
    data: str | None,
    identifier_marker: str | None,
    version_marker: str | None,
    output_format: str,
) -> None:
    """Build a payload and resolve the aggregate it targets.

    TARGET is the import path of the payload class or factory. It is called
    with the mapping loaded from --data as keyword arguments.
    """
    factory = _import_object(target)
    kwargs = _load_data(data)

    builder = AnnotationCommandTargetResolver.builder()
    if identifier_marker:
        builder.with_identifier_marker(_import_marker(identifier_marker))
    if version_marker:
        builder.with_version_marker(_import_marker(version_marker))
    resolver = builder.build()

    try:
        payload = factory(**kwargs)
    except TypeError as exc:
        err_console.print(f"[red]Error:[/red] Cannot build {target}: {escape(str(exc))}")
        sys.exit(1)

    try:
        resolved = resolver.resolve(payload)
    except InvalidCommandTargetError as exc:
        err_console.print(f"[red]Invalid command target[/red]: {escape(str(exc))}")
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps({"identifier": resolved.identifier, "version": resolved.version}))
        return

    table = Table(show_header=False, box=None)
    table.add_row("[bold]Payload[/bold]", type(payload).__qualname__)
    table.add_row("[bold]Identifier[/bold]", escape(resolved.identifier))
    table.add_row("[bold]Version[/bold]", "-" if resolved.version is None else str(resolved.version))
    console.print(table)


if __name__ == "__main__":
    cli()
