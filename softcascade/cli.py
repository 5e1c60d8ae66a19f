#!/usr/bin/env python3
"""
Command-line interface for softcascade.

Inspection tools: configuration, the relationship table the cascade walks,
and a quick installation check.
"""

import importlib
import os
import sys
from functools import partial
from typing import Any, Callable, Dict, List, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.orm import configure_mappers

from . import __version__
from .config import get_config
from .soft_delete import get_relationship_registry, supports_soft_delete

console = Console()


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """softcascade - cascading soft delete for SQLAlchemy models."""
    if ctx.invoked_subcommand is None:
        console.print(
            Panel.fit(
                f"[bold blue]softcascade[/bold blue] v{__version__}\n"
                "[dim]Cascading soft delete for SQLAlchemy models[/dim]\n\n"
                "Use [bold]softcascade --help[/bold] to see available commands.",
                border_style="blue",
            )
        )


@cli.group()
def config() -> None:
    """Inspect softcascade configuration."""
    pass


@config.command("show")
@click.option("--format", type=click.Choice(["table", "json", "yaml"]), default="table")
def config_show(format: str) -> None:
    """Display current configuration."""
    config_dict = get_config().to_dict()

    if format == "json":
        console.print_json(data=config_dict)
    elif format == "yaml":
        import yaml

        console.print(yaml.safe_dump(config_dict, default_flow_style=False))
    else:
        table = Table(title="softcascade Configuration", show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        for setting, value in config_dict.items():
            if isinstance(value, bool):
                value = "✓" if value else "✗"
            table.add_row(setting, str(value))

        console.print(table)


def _relationship_rows(module_name: str) -> Dict[str, List[Dict[str, Any]]]:
    module = importlib.import_module(module_name)
    configure_mappers()

    registry = get_relationship_registry()
    rows: Dict[str, List[Dict[str, Any]]] = {}
    for entity_type in sorted(registry.registered_types(), key=lambda t: t.__name__):
        defined_in = entity_type.__module__
        if defined_in != module.__name__ and not defined_in.startswith(
            module.__name__ + "."
        ):
            continue
        if not supports_soft_delete(entity_type):
            continue
        rows[entity_type.__name__] = [
            {
                "name": d.name,
                "cardinality": d.cardinality.value,
                "target": d.target_name,
                "owned_cascade": d.owned_cascade,
                "target_soft_deletable": supports_soft_delete(d.target_type),
            }
            for d in registry.relationships_of(entity_type)
        ]
    return rows


@cli.command("relations")
@click.argument("module")
@click.option("--format", type=click.Choice(["table", "json"]), default="table")
def relations(module: str, format: str) -> None:
    """Show the relationship table of every soft-deletable model in MODULE."""
    try:
        rows = _relationship_rows(module)
    except ImportError as e:
        console.print(f"[red]Cannot import {module}: {e}[/red]")
        sys.exit(1)

    if format == "json":
        console.print_json(data=rows)
        return

    if not rows:
        console.print(f"[yellow]No soft-deletable models found in {module}[/yellow]")
        return

    for entity_name, descriptors in rows.items():
        table = Table(title=entity_name, show_header=True)
        table.add_column("Relationship", style="cyan")
        table.add_column("Cardinality")
        table.add_column("Target")
        table.add_column("Cascades", justify="center")

        for d in descriptors:
            if d["owned_cascade"] and d["target_soft_deletable"]:
                cascades = "[green]✓[/green]"
            elif d["owned_cascade"]:
                cascades = "[yellow]owned, target not soft-deletable[/yellow]"
            else:
                cascades = "[dim]✗[/dim]"
            table.add_row(d["name"], d["cardinality"], d["target"], cascades)

        console.print(table)


def _check_configuration() -> List[str]:
    config = get_config()
    return [
        f"Configuration loaded (environment={config.environment}, "
        f"timezone={config.timezone}, cascade_enabled={config.cascade_enabled})"
    ]


def _check_import(module_name: str) -> List[str]:
    importlib.import_module(module_name)
    return [f"Imported {module_name}"]


def _check_mappers() -> List[str]:
    configure_mappers()

    registry = get_relationship_registry()
    models = [t for t in registry.registered_types() if supports_soft_delete(t)]
    owned = [
        (entity_type, d)
        for entity_type in models
        for d in registry.relationships_of(entity_type)
        if d.owned_cascade
    ]

    notes = [
        f"Mappers configured ({len(models)} soft-deletable model(s), "
        f"{len(owned)} owned relationship(s))"
    ]
    for entity_type, d in owned:
        if not supports_soft_delete(d.target_type):
            notes.append(
                f"[yellow]⚠[/yellow] {entity_type.__name__}.{d.name} is owned but "
                f"{d.target_name} cannot be soft-deleted; it will not cascade"
            )
    return notes


def _check_database(url: str) -> List[str]:
    from sqlalchemy import create_engine, text

    engine = create_engine(url)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    finally:
        engine.dispose()
    return ["Database connection successful"]


@cli.command()
@click.option(
    "--module",
    "-m",
    "modules",
    multiple=True,
    help="Model module to import before checking mappers (repeatable)",
)
def doctor(modules: Tuple[str, ...]) -> None:
    """Run diagnostic checks on the softcascade installation."""
    console.print("[bold]Running softcascade diagnostics...[/bold]\n")

    checks: List[Tuple[str, Callable[[], List[str]]]] = [
        ("Configuration", _check_configuration)
    ]
    for module_name in modules:
        checks.append((f"Import of {module_name}", partial(_check_import, module_name)))
    checks.append(("Mapper configuration", _check_mappers))

    db_url = os.getenv("SOFTCASCADE_DATABASE_URL")
    if db_url:
        checks.append(("Database connection", partial(_check_database, db_url)))

    failed = 0
    for name, check in checks:
        try:
            first, *rest = check()
        except Exception as e:
            console.print(f"[red]✗[/red] {name} failed: {escape(str(e))}")
            failed += 1
            continue
        console.print(f"[green]✓[/green] {first}")
        for note in rest:
            console.print(f"  {note}")

    if not db_url:
        console.print(
            "[yellow]⚠[/yellow] No database configured "
            "(SOFTCASCADE_DATABASE_URL not set)"
        )

    console.print(
        f"\n[bold]Summary:[/bold] {len(checks) - failed} passed, {failed} failed"
    )
    if failed:
        console.print("[yellow]⚠ Some issues detected - review output above[/yellow]")
        sys.exit(1)
    console.print("[green]✓ All systems operational[/green]")


if __name__ == "__main__":
    cli()
