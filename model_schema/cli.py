"""
CLI Entry Point

Typer-based command line interface for schema discovery.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from model_schema.config import ConfigLoader, SchemaConfig
from model_schema.core.schema import (
    ModelLoadError,
    ScanError,
    SchemaInspector,
    dump_collections,
)
from model_schema.core.schema.scanner import load_class


# Initialize Typer app
app = typer.Typer(
    name="model-schema",
    help="Model Schema - Derive entity schemas from SQLAlchemy models",
    add_completion=False,
)

console = Console()


def load_config(config_path: str) -> SchemaConfig:
    """Load and validate configuration file."""
    loader = ConfigLoader()
    try:
        return loader.load(config_path)
    except FileNotFoundError:
        console.print(f"[red]Error:[/] Configuration file not found: {config_path}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/] {e}")
        raise typer.Exit(1)


def create_inspector(config: SchemaConfig) -> SchemaInspector:
    """Build the inspector, reporting an unloadable base class."""
    try:
        return SchemaInspector.from_config(config)
    except ModelLoadError as e:
        console.print(f"[red]Cannot load base class:[/] {e}")
        raise typer.Exit(1)


@app.command()
def generate(
    config_path: str = typer.Argument(..., help="Path to configuration file (YAML or JSON)"),
    refresh: bool = typer.Option(False, "--refresh", "-r", help="Ignore the cache and scan again"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the schema as JSON"),
):
    """
    Generate the entity schemas of all models.

    Example:
        model-schema generate schema.yaml --output schema.json
    """
    config = load_config(config_path)

    console.print(Panel(
        f"[bold]Project: {config.name}[/]\n"
        f"Models: {', '.join(config.model_locations)}\n"
        f"Database: {config.database.url or '[yellow]none (code only)[/]'}",
        title="Schema Configuration",
    ))

    inspector = create_inspector(config)
    if refresh:
        inspector.invalidate()

    try:
        collections = inspector.get_collections()
    except ScanError as e:
        console.print(f"[red]Scan error:[/] {e}")
        raise typer.Exit(1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Entity", style="cyan")
    table.add_column("Class")
    table.add_column("Key")
    table.add_column("Fields", justify="right")
    table.add_column("Foreign keys", justify="right")

    for entity in collections:
        table.add_row(
            entity.name,
            entity.class_name,
            entity.primary_key,
            str(len(entity.fields)),
            str(len(entity.foreign_keys)),
        )

    console.print(table)
    console.print(f"\n[bold]Entities:[/] {len(collections)}")

    info = inspector.cache.get_cache_info(inspector.cache_key)
    if info:
        console.print(f"[dim]Cached as '{info['key']}' at {info['created_at']}[/]")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(dump_collections(collections), encoding="utf-8")
        console.print(f"[green]✓[/] Schema written to {output}")


@app.command("inspect")
def inspect_model(
    config_path: str = typer.Argument(..., help="Path to configuration file"),
    model: str = typer.Option(..., "--model", "-m", help="Entity name or qualified class name"),
    methods: bool = typer.Option(False, "--methods", help="Also list scopes and column finders"),
):
    """
    Show the fields of one entity.

    Example:
        model-schema inspect schema.yaml --model Post
    """
    config = load_config(config_path)
    inspector = create_inspector(config)

    try:
        entity = next(
            (e for e in inspector.get_collections() if model in (e.name, e.class_name)),
            None,
        )
    except ScanError as e:
        console.print(f"[red]Scan error:[/] {e}")
        raise typer.Exit(1)

    if entity is None:
        console.print(f"[red]Model '{model}' not found[/]")
        raise typer.Exit(1)

    console.print(f"\n[bold]{entity.name}[/] ({entity.class_name})")
    console.print(f"  Primary key: {entity.primary_key}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Field", style="cyan")
    table.add_column("Type")
    table.add_column("Pivot")
    table.add_column("Reference")

    for field in entity.fields:
        table.add_row(
            field.name,
            field.related or field.field_type.value,
            field.pivot.field if field.pivot else "",
            str(field.reference) if field.reference else "",
        )

    console.print(table)

    if methods:
        try:
            profile = inspector.inspect_profile(load_class(entity.class_name))
        except Exception as e:
            console.print(f"[red]Cannot inspect methods:[/] {e}")
            raise typer.Exit(1)

        console.print(f"\n[bold]Methods ({len(profile.methods)}):[/]")
        for method in profile.methods.values():
            console.print(f"  {method.name}({', '.join(method.parameters)})")


@app.command()
def invalidate(
    config_path: str = typer.Argument(..., help="Path to configuration file"),
):
    """Drop the cached schema so the next run scans again."""
    config = load_config(config_path)
    inspector = create_inspector(config)
    inspector.invalidate()
    console.print(f"[green]✓[/] Cache '{config.cache.key}' invalidated")


@app.command("init-config")
def init_config(
    output: Path = typer.Argument(Path("schema.yaml"), help="Where to write the example config"),
):
    """Write an example configuration file."""
    if output.exists():
        console.print(f"[red]Error:[/] {output} already exists")
        raise typer.Exit(1)
    ConfigLoader.create_example_config(output)
    console.print(f"[green]✓[/] Example configuration written to {output}")


@app.command()
def version():
    """Show version information."""
    from model_schema import __version__
    console.print(f"Model Schema v{__version__}")


if __name__ == "__main__":
    app()
