"""Refresh command implementation."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..exceptions import StoreError
from ..sync import RefreshResult
from .common import config_option, console, open_services


def print_refresh_summary(result: RefreshResult) -> None:
    """Print summary of a refresh."""
    table = Table(title=f"Refresh: {result.category}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="bold")

    status = "[green]✓ updated[/green]" if result.success else "[red]✗ kept cached rows[/red]"
    table.add_row("Status", status)
    table.add_row("Fetched", str(result.fetched))
    table.add_row("Stored", str(result.stored))
    table.add_row("Skipped", str(result.skipped))
    table.add_row("Evicted", str(result.evicted))
    if result.error:
        table.add_row("Error", f"[red]{result.error}[/red]")

    console.print(table)


def refresh_command(
    category: str = typer.Argument(..., help="Category to refresh"),
    config_path: Optional[Path] = config_option,
) -> None:
    """Fetch a category from the feed API into the local cache."""
    services = open_services(config_path)
    try:
        if category not in services.categories:
            console.print(f"[red]Unknown category: {category}[/red]")
            raise typer.Exit(1)
        result = asyncio.run(services.synchronizer.refresh(category))
    except StoreError as e:
        console.print(f"[red]Local cache error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        services.close()

    print_refresh_summary(result)
    if not result.success:
        raise typer.Exit(1)
