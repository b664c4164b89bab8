"""Helpers shared by CLI commands."""

from pathlib import Path
from typing import Iterable, Optional

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..config import Config
from ..exceptions import StoreError
from ..models import ArticleView
from ..services import Services

console = Console()

# Printed id length; `bookmark` accepts any unique prefix
ID_PREFIX_LENGTH = 12

config_option = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config.yaml (default: ~/.config/newscache/config.yaml)",
)


def open_services(config_path: Optional[Path]) -> Services:
    """Build services from config, exiting on configuration or store errors."""
    try:
        return Services.from_config(Config(config_path))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)
    except StoreError as e:
        console.print(f"[red]Cannot open local cache: {e}[/red]")
        raise typer.Exit(1)


def format_millis(millis: int) -> str:
    return pendulum.from_timestamp(millis / 1000).format("YYYY-MM-DD HH:mm")


def articles_table(title: str, items: Iterable[ArticleView], start: int = 0) -> Table:
    """Render article views as a rich table."""
    table = Table(title=title)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Published", style="yellow")
    table.add_column("Title", style="cyan")
    table.add_column("Author", style="magenta")
    table.add_column("★", style="green")
    table.add_column("ID", style="dim", no_wrap=True, min_width=ID_PREFIX_LENGTH)

    for index, item in enumerate(items, start=start + 1):
        table.add_row(
            str(index),
            format_millis(item.published_date),
            item.title,
            item.author or "",
            "★" if item.is_bookmarked else "",
            item.id[:ID_PREFIX_LENGTH],
        )
    return table
