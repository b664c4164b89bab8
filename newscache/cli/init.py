"""Init command implementation."""

from pathlib import Path

import typer
from rich.panel import Panel

from ..config import DEFAULT_CONFIG_PATH, ConfigModel, save_config
from ..db import Database, init_database, validate_connection
from ..exceptions import StoreError
from .common import console


def init_command(
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Where to write config.yaml",
    ),
    base_url: str = typer.Option(
        "http://localhost:8000",
        "--base-url",
        "-u",
        help="Base URL of the feed API",
    ),
    database: Path = typer.Option(
        Path.home() / ".local" / "share" / "newscache" / "news.db",
        "--database",
        "-d",
        help="SQLite database file",
    ),
    keep_limit: int = typer.Option(
        100,
        "--keep-limit",
        help="Articles kept per category",
        min=1,
    ),
) -> None:
    """Initialize newscache configuration and database."""
    console.print(Panel.fit("📰 newscache - Initialization", style="bold blue"))

    config = ConfigModel(
        database={"path": str(database)},
        feed={"base_url": base_url, "api_key_env": "NEWSCACHE_API_KEY"},
        cache={"keep_limit": keep_limit},
    )
    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    database.parent.mkdir(parents=True, exist_ok=True)
    try:
        db = Database(database, wal=config.database.wal)
    except StoreError as e:
        console.print(f"[red]❌ Cannot open database: {e}[/red]")
        raise typer.Exit(1)

    try:
        if not validate_connection(db):
            console.print("[red]❌ Database connection failed![/red]")
            raise typer.Exit(1)
        init_database(db)
        console.print(f"✅ Database schema initialized: {database}")
    except StoreError as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)
    finally:
        db.close()

    console.print(
        Panel(
            f"[green]✅ newscache initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Database: {database}\n\n"
            f"Next steps:\n"
            f"1. Set API key: [bold]export NEWSCACHE_API_KEY=your_key[/bold]\n"
            f"2. Run: [bold]newscache refresh general[/bold]",
            style="green",
        )
    )
