"""Articles command implementation."""

import asyncio
from pathlib import Path
from typing import Optional, Tuple

import typer

from ..exceptions import StoreError
from ..models import CacheState
from ..paging import PagingData
from ..services import Services
from .common import articles_table, config_option, console, open_services


async def load_page(
    services: Services,
    category: str,
    search: str,
    page: int,
    refresh: bool,
) -> Tuple[CacheState, PagingData, int]:
    """Open the home feed for a selection and load up to ``page``."""
    if refresh:
        result = await services.synchronizer.refresh(category)
        if not result.success:
            console.print(f"[yellow]Refresh failed, showing cached rows: {result.error}[/yellow]")

    coordinator = services.home(default_category=category)
    try:
        await coordinator.start(refresh=False)
        await coordinator.set_search_query(search)

        feed = coordinator.feed
        wanted = page * feed.config.page_size
        while len(feed.snapshot) < wanted and not feed.snapshot.end_reached:
            if not await feed.load_more():
                break
        return coordinator.current_state, feed.snapshot, feed.config.page_size
    finally:
        await coordinator.close()


def articles_command(
    category: Optional[str] = typer.Argument(None, help="Category (default from config)"),
    search: str = typer.Option("", "--search", "-s", help="Filter by title, author or source"),
    page: int = typer.Option(1, "--page", "-p", help="Page to show", min=1),
    refresh: bool = typer.Option(
        False,
        "--refresh/--no-refresh",
        help="Refresh from the feed API before listing",
    ),
    config_path: Optional[Path] = config_option,
) -> None:
    """List cached articles of a category, newest first."""
    services = open_services(config_path)
    category = category or services.default_category
    try:
        if category not in services.categories:
            console.print(f"[red]Unknown category: {category}[/red]")
            raise typer.Exit(1)
        state, snapshot, page_size = asyncio.run(
            load_page(services, category, search, page, refresh)
        )
    except StoreError as e:
        console.print(f"[red]Local cache error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        services.close()

    if state.error_message:
        console.print(f"[red]{state.error_message}[/red]")

    start = (page - 1) * page_size
    items = snapshot.items[start:start + page_size]
    if not items:
        hint = "Try 'newscache refresh " + category + "'." if not search else "No matches."
        console.print(f"[yellow]No cached articles for {category}. {hint}[/yellow]")
        return

    title = f"{category} · page {page}"
    if search:
        title += f" · “{search}”"
    console.print(articles_table(title, items, start=start))
