"""Bookmark commands implementation."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from ..exceptions import StoreError
from ..services import Services
from .common import articles_table, config_option, console, open_services


async def _toggle(services: Services, article_id: str) -> bool:
    coordinator = services.home()
    try:
        await coordinator.start(refresh=False)
        return await coordinator.toggle_bookmark(article_id)
    finally:
        await coordinator.close()


async def _bookmarked_page(services: Services, page: int):
    coordinator = services.bookmarks_view()
    try:
        await coordinator.start()
        feed = coordinator.feed
        wanted = page * feed.config.page_size
        while len(feed.snapshot) < wanted and not feed.snapshot.end_reached:
            if not await feed.load_more():
                break
        return feed.snapshot, feed.config.page_size
    finally:
        await coordinator.close()


def resolve_article_id(services: Services, prefix: str) -> str:
    """Expand an id or unique id prefix as printed by the listing commands."""
    prefix = prefix.strip()
    if not prefix:
        console.print("[red]Article id must not be empty[/red]")
        raise typer.Exit(1)

    matches = services.bookmarks.match_ids(prefix)
    if prefix in matches:
        return prefix
    if not matches:
        console.print(f"[red]No cached article or bookmark matches {prefix}[/red]")
        raise typer.Exit(1)
    if len(matches) > 1:
        console.print(f"[red]Id prefix {prefix} matches several articles[/red]")
        raise typer.Exit(1)
    return matches[0]


def bookmark_command(
    article_id: str = typer.Argument(..., help="Article id, or a unique prefix of it"),
    config_path: Optional[Path] = config_option,
) -> None:
    """Toggle the bookmark of an article."""
    services = open_services(config_path)
    try:
        article_id = resolve_article_id(services, article_id)
        bookmarked = asyncio.run(_toggle(services, article_id))
    except StoreError as e:
        console.print(f"[red]Local cache error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        services.close()

    if bookmarked:
        console.print(f"★ Bookmarked {article_id}")
    else:
        console.print(f"☆ Removed bookmark {article_id}")


def bookmarks_command(
    page: int = typer.Option(1, "--page", "-p", help="Page to show", min=1),
    config_path: Optional[Path] = config_option,
) -> None:
    """List bookmarked articles, most recently bookmarked first."""
    services = open_services(config_path)
    try:
        snapshot, page_size = asyncio.run(_bookmarked_page(services, page))
    except StoreError as e:
        console.print(f"[red]Local cache error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        services.close()

    start = (page - 1) * page_size
    items = snapshot.items[start:start + page_size]
    if not items:
        console.print("[yellow]No bookmarked articles.[/yellow]")
        return
    console.print(articles_table(f"Bookmarks · page {page}", items, start=start))
