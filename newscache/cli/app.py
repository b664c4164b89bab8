"""Main CLI application."""

import logging

import typer
from dotenv import load_dotenv
from rich.logging import RichHandler

# Load .env file if it exists
load_dotenv()

from .articles import articles_command
from .bookmarks import bookmark_command, bookmarks_command
from .common import console
from .init import init_command
from .refresh import refresh_command

app = typer.Typer(
    name="newscache",
    help="newscache - Local news cache with paginated, searchable views",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


# Register commands
app.command("init")(init_command)
app.command("refresh")(refresh_command)
app.command("articles")(articles_command)
app.command("bookmark")(bookmark_command)
app.command("bookmarks")(bookmarks_command)


if __name__ == "__main__":
    app()
