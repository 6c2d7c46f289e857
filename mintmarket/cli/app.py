"""Main Typer application — imports and registers all CLI commands.

Entry point: ``mintmarket`` (configured via pyproject.toml scripts).

Commands: demo, events, listings.
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from mintmarket.cli.commands.demo import demo_cmd
from mintmarket.cli.commands.events_cmd import events_cmd
from mintmarket.cli.commands.listings_cmd import listings_cmd
from mintmarket.config import config

app = typer.Typer(
    name="mintmarket",
    help="mintmarket: NFT marketplace contracts on a simulated chain.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="demo", help="Deploy, list, buy and withdraw on a fresh chain.")(demo_cmd)
app.command(name="events", help="List journaled events of a contract.")(events_cmd)
app.command(name="listings", help="Show active listings of a marketplace.")(listings_cmd)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    app()


if __name__ == "__main__":
    main()
