"""``mintmarket listings ADDRESS`` — show the active listings of a marketplace.

The view is a projection over the event journal: it never reads contract
storage, only the events the marketplace emitted.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from mintmarket.config import config
from mintmarket.core.event_journal import EventJournal
from mintmarket.monitor.projection import ListingProjection
from mintmarket.monitor.renderer import MarketRenderer

console = Console()


def listings_cmd(
    address: str = typer.Argument(
        ...,
        help="NftMarketplace contract address.",
    ),
    journal_db: Path = typer.Option(
        None,
        "--journal",
        "-j",
        help="Path to the event journal database (defaults to MINTMARKET_JOURNAL_PATH).",
    ),
) -> None:
    """Show active listings, sales volume and journal status."""
    db_path = journal_db or config.journal_path
    if not db_path.exists():
        console.print(f"[bold red]Journal not found:[/bold red] {db_path}")
        console.print("[dim]Run a scenario first with: mintmarket demo[/dim]")
        raise typer.Exit(code=1)

    projection = ListingProjection(EventJournal(db_path))
    snapshot = projection.snapshot(address)
    if snapshot.event_count == 0:
        console.print(f"[bold red]No marketplace events for:[/bold red] {address}")
        raise typer.Exit(code=1)

    MarketRenderer(console=console).print_snapshot(snapshot)
