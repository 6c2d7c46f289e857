"""``mintmarket events ADDRESS`` — list the journaled events of a contract."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from mintmarket.config import config
from mintmarket.core.event_journal import EventJournal, JournalIntegrityError
from mintmarket.monitor.renderer import MarketRenderer

console = Console()


def events_cmd(
    address: str = typer.Argument(
        ...,
        help="Contract address whose events to list.",
    ),
    event_name: str = typer.Option(
        None,
        "--event",
        "-e",
        help="Only show events with this name (e.g. ItemListed).",
    ),
    verify_chain: bool = typer.Option(
        False,
        "--verify-chain",
        "-V",
        help="Verify the hash chain integrity before displaying.",
    ),
    journal_db: Path = typer.Option(
        None,
        "--journal",
        "-j",
        help="Path to the event journal database (defaults to MINTMARKET_JOURNAL_PATH).",
    ),
) -> None:
    """List journaled events of one contract in commit order."""
    db_path = journal_db or config.journal_path
    if not db_path.exists():
        console.print(f"[bold red]Journal not found:[/bold red] {db_path}")
        console.print("[dim]Run a scenario first with: mintmarket demo[/dim]")
        raise typer.Exit(code=1)

    journal = EventJournal(db_path)
    renderer = MarketRenderer(console=console)

    address = address.lower()
    entries = journal.get_entries(address, event_name=event_name)
    if not entries:
        console.print(f"[bold red]No events for:[/bold red] {address}")
        known = journal.get_contract_addresses()
        if known:
            console.print("\n[bold]Contracts in journal:[/bold]")
            for addr in known:
                console.print(f"  [cyan]{addr}[/cyan]")
        raise typer.Exit(code=1)

    if verify_chain:
        console.print("[bold cyan]Verifying hash chain...[/bold cyan]")
        try:
            valid = journal.verify_chain(address)
            renderer.print_chain_verification(address, valid)
        except JournalIntegrityError as exc:
            console.print(f"[bold red]Chain verification failed:[/bold red] {exc}")
            renderer.print_chain_verification(address, False)
            raise typer.Exit(code=2) from exc
        console.print()

    renderer.print_events(entries, title=f"Events of {address}")
