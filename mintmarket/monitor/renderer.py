"""Rich terminal renderer for marketplace state and journaled events."""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mintmarket.core.units import format_ether
from mintmarket.models.journal import JournalEntry
from mintmarket.models.receipts import TxReceipt
from mintmarket.monitor.projection import MarketSnapshot

_EVENT_STYLES: dict[str, str] = {
    "ItemListed": "cyan",
    "ItemBought": "bold green",
    "ItemCanceled": "yellow",
    "Transfer": "magenta",
    "Approval": "dim",
    "ApprovalForAll": "dim",
}


def _short(address: str) -> str:
    return f"{address[:8]}...{address[-4:]}" if len(address) > 14 else address


class MarketRenderer:
    """Renders snapshots, receipts and journal entries as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def render_snapshot(self, snapshot: MarketSnapshot) -> Panel:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("NFT", min_width=16)
        table.add_column("Token", justify="right", width=8)
        table.add_column("Seller", min_width=16)
        table.add_column("Price (ETH)", justify="right")
        table.add_column("Block", justify="right", width=8)

        for item in snapshot.active_items:
            table.add_row(
                _short(item.nft_address),
                str(item.token_id),
                _short(item.seller),
                format_ether(item.price),
                str(item.listed_at_block),
            )
        if not snapshot.active_items:
            table.add_row("[dim]no active listings[/dim]", "", "", "", "")

        chain_status = (
            "[green]valid[/green]" if snapshot.chain_valid else "[bold red]BROKEN[/bold red]"
        )
        summary = "  |  ".join(
            [
                f"[bold]Listed:[/bold] {len(snapshot.active_items)}",
                f"[bold]Sales:[/bold] {snapshot.sales_count}",
                f"[bold]Volume:[/bold] {format_ether(snapshot.sales_volume)} ETH",
                f"[bold]Canceled:[/bold] {snapshot.canceled_count}",
                f"[bold]Journal:[/bold] {chain_status}",
            ]
        )

        return Panel(
            Group(table, Text(""), Text.from_markup(summary)),
            title=f"[bold]NftMarketplace {_short(snapshot.marketplace_address)}[/bold]",
            subtitle=f"Block {snapshot.last_block}",
            border_style="blue",
            padding=(1, 2),
        )

    def print_snapshot(self, snapshot: MarketSnapshot) -> None:
        self.console.print(self.render_snapshot(snapshot))

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def render_events(self, entries: list[JournalEntry], title: str = "Events") -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Block", justify="right", width=7)
        table.add_column("Event", min_width=14)
        table.add_column("Arguments")
        table.add_column("Tx", style="dim")

        for entry in entries:
            style = _EVENT_STYLES.get(entry.event_name, "")
            args = ", ".join(f"{k}={v}" for k, v in entry.args.items())
            table.add_row(
                str(entry.block_number),
                f"[{style}]{entry.event_name}[/{style}]" if style else entry.event_name,
                args,
                entry.tx_hash[:12],
            )
        return table

    def print_events(self, entries: list[JournalEntry], title: str = "Events") -> None:
        self.console.print(self.render_events(entries, title=title))

    # ------------------------------------------------------------------
    # Receipts and verification
    # ------------------------------------------------------------------

    def print_receipt(self, label: str, receipt: TxReceipt) -> None:
        names = ", ".join(e.event_name for e in receipt.events) or "-"
        self.console.print(
            f"[green]OK[/green] {label} "
            f"[dim](block {receipt.block_number}, gas {receipt.gas_used}, events: {names})[/dim]"
        )

    def print_revert(self, label: str, error: Exception) -> None:
        self.console.print(f"[yellow]REVERTED[/yellow] {label}: [bold]{error}[/bold]")

    def print_chain_verification(self, address: str, valid: bool) -> None:
        if valid:
            self.console.print(f"[green]Event journal for {address} is valid.[/green]")
        else:
            self.console.print(f"[bold red]Event journal for {address} is BROKEN![/bold red]")
