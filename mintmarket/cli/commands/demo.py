"""``mintmarket demo`` — run the marketplace scenario on a fresh chain.

Deploys both contracts, mints and lists a token, shows a duplicate
listing reverting, sells the token to a second account and withdraws the
seller's proceeds.  Every committed event lands in the journal, and the
listings projection is shown between steps.
"""

from __future__ import annotations

import time
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from mintmarket.config import config
from mintmarket.core.chain import Chain
from mintmarket.core.errors import AlreadyListed
from mintmarket.core.event_journal import EventJournal
from mintmarket.core.units import format_ether, parse_ether
from mintmarket.deploy import Deployments
from mintmarket.monitor.projection import ListingProjection
from mintmarket.monitor.renderer import MarketRenderer

console = Console()


def _reset_journal(db_path: Path) -> None:
    for suffix in ("", "-wal", "-shm"):
        Path(f"{db_path}{suffix}").unlink(missing_ok=True)


def demo_cmd(
    price: str = typer.Option(
        "0.1",
        "--price",
        "-p",
        help="Listing price in ether.",
    ),
    delay: float = typer.Option(
        0.0,
        "--delay",
        "-d",
        help="Delay in seconds between steps for visual effect.",
    ),
    journal_db: Path = typer.Option(
        None,
        "--journal",
        "-j",
        help=(
            "Path to the event journal, recreated on every run "
            "(defaults to MINTMARKET_JOURNAL_PATH)."
        ),
    ),
) -> None:
    """Deploy, list, buy and withdraw on a fresh chain."""
    try:
        price_wei = parse_ether(price)
    except ValueError as exc:
        console.print(f"[bold red]Invalid price:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc
    if price_wei <= 0:
        console.print(
            f"[bold red]Invalid price:[/bold red] must be above zero, got {price!r}"
        )
        raise typer.Exit(code=1)

    db_path = journal_db or config.journal_path
    _reset_journal(db_path)
    journal = EventJournal(db_path)
    chain = Chain(journal=journal)
    projection = ListingProjection(journal)
    renderer = MarketRenderer(console=console)

    console.print()
    console.print(
        Panel(
            "[bold]mintmarket demo[/bold]\n\n"
            "Deploys NftMarketplace and BasicNft on a fresh chain,\n"
            "then lists, buys and withdraws.",
            border_style="cyan",
            padding=(1, 2),
        )
    )

    deployments = Deployments(chain)
    deployments.fixture(["all"])
    deployer, player = chain.accounts[0], chain.accounts[1]
    marketplace = deployments.get_contract("NftMarketplace")
    basic_nft = deployments.get_contract("BasicNft")
    for record in deployments.all().values():
        console.print(
            f"[bold green]Deployed[/bold green] {record.name} at [cyan]{record.address}[/cyan]"
        )
    time.sleep(delay)

    # Seller: mint, approve, list
    console.print(f"\n[cyan]>>> Seller[/cyan] {deployer.address}")
    receipt = basic_nft.mint_nft()
    token_id = receipt.return_value
    renderer.print_receipt(f"mint_nft -> token {token_id}", receipt)
    renderer.print_receipt(
        "approve marketplace", basic_nft.approve(marketplace.address, token_id)
    )
    renderer.print_receipt(
        f"list_item at {format_ether(price_wei)} ETH",
        marketplace.list_item(basic_nft.address, token_id, price_wei),
    )
    try:
        marketplace.list_item(basic_nft.address, token_id, price_wei)
    except AlreadyListed as exc:
        renderer.print_revert("list_item again", exc)
    renderer.print_snapshot(projection.snapshot(marketplace.address))
    time.sleep(delay)

    # Buyer
    console.print(f"\n[cyan]>>> Buyer[/cyan] {player.address}")
    renderer.print_receipt(
        "buy_item",
        marketplace.connect(player).buy_item(basic_nft.address, token_id, value=price_wei),
    )
    new_owner = basic_nft.owner_of(token_id)
    console.print(f"Token {token_id} is now owned by [cyan]{new_owner}[/cyan]")
    time.sleep(delay)

    # Seller withdraws
    console.print("\n[cyan]>>> Seller[/cyan] withdraws proceeds")
    proceeds = marketplace.get_proceeds(deployer.address)
    balance_before = chain.get_balance(deployer)
    receipt = marketplace.withdraw_proceeds()
    balance_after = chain.get_balance(deployer)
    renderer.print_receipt("withdraw_proceeds", receipt)
    console.print(
        f"Proceeds {format_ether(proceeds)} ETH, gas {format_ether(receipt.gas_cost)} ETH, "
        f"balance change {format_ether(balance_after - balance_before)} ETH"
    )
    time.sleep(delay)

    # Final state
    console.print()
    snapshot = projection.snapshot(marketplace.address)
    renderer.print_snapshot(snapshot)
    console.print("[bold cyan]Verifying hash chains...[/bold cyan]")
    for address in journal.get_contract_addresses():
        renderer.print_chain_verification(address, journal.verify_chain(address))

    console.print()
    console.print(
        Panel(
            "\n".join([
                "[bold green]Demo Complete![/bold green]",
                "",
                f"[bold]Marketplace:[/bold] {marketplace.address}",
                f"[bold]Sales:[/bold]       {snapshot.sales_count}",
                f"[bold]Volume:[/bold]      {format_ether(snapshot.sales_volume)} ETH",
                f"[bold]Block:[/bold]       {chain.block_number}",
                f"[bold]Journal:[/bold]     {db_path}",
            ]),
            title="[bold]Demo Summary[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
