"""Tests for MarketRenderer — Rich output of snapshots, events and receipts."""

from __future__ import annotations

from io import StringIO

from rich.console import Console

from mintmarket.core.errors import AlreadyListed
from mintmarket.core.units import parse_ether
from mintmarket.monitor.projection import ListingProjection, MarketSnapshot
from mintmarket.monitor.renderer import MarketRenderer

PRICE = parse_ether("0.1")


def _renderer() -> tuple[MarketRenderer, StringIO]:
    buffer = StringIO()
    console = Console(file=buffer, width=300, force_terminal=False, color_system=None)
    return MarketRenderer(console=console), buffer


class TestMarketRenderer:
    def test_snapshot_shows_listing(self, journal, nft_marketplace, listed_nft):
        renderer, buffer = _renderer()
        renderer.print_snapshot(ListingProjection(journal).snapshot(nft_marketplace.address))
        output = buffer.getvalue()
        assert "NftMarketplace" in output
        assert "0.1" in output
        assert "valid" in output

    def test_empty_snapshot(self):
        renderer, buffer = _renderer()
        renderer.print_snapshot(MarketSnapshot(marketplace_address="0x" + "aa" * 20))
        assert "no active listings" in buffer.getvalue()

    def test_broken_chain_flagged(self):
        renderer, buffer = _renderer()
        snapshot = MarketSnapshot(marketplace_address="0x" + "aa" * 20, chain_valid=False)
        renderer.print_snapshot(snapshot)
        assert "BROKEN" in buffer.getvalue()

    def test_events_table(self, journal, nft_marketplace, listed_nft):
        renderer, buffer = _renderer()
        renderer.print_events(journal.get_entries(nft_marketplace.address))
        output = buffer.getvalue()
        assert "ItemListed" in output
        assert f"price={PRICE}" in output

    def test_receipt_and_revert(self, basic_nft):
        renderer, buffer = _renderer()
        renderer.print_receipt("mint", basic_nft.mint_nft())
        renderer.print_revert("list again", AlreadyListed(basic_nft.address, 0))
        output = buffer.getvalue()
        assert "Transfer" in output
        assert "NftMarketplace__AlreadyListed" in output

    def test_chain_verification(self):
        renderer, buffer = _renderer()
        renderer.print_chain_verification("0xabc", True)
        renderer.print_chain_verification("0xdef", False)
        output = buffer.getvalue()
        assert "0xabc is valid" in output
        assert "0xdef is BROKEN" in output
