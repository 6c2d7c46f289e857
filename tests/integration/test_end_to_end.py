"""Integration test — the full marketplace scenario on one chain.

Deploy via fixtures, mint and list token 0 at 0.1 ETH, fail a duplicate
listing, sell to a second account, withdraw, and check that the journal
and its projection agree with contract state throughout.
"""

from __future__ import annotations

import pytest

from mintmarket.core.chain import Chain
from mintmarket.core.errors import AlreadyListed, NoProceeds, PriceNotMet
from mintmarket.core.event_journal import EventJournal
from mintmarket.core.units import format_ether, parse_ether
from mintmarket.deploy import Deployments
from mintmarket.monitor.projection import ListingProjection

PRICE = parse_ether("0.1")
TOKEN_ID = 0


class TestMarketplaceScenario:
    """List, fail to relist, buy, withdraw."""

    def test_full_scenario(self, tmp_path):
        journal = EventJournal(tmp_path / "events.db")
        chain = Chain(journal=journal)
        deployments = Deployments(chain)
        deployments.fixture(["all"])
        deployer, player = chain.accounts[0], chain.accounts[1]
        market = deployments.get_contract("NftMarketplace", signer=deployer)
        nft = deployments.get_contract("BasicNft", signer=deployer)
        projection = ListingProjection(journal)

        # Seller mints, approves and lists token 0
        assert nft.mint_nft().return_value == TOKEN_ID
        nft.approve(market.address, TOKEN_ID)
        market.list_item(nft.address, TOKEN_ID, PRICE)
        assert projection.snapshot(market.address).get_item(nft.address, TOKEN_ID).price == PRICE

        # Duplicate listing reverts and leaves no trace
        block = chain.block_number
        with pytest.raises(AlreadyListed) as exc_info:
            market.list_item(nft.address, TOKEN_ID, PRICE)
        assert str(exc_info.value) == f'NftMarketplace__AlreadyListed("{nft.address}", 0)'
        assert chain.block_number == block

        # Underpayment changes nothing
        player_balance = chain.get_balance(player)
        with pytest.raises(PriceNotMet):
            market.connect(player).buy_item(nft.address, TOKEN_ID, value=PRICE // 2)
        assert chain.get_balance(player) == player_balance
        assert market.get_listing(nft.address, TOKEN_ID).price == PRICE

        # Buyer pays 0.1
        receipt = market.connect(player).buy_item(nft.address, TOKEN_ID, value=PRICE)
        assert chain.get_balance(player) == player_balance - PRICE - receipt.gas_cost
        assert nft.owner_of(TOKEN_ID) == player.address
        assert market.get_proceeds(deployer.address) == PRICE
        assert market.get_listing(nft.address, TOKEN_ID).price == 0

        # Seller withdraws
        balance_before = chain.get_balance(deployer)
        receipt = market.withdraw_proceeds()
        assert market.get_proceeds(deployer.address) == 0
        assert chain.get_balance(deployer) == balance_before + PRICE - receipt.gas_cost
        with pytest.raises(NoProceeds):
            market.withdraw_proceeds()

        # Journal and projection
        snapshot = projection.snapshot(market.address)
        assert snapshot.active_items == []
        assert snapshot.sales_count == 1
        assert format_ether(snapshot.sales_volume) == "0.1"
        assert snapshot.chain_valid is True
        for address in journal.get_contract_addresses():
            assert journal.verify_chain(address) is True
        assert [e.event_name for e in journal.get_entries(market.address)] == [
            "ItemListed",
            "ItemBought",
        ]
        assert [e.event_name for e in journal.get_entries(nft.address)] == [
            "Transfer",
            "Approval",
            "Transfer",
        ]

    def test_resale_by_buyer(self, chain, nft_marketplace, listed_nft, deployer, player):
        """The buyer can list the token again once they own it."""
        nft_marketplace.connect(player).buy_item(listed_nft.address, TOKEN_ID, value=PRICE)
        listed_nft.connect(player).approve(nft_marketplace.address, TOKEN_ID)
        resale = nft_marketplace.connect(player)
        resale.list_item(listed_nft.address, TOKEN_ID, PRICE * 2)

        third = chain.accounts[2]
        nft_marketplace.connect(third).buy_item(listed_nft.address, TOKEN_ID, value=PRICE * 2)

        assert listed_nft.owner_of(TOKEN_ID) == third.address
        assert nft_marketplace.get_proceeds(deployer.address) == PRICE
        assert nft_marketplace.get_proceeds(player.address) == PRICE * 2
        assert chain.get_balance(nft_marketplace.address) == PRICE * 3

    def test_many_sellers_keep_separate_proceeds(self, chain, nft_marketplace, basic_nft):
        sellers = chain.accounts[2:5]
        buyer = chain.accounts[5]
        for seller in sellers:
            nft = basic_nft.connect(seller)
            token_id = nft.mint_nft().return_value
            nft.approve(nft_marketplace.address, token_id)
            nft_marketplace.connect(seller).list_item(basic_nft.address, token_id, PRICE)
            nft_marketplace.connect(buyer).buy_item(basic_nft.address, token_id, value=PRICE)

        for seller in sellers:
            assert nft_marketplace.get_proceeds(seller.address) == PRICE
            nft_marketplace.connect(seller).withdraw_proceeds()
            assert nft_marketplace.get_proceeds(seller.address) == 0
        assert chain.get_balance(nft_marketplace.address) == 0
        assert basic_nft.balance_of(buyer.address) == len(sellers)
