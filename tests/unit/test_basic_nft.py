"""Unit tests for BasicNft — minting, approvals and transfers."""

from __future__ import annotations

import pytest

from mintmarket.core.basic_nft import ERC721_RECEIVED, TOKEN_URI, BasicNft
from mintmarket.core.contract import Contract, external, view
from mintmarket.core.errors import (
    ERC721IncorrectOwner,
    ERC721InsufficientApproval,
    ERC721InvalidApprover,
    ERC721InvalidOperator,
    ERC721InvalidReceiver,
    ERC721NonexistentToken,
)
from mintmarket.models.accounts import ZERO_ADDRESS


class Receiver(Contract):
    """Contract that acknowledges incoming tokens."""

    contract_name = "Receiver"

    def __init__(self, chain, address):
        super().__init__(chain, address)
        self.received: list[int] = []

    @external
    def on_erc721_received(self, operator, from_address, token_id, data):
        self.received.append(token_id)
        return ERC721_RECEIVED

    @view
    def received_count(self) -> int:
        return len(self.received)


class Sink(Contract):
    """Contract with no receiver hook."""

    contract_name = "Sink"


class TestMint:
    def test_constructor_sets_name_and_symbol(self, basic_nft):
        assert basic_nft.name() == "Dogie"
        assert basic_nft.symbol() == "DOG"

    def test_custom_constructor_args(self, chain, deployer):
        nft = chain.deploy(BasicNft, deployer, "Kitty", "KIT")
        assert nft.name() == "Kitty"
        assert nft.symbol() == "KIT"

    def test_mint_returns_sequential_ids(self, basic_nft):
        assert basic_nft.mint_nft().return_value == 0
        assert basic_nft.mint_nft().return_value == 1
        assert basic_nft.get_token_counter() == 2

    def test_mint_emits_transfer_from_zero(self, basic_nft, deployer):
        receipt = basic_nft.mint_nft()
        (transfer,) = receipt.events_named("Transfer")
        assert transfer.from_address == ZERO_ADDRESS
        assert transfer.to_address == deployer.address
        assert transfer.token_id == 0
        assert transfer.contract_address == basic_nft.address

    def test_mint_sets_owner_and_balance(self, basic_nft, deployer, player):
        basic_nft.mint_nft()
        basic_nft.connect(player).mint_nft()
        assert basic_nft.owner_of(0) == deployer.address
        assert basic_nft.owner_of(1) == player.address
        assert basic_nft.balance_of(deployer.address) == 1

    def test_token_uri(self, basic_nft):
        basic_nft.mint_nft()
        assert basic_nft.token_uri(0) == TOKEN_URI

    def test_unknown_token_reverts(self, basic_nft):
        with pytest.raises(ERC721NonexistentToken) as exc_info:
            basic_nft.owner_of(7)
        assert str(exc_info.value) == "ERC721NonexistentToken(7)"


class TestApprovals:
    def test_approve_emits_and_records(self, minted_nft, nft_marketplace, deployer):
        assert minted_nft.get_approved(0) == nft_marketplace.address
        receipt = minted_nft.approve(ZERO_ADDRESS, 0)
        (approval,) = receipt.events_named("Approval")
        assert approval.owner == deployer.address
        assert approval.approved == ZERO_ADDRESS
        assert minted_nft.get_approved(0) == ZERO_ADDRESS

    def test_stranger_cannot_approve(self, minted_nft, player):
        with pytest.raises(ERC721InvalidApprover):
            minted_nft.connect(player).approve(player.address, 0)

    def test_operator_can_approve(self, minted_nft, deployer, player, chain):
        minted_nft.set_approval_for_all(player.address, True)
        minted_nft.connect(player).approve(chain.accounts[2].address, 0)
        assert minted_nft.get_approved(0) == chain.accounts[2].address
        assert minted_nft.is_approved_for_all(deployer.address, player.address)

    def test_zero_operator_rejected(self, basic_nft):
        with pytest.raises(ERC721InvalidOperator):
            basic_nft.set_approval_for_all(ZERO_ADDRESS, True)


class TestTransfers:
    def test_owner_transfer_clears_approval(self, minted_nft, deployer, player):
        minted_nft.transfer_from(deployer.address, player.address, 0)
        assert minted_nft.owner_of(0) == player.address
        assert minted_nft.get_approved(0) == ZERO_ADDRESS
        assert minted_nft.balance_of(deployer.address) == 0
        assert minted_nft.balance_of(player.address) == 1

    def test_unapproved_spender_rejected(self, minted_nft, deployer, player):
        with pytest.raises(ERC721InsufficientApproval):
            minted_nft.connect(player).transfer_from(deployer.address, player.address, 0)

    def test_wrong_from_rejected(self, minted_nft, player, chain):
        with pytest.raises(ERC721IncorrectOwner):
            minted_nft.transfer_from(player.address, chain.accounts[2].address, 0)

    def test_transfer_to_zero_rejected(self, minted_nft, deployer):
        with pytest.raises(ERC721InvalidReceiver):
            minted_nft.transfer_from(deployer.address, ZERO_ADDRESS, 0)

    def test_safe_transfer_to_receiver_contract(self, chain, minted_nft, deployer):
        receiver = chain.deploy(Receiver, deployer)
        minted_nft.safe_transfer_from(deployer.address, receiver.address, 0)
        assert minted_nft.owner_of(0) == receiver.address
        assert receiver.received_count() == 1

    def test_safe_transfer_to_contract_without_hook_reverts(
        self, chain, minted_nft, deployer
    ):
        sink = chain.deploy(Sink, deployer)
        with pytest.raises(ERC721InvalidReceiver):
            minted_nft.safe_transfer_from(deployer.address, sink.address, 0)
        assert minted_nft.owner_of(0) == deployer.address

    def test_plain_transfer_to_contract_skips_hook(self, chain, minted_nft, deployer):
        sink = chain.deploy(Sink, deployer)
        minted_nft.transfer_from(deployer.address, sink.address, 0)
        assert minted_nft.owner_of(0) == sink.address
