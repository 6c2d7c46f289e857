"""Shared test fixtures for mintmarket."""

from __future__ import annotations

from pathlib import Path

import pytest

from mintmarket.config import MarketConfig
from mintmarket.core.chain import Chain, ContractHandle
from mintmarket.core.event_journal import EventJournal
from mintmarket.core.units import parse_ether
from mintmarket.deploy import Deployments
from mintmarket.models.accounts import Account

PRICE = parse_ether("0.1")
TOKEN_ID = 0


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def market_config(tmp_dir: Path) -> MarketConfig:
    """Provide a development-chain config with the journal in a temp dir."""
    return MarketConfig(network="hardhat", journal_path=tmp_dir / "events.db")


@pytest.fixture
def journal(market_config: MarketConfig) -> EventJournal:
    """Provide a fresh EventJournal backed by a temp SQLite database."""
    return EventJournal(market_config.journal_path)


@pytest.fixture
def chain(market_config: MarketConfig, journal: EventJournal) -> Chain:
    """Provide a fresh chain with funded accounts and the journal attached."""
    return Chain(market_config, journal=journal)


@pytest.fixture
def deployer(chain: Chain) -> Account:
    return chain.accounts[0]


@pytest.fixture
def player(chain: Chain) -> Account:
    return chain.accounts[1]


@pytest.fixture
def deployments(chain: Chain) -> Deployments:
    """Provide deployments with every ``all``-tagged script already run."""
    deployments = Deployments(chain)
    deployments.fixture(["all"])
    return deployments


@pytest.fixture
def nft_marketplace(deployments: Deployments) -> ContractHandle:
    """The marketplace, connected to the deployer."""
    return deployments.get_contract("NftMarketplace")


@pytest.fixture
def basic_nft(deployments: Deployments) -> ContractHandle:
    """The sample collection, connected to the deployer."""
    return deployments.get_contract("BasicNft")


@pytest.fixture
def minted_nft(
    basic_nft: ContractHandle, nft_marketplace: ContractHandle
) -> ContractHandle:
    """Token 0 minted to the deployer and approved for the marketplace."""
    basic_nft.mint_nft()
    basic_nft.approve(nft_marketplace.address, TOKEN_ID)
    return basic_nft


@pytest.fixture
def listed_nft(
    minted_nft: ContractHandle, nft_marketplace: ContractHandle
) -> ContractHandle:
    """Token 0 listed by the deployer at ``PRICE``."""
    nft_marketplace.list_item(minted_nft.address, TOKEN_ID, PRICE)
    return minted_nft
