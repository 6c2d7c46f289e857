"""Runtime configuration — env-driven.

Centralized config using pydantic-settings. Reads from a .env file and
MINTMARKET_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class MarketConfig(BaseSettings):
    """Chain and tooling configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export MINTMARKET_NETWORK=sepolia
        export MINTMARKET_LOG_LEVEL=DEBUG
        export MINTMARKET_JOURNAL_PATH=/data/events.db

    Or via .env file::

        MINTMARKET_GAS_PRICE_WEI=2000000000
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MINTMARKET_",
        env_file_encoding="utf-8",
    )

    # Runtime
    log_level: str = "INFO"

    # Network
    network: str = "hardhat"
    development_chains: list[str] = ["hardhat", "localhost"]
    chain_id: int = 31337
    verification_block_confirmations: int = 6

    # Accounts and fees
    account_count: int = 10
    initial_balance_ether: int = 10_000
    gas_price_wei: int = 1_000_000_000

    # Storage
    journal_path: Path = Path(".mintmarket/events.db")

    @property
    def is_development_chain(self) -> bool:
        """Whether the configured network is a local development chain."""
        return self.network in self.development_chains

    @property
    def wait_block_confirmations(self) -> int:
        """Confirmations to wait for after a deployment."""
        if self.is_development_chain:
            return 1
        return self.verification_block_confirmations


# Module-level singleton, import as `from mintmarket.config import config`
config = MarketConfig()
