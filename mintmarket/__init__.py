"""mintmarket: NFT marketplace contracts on a deterministic simulated chain.

  - NftMarketplace: fixed-price listings, pull-payment proceeds
  - BasicNft: ERC-721 sample collection (mint, approve, safe transfer)
  - Chain: serialized transactions, nested call frames, revert rollback
  - Tag-based deployments with confirmation waits
  - Hash-chained SQLite event journal and a listings projection
"""

__version__ = "0.1.0"
__description__ = "NFT marketplace contracts on a deterministic simulated chain"

from mintmarket.core.basic_nft import BasicNft
from mintmarket.core.chain import Chain
from mintmarket.core.marketplace import NftMarketplace
from mintmarket.deploy import Deployments
from mintmarket.cli.app import app as cli

__all__ = ["BasicNft", "Chain", "Deployments", "NftMarketplace", "cli", "__version__"]
