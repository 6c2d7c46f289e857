"""Deploy scripts for the marketplace and the sample NFT collection.

Both contracts take no constructor arguments.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mintmarket.core.basic_nft import BasicNft
from mintmarket.core.marketplace import NftMarketplace
from mintmarket.deploy.deployments import DeployScript

if TYPE_CHECKING:
    from mintmarket.deploy.deployments import Deployments


def deploy_nft_marketplace(deployments: Deployments) -> None:
    deployments.deploy(
        "NftMarketplace",
        NftMarketplace,
        from_address=deployments.deployer,
        args=[],
    )


def deploy_basic_nft(deployments: Deployments) -> None:
    deployments.deploy(
        "BasicNft",
        BasicNft,
        from_address=deployments.deployer,
        args=[],
    )


DEFAULT_SCRIPTS: list[DeployScript] = [
    DeployScript(
        name="deploy_nft_marketplace",
        tags=["all", "nftmarketplace"],
        run=deploy_nft_marketplace,
    ),
    DeployScript(
        name="deploy_basic_nft",
        tags=["all", "basicnft"],
        run=deploy_basic_nft,
    ),
]
