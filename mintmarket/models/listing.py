"""Marketplace listing model.

A price of ``0`` is the "not listed" sentinel returned by
``NftMarketplace.get_listing`` for assets without an active listing.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from mintmarket.models.accounts import ZERO_ADDRESS


class Listing(BaseModel):
    """An offer to sell one asset at a fixed price (wei)."""

    model_config = ConfigDict(frozen=True)

    nft_address: str
    token_id: int
    seller: str = ZERO_ADDRESS
    price: int = 0

    @property
    def is_listed(self) -> bool:
        return self.price > 0

    @classmethod
    def unlisted(cls, nft_address: str, token_id: int) -> Listing:
        """The sentinel value for an asset with no active listing."""
        return cls(nft_address=nft_address, token_id=token_id)
