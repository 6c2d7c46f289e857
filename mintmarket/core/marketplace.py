"""NftMarketplace — listing registry and proceeds ledger.

Sellers list ERC-721 tokens they own at a fixed price without giving up
custody: the marketplace only needs transfer approval.  Buyers pay the
listed price, the seller's share is credited to a proceeds balance, and
sellers pull their proceeds with ``withdraw_proceeds``.

Checks-effects-interactions
---------------------------
``buy_item`` and ``withdraw_proceeds`` are the only operations that hand
control to foreign code (the token transfer may call the buyer's
``on_erc721_received``; the value transfer may call the seller's
``receive``).  Both finish every write to ``MarketplaceStore`` before that
call, so a re-entrant call observes the listing already gone and the
proceeds already zeroed.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from mintmarket.core.contract import Contract, external, payable, view
from mintmarket.core.errors import (
    AlreadyListed,
    NoProceeds,
    NotApprovedForMarketplace,
    NotListed,
    NotOwner,
    PriceMustBeAboveZero,
    PriceNotMet,
    TransferFailed,
)
from mintmarket.models.events import ItemBought, ItemCanceled, ItemListed
from mintmarket.models.listing import Listing

logger = logging.getLogger(__name__)


class MarketplaceStore(BaseModel):
    """Owned storage of the marketplace: active listings and proceeds.

    Only active listings are stored; a missing key means "not listed".
    """

    listings: dict[tuple[str, int], Listing] = Field(default_factory=dict)
    proceeds: dict[str, int] = Field(default_factory=dict)

    def get_listing(self, nft_address: str, token_id: int) -> Listing | None:
        return self.listings.get((nft_address, token_id))

    def put_listing(self, listing: Listing) -> None:
        self.listings[(listing.nft_address, listing.token_id)] = listing

    def delete_listing(self, nft_address: str, token_id: int) -> None:
        self.listings.pop((nft_address, token_id), None)

    def credit(self, account: str, amount: int) -> None:
        self.proceeds[account] = self.proceeds.get(account, 0) + amount


class NftMarketplace(Contract):
    contract_name: ClassVar[str] = "NftMarketplace"

    def __init__(self, chain: Any, address: str) -> None:
        super().__init__(chain, address)
        self.store = MarketplaceStore()

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _require_not_listed(self, nft_address: str, token_id: int) -> None:
        if self.store.get_listing(nft_address, token_id) is not None:
            raise AlreadyListed(nft_address, token_id)

    def _require_listed(self, nft_address: str, token_id: int) -> Listing:
        listing = self.store.get_listing(nft_address, token_id)
        if listing is None:
            raise NotListed(nft_address, token_id)
        return listing

    def _require_owner(self, nft_address: str, token_id: int, spender: str) -> str:
        owner = self.chain.invoke(nft_address, "owner_of", token_id)
        if spender != owner:
            raise NotOwner()
        return owner

    def _require_approved(self, nft_address: str, token_id: int, owner: str) -> None:
        approved = self.chain.invoke(nft_address, "get_approved", token_id)
        if approved == self.address:
            return
        if self.chain.invoke(nft_address, "is_approved_for_all", owner, self.address):
            return
        raise NotApprovedForMarketplace()

    # ------------------------------------------------------------------
    # Listing lifecycle
    # ------------------------------------------------------------------

    @external
    def list_item(self, nft_address: str, token_id: int, price: int) -> None:
        """List an owned, approved token at *price* wei."""
        seller = self.msg_sender
        self._require_not_listed(nft_address, token_id)
        self._require_owner(nft_address, token_id, seller)
        if price <= 0:
            raise PriceMustBeAboveZero()
        self._require_approved(nft_address, token_id, seller)

        self.store.put_listing(
            Listing(nft_address=nft_address, token_id=token_id, seller=seller, price=price)
        )
        self.emit(
            ItemListed(seller=seller, nft_address=nft_address, token_id=token_id, price=price)
        )
        logger.info("Listed %s #%d at %d wei by %s.", nft_address, token_id, price, seller)

    @payable
    def buy_item(self, nft_address: str, token_id: int) -> None:
        """Buy a listed token by attaching at least its price.

        The seller is credited exactly the listed price; any overpayment is
        credited to the buyer's own proceeds.
        """
        listing = self._require_listed(nft_address, token_id)
        paid = self.msg_value
        if paid < listing.price:
            raise PriceNotMet(nft_address, token_id, listing.price)
        buyer = self.msg_sender

        self.store.credit(listing.seller, listing.price)
        if paid > listing.price:
            self.store.credit(buyer, paid - listing.price)
        self.store.delete_listing(nft_address, token_id)

        # Interaction last: the receiver hook may re-enter.
        self.chain.invoke(
            nft_address, "safe_transfer_from", listing.seller, buyer, token_id
        )
        self.emit(
            ItemBought(
                buyer=buyer, nft_address=nft_address, token_id=token_id, price=listing.price
            )
        )
        logger.info(
            "Sold %s #%d to %s for %d wei.", nft_address, token_id, buyer, listing.price
        )

    @external
    def cancel_listing(self, nft_address: str, token_id: int) -> None:
        seller = self.msg_sender
        self._require_owner(nft_address, token_id, seller)
        self._require_listed(nft_address, token_id)

        self.store.delete_listing(nft_address, token_id)
        self.emit(ItemCanceled(seller=seller, nft_address=nft_address, token_id=token_id))
        logger.info("Canceled listing %s #%d.", nft_address, token_id)

    @external
    def update_listing(self, nft_address: str, token_id: int, new_price: int) -> None:
        """Change the price of an existing listing; the seller is unchanged."""
        listing = self._require_listed(nft_address, token_id)
        self._require_owner(nft_address, token_id, self.msg_sender)
        if new_price <= 0:
            raise PriceMustBeAboveZero()

        updated = listing.model_copy(update={"price": new_price})
        self.store.put_listing(updated)
        self.emit(
            ItemListed(
                seller=updated.seller,
                nft_address=nft_address,
                token_id=token_id,
                price=new_price,
            )
        )
        logger.info("Repriced %s #%d to %d wei.", nft_address, token_id, new_price)

    # ------------------------------------------------------------------
    # Proceeds
    # ------------------------------------------------------------------

    @external
    def withdraw_proceeds(self) -> int:
        """Send the caller's whole proceeds balance to the caller.

        Returns the amount withdrawn.
        """
        caller = self.msg_sender
        proceeds = self.store.proceeds.get(caller, 0)
        if proceeds <= 0:
            raise NoProceeds()

        self.store.proceeds[caller] = 0
        if not self.chain.send_value(caller, proceeds):
            raise TransferFailed()
        logger.info("Withdrew %d wei of proceeds to %s.", proceeds, caller)
        return proceeds

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @view
    def get_listing(self, nft_address: str, token_id: int) -> Listing:
        """Return the listing, or a price-0 sentinel if the token is not listed."""
        listing = self.store.get_listing(nft_address, token_id)
        return listing if listing is not None else Listing.unlisted(nft_address, token_id)

    @view
    def get_proceeds(self, seller: str) -> int:
        return self.store.proceeds.get(seller, 0)
