"""Contract events emitted by the marketplace and the NFT contract.

Every event is a frozen model.  ``contract_address`` and ``log_index`` are
stamped by the chain at emission time; the remaining fields are the event
payload.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class ContractEvent(BaseModel):
    """Base class for all emitted events."""

    model_config = ConfigDict(frozen=True)

    event_name: ClassVar[str] = ""

    contract_address: str = ""
    log_index: int = 0

    def payload(self) -> dict[str, Any]:
        """Return the event arguments without the chain-assigned fields."""
        return self.model_dump(
            mode="json", exclude={"contract_address", "log_index"}
        )


# ---------------------------------------------------------------------------
# NftMarketplace
# ---------------------------------------------------------------------------


class ItemListed(ContractEvent):
    event_name: ClassVar[str] = "ItemListed"

    seller: str
    nft_address: str
    token_id: int
    price: int


class ItemBought(ContractEvent):
    event_name: ClassVar[str] = "ItemBought"

    buyer: str
    nft_address: str
    token_id: int
    price: int


class ItemCanceled(ContractEvent):
    event_name: ClassVar[str] = "ItemCanceled"

    seller: str
    nft_address: str
    token_id: int


# ---------------------------------------------------------------------------
# ERC-721
# ---------------------------------------------------------------------------


class Transfer(ContractEvent):
    event_name: ClassVar[str] = "Transfer"

    from_address: str
    to_address: str
    token_id: int


class Approval(ContractEvent):
    event_name: ClassVar[str] = "Approval"

    owner: str
    approved: str
    token_id: int


class ApprovalForAll(ContractEvent):
    event_name: ClassVar[str] = "ApprovalForAll"

    owner: str
    operator: str
    approved: bool


EVENT_TYPE_MAP: dict[str, type[ContractEvent]] = {
    cls.event_name: cls
    for cls in (ItemListed, ItemBought, ItemCanceled, Transfer, Approval, ApprovalForAll)
}
