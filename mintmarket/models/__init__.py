"""mintmarket data models — all Pydantic v2, all frozen (immutable)."""

from mintmarket.models.accounts import ZERO_ADDRESS, Account
from mintmarket.models.deployment import DeploymentRecord
from mintmarket.models.events import (
    EVENT_TYPE_MAP,
    Approval,
    ApprovalForAll,
    ContractEvent,
    ItemBought,
    ItemCanceled,
    ItemListed,
    Transfer,
)
from mintmarket.models.journal import JournalEntry
from mintmarket.models.listing import Listing
from mintmarket.models.receipts import TxReceipt

__all__ = [
    # accounts
    "ZERO_ADDRESS",
    "Account",
    # marketplace
    "Listing",
    # events
    "ContractEvent",
    "ItemListed",
    "ItemBought",
    "ItemCanceled",
    "Transfer",
    "Approval",
    "ApprovalForAll",
    "EVENT_TYPE_MAP",
    # chain
    "TxReceipt",
    "JournalEntry",
    "DeploymentRecord",
]
