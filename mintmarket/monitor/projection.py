"""ListingProjection — active listings rebuilt from journaled events.

The projection is what an off-chain indexer would serve to a marketplace
front end.  It never stores state: every ``snapshot()`` replays the
journal for one marketplace address.

Replay rules
------------
- ``ItemListed``   : add the item, or re-price it if already active.
- ``ItemBought``   : remove the item, count the sale.
- ``ItemCanceled`` : remove the item.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from mintmarket.core.event_journal import EventJournal, JournalIntegrityError
from mintmarket.models.journal import JournalEntry


class ActiveItem(BaseModel):
    """A listing that is active according to the journal."""

    model_config = ConfigDict(frozen=True)

    nft_address: str
    token_id: int
    seller: str
    price: int
    listed_at_block: int


class MarketSnapshot(BaseModel):
    """A frozen, point-in-time view of one marketplace."""

    model_config = ConfigDict(frozen=True)

    marketplace_address: str
    active_items: list[ActiveItem] = []
    sales_count: int = 0
    sales_volume: int = 0
    canceled_count: int = 0
    event_count: int = 0
    last_block: int = 0
    chain_valid: bool = True
    taken_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def get_item(self, nft_address: str, token_id: int) -> ActiveItem | None:
        for item in self.active_items:
            if item.nft_address == nft_address and item.token_id == token_id:
                return item
        return None


class ListingProjection:
    """Pure read-only projection over an ``EventJournal``.

    Parameters
    ----------
    journal:
        The journal to replay from.
    """

    def __init__(self, journal: EventJournal) -> None:
        self._journal = journal

    def snapshot(self, marketplace_address: str) -> MarketSnapshot:
        """Replay the marketplace's events into a fresh snapshot."""
        address = marketplace_address.lower()
        entries = self._journal.get_entries(address)

        active: dict[tuple[str, int], ActiveItem] = {}
        sales_count = 0
        sales_volume = 0
        canceled_count = 0

        for entry in entries:
            key = self._key(entry)
            if key is None:
                continue
            if entry.event_name == "ItemListed":
                active[key] = ActiveItem(
                    nft_address=key[0],
                    token_id=key[1],
                    seller=entry.args["seller"],
                    price=int(entry.args["price"]),
                    listed_at_block=entry.block_number,
                )
            elif entry.event_name == "ItemBought":
                active.pop(key, None)
                sales_count += 1
                sales_volume += int(entry.args["price"])
            elif entry.event_name == "ItemCanceled":
                active.pop(key, None)
                canceled_count += 1

        return MarketSnapshot(
            marketplace_address=address,
            active_items=sorted(active.values(), key=lambda i: (i.nft_address, i.token_id)),
            sales_count=sales_count,
            sales_volume=sales_volume,
            canceled_count=canceled_count,
            event_count=len(entries),
            last_block=entries[-1].block_number if entries else 0,
            chain_valid=self._check_chain_valid(address),
        )

    @staticmethod
    def _key(entry: JournalEntry) -> tuple[str, int] | None:
        if "nft_address" not in entry.args or "token_id" not in entry.args:
            return None
        return entry.args["nft_address"], int(entry.args["token_id"])

    def _check_chain_valid(self, address: str) -> bool:
        """Check hash chain integrity without raising."""
        try:
            return self._journal.verify_chain(address)
        except JournalIntegrityError:
            return False
