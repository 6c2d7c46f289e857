"""Transaction receipt model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, SerializeAsAny

from mintmarket.models.events import ContractEvent


class TxReceipt(BaseModel):
    """Outcome of a mined transaction.

    Only successful transactions produce receipts; a reverted transaction
    raises its revert error instead and leaves no trace on the chain.
    """

    model_config = ConfigDict(frozen=True)

    tx_hash: str
    block_number: int
    from_address: str
    to_address: str
    value: int = 0
    gas_used: int
    effective_gas_price: int
    events: list[SerializeAsAny[ContractEvent]] = []
    return_value: Any = None
    status: int = 1

    @property
    def gas_cost(self) -> int:
        """Total fee paid by the sender, in wei."""
        return self.gas_used * self.effective_gas_price

    def events_named(self, event_name: str) -> list[ContractEvent]:
        """Return the events of this receipt with the given name, in log order."""
        return [e for e in self.events if e.event_name == event_name]
