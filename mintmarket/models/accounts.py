"""Account identity model and the zero-address sentinel."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

ZERO_ADDRESS = "0x" + "0" * 40


class Account(BaseModel):
    """An externally owned account on the simulated chain.

    Balances live on the chain, not on this model; an ``Account`` only
    carries identity, the way a signer does.
    """

    model_config = ConfigDict(frozen=True)

    address: str
    index: int
