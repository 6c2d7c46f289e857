"""Event journal entry model (append-only, hash-chained).

One chain per contract address.  Each entry records a single committed
event together with the block and transaction that produced it, and links
to the previous entry for the same contract via SHA-256.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class JournalEntry(BaseModel):
    """A single committed event in the journal."""

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    contract_address: str
    event_name: str
    block_number: int
    tx_hash: str
    log_index: int = 0
    args: dict[str, Any] = {}
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    previous_entry_hash: str = ""  # SHA-256 of previous entry for this contract
    entry_hash: str = ""  # computed on append, seals this entry
