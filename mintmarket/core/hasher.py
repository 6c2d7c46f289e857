"""Canonical hashing helpers for addresses, transaction hashes and the
event journal chain.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def derive_account_address(index: int, *, seed: str = "mintmarket") -> str:
    """Deterministic address for the ``index``-th funded account."""
    digest = sha256_hex(canonical_json_bytes({"seed": seed, "index": index}))
    return "0x" + digest[-40:]


def derive_contract_address(deployer: str, nonce: int) -> str:
    """Deterministic contract address from the deployer and its nonce."""
    digest = sha256_hex(canonical_json_bytes({"deployer": deployer, "nonce": nonce}))
    return "0x" + digest[-40:]


def compute_tx_hash(payload: dict[str, Any]) -> str:
    """``0x``-prefixed SHA-256 of a canonical transaction payload."""
    return "0x" + sha256_hex(canonical_json_bytes(payload))


def compute_entry_hash(entry_dict: dict[str, Any]) -> str:
    """SHA-256 of a journal entry (excluding the entry_hash field itself).

    This is the seal that makes each entry tamper-evident.
    """
    d = {k: v for k, v in entry_dict.items() if k != "entry_hash"}
    return sha256_hex(canonical_json_bytes(d))
