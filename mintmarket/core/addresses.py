"""Address normalization."""

from __future__ import annotations

import re
from typing import Any

from mintmarket.models.accounts import ZERO_ADDRESS

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address(value: Any) -> bool:
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


def to_address(value: Any) -> str:
    """Resolve an account, contract handle or hex string to a lowercase address.

    Raises
    ------
    ValueError
        If *value* does not resolve to a well-formed address.
    """
    if not isinstance(value, str) and hasattr(value, "address"):
        value = value.address
    if not is_address(value):
        raise ValueError(f"Not an address: {value!r}")
    return value.lower()


__all__ = ["ZERO_ADDRESS", "is_address", "to_address"]
