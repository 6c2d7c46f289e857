"""Ether / wei conversions.

All amounts on the chain are integer wei.  These helpers exist for the
edges (tests, CLI output) where humans read and write ether.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext

WEI_PER_ETHER = 10**18


def parse_ether(amount: str | int | Decimal) -> int:
    """Convert an ether amount to wei.

    >>> parse_ether("0.1")
    100000000000000000
    >>> parse_ether(2)
    2000000000000000000
    """
    with localcontext() as ctx:
        ctx.prec = 80
        try:
            wei = Decimal(str(amount)) * WEI_PER_ETHER
        except InvalidOperation as exc:
            raise ValueError(f"Invalid ether amount: {amount!r}") from exc
    if not wei.is_finite():
        raise ValueError(f"Ether amount must be finite: {amount!r}")
    if wei != wei.to_integral_value():
        raise ValueError(f"Ether amount has more than 18 decimals: {amount!r}")
    return int(wei)


def format_ether(wei: int) -> str:
    """Render a wei amount as an ether string.

    >>> format_ether(10**17)
    '0.1'
    >>> format_ether(10**18)
    '1.0'
    """
    with localcontext() as ctx:
        ctx.prec = 80
        text = format((Decimal(wei) / WEI_PER_ETHER).normalize(), "f")
    if "." not in text:
        text += ".0"
    return text
