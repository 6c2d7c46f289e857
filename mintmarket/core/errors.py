"""Revert errors raised by contract code and the chain.

A ``ContractRevert`` aborts the transaction it is raised in: the chain
restores every balance, storage value and log touched by the transaction
and re-raises the error to the caller.  ``str(err)`` renders the error the
way a Solidity custom error is reported, e.g.::

    NftMarketplace__AlreadyListed("0x5fbdb2315678afecb367f032d93f642f64180aa3", 0)
"""

from __future__ import annotations

from typing import Any, ClassVar


def _render_arg(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ContractRevert(RuntimeError):
    """Base class for every error that reverts a transaction."""

    prefix: ClassVar[str] = ""

    def __init__(self, *args: Any) -> None:
        super().__init__(*args)
        self.revert_args = args

    @property
    def error_name(self) -> str:
        return f"{self.prefix}{type(self).__name__}"

    def __str__(self) -> str:
        rendered = ", ".join(_render_arg(a) for a in self.revert_args)
        return f"{self.error_name}({rendered})"


# ---------------------------------------------------------------------------
# NftMarketplace
# ---------------------------------------------------------------------------


class NftMarketplaceError(ContractRevert):
    prefix: ClassVar[str] = "NftMarketplace__"


class NotOwner(NftMarketplaceError):
    """Caller does not own the referenced asset."""


class AlreadyListed(NftMarketplaceError):
    def __init__(self, nft_address: str, token_id: int) -> None:
        super().__init__(nft_address, token_id)
        self.nft_address = nft_address
        self.token_id = token_id


class NotListed(NftMarketplaceError):
    def __init__(self, nft_address: str, token_id: int) -> None:
        super().__init__(nft_address, token_id)
        self.nft_address = nft_address
        self.token_id = token_id


class PriceMustBeAboveZero(NftMarketplaceError):
    pass


class NotApprovedForMarketplace(NftMarketplaceError):
    """The marketplace cannot transfer the asset on the owner's behalf."""


class PriceNotMet(NftMarketplaceError):
    def __init__(self, nft_address: str, token_id: int, price: int) -> None:
        super().__init__(nft_address, token_id, price)
        self.nft_address = nft_address
        self.token_id = token_id
        self.price = price


class NoProceeds(NftMarketplaceError):
    pass


class TransferFailed(NftMarketplaceError):
    """The native value transfer to the withdrawing seller failed."""


# ---------------------------------------------------------------------------
# ERC-721
# ---------------------------------------------------------------------------


class ERC721Error(ContractRevert):
    pass


class ERC721NonexistentToken(ERC721Error):
    def __init__(self, token_id: int) -> None:
        super().__init__(token_id)
        self.token_id = token_id


class ERC721IncorrectOwner(ERC721Error):
    def __init__(self, sender: str, token_id: int, owner: str) -> None:
        super().__init__(sender, token_id, owner)


class ERC721InsufficientApproval(ERC721Error):
    def __init__(self, operator: str, token_id: int) -> None:
        super().__init__(operator, token_id)


class ERC721InvalidApprover(ERC721Error):
    def __init__(self, approver: str) -> None:
        super().__init__(approver)


class ERC721InvalidOperator(ERC721Error):
    def __init__(self, operator: str) -> None:
        super().__init__(operator)


class ERC721InvalidReceiver(ERC721Error):
    def __init__(self, receiver: str) -> None:
        super().__init__(receiver)


# ---------------------------------------------------------------------------
# Chain-level reverts
# ---------------------------------------------------------------------------


class InsufficientFunds(ContractRevert):
    def __init__(self, address: str, balance: int, required: int) -> None:
        super().__init__(address, balance, required)
        self.address = address
        self.balance = balance
        self.required = required


class NonPayable(ContractRevert):
    """Value was attached to a call of a non-payable method."""

    def __init__(self, method: str) -> None:
        super().__init__(method)


# ---------------------------------------------------------------------------
# Misuse of the chain API (not reverts)
# ---------------------------------------------------------------------------


class ChainError(RuntimeError):
    """Raised when the chain is driven incorrectly (not a contract revert)."""


class UnknownContract(ChainError):
    """Raised when no contract is deployed at the requested address."""
