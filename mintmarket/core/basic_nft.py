"""BasicNft — a minimal ERC-721 collection used as the marketplace's asset
ownership authority.

Anyone can mint; every token shares the same metadata URI.  Token ids
start at 0 and increase by one per mint.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from mintmarket.core.contract import Contract, external, view
from mintmarket.core.errors import (
    ERC721IncorrectOwner,
    ERC721InsufficientApproval,
    ERC721InvalidApprover,
    ERC721InvalidOperator,
    ERC721InvalidReceiver,
    ERC721NonexistentToken,
)
from mintmarket.models.accounts import ZERO_ADDRESS
from mintmarket.models.events import Approval, ApprovalForAll, Transfer

logger = logging.getLogger(__name__)

TOKEN_URI = (
    "ipfs://bafybeig37ioir76s7mg5oobetncojcm3c3hxasyd4rvid4jqhy4gkaheg4/"
    "?filename=0-PUG.json"
)

# Return value a receiving contract must produce from on_erc721_received.
ERC721_RECEIVED = "0x150b7a02"


class BasicNft(Contract):
    contract_name: ClassVar[str] = "BasicNft"

    def __init__(self, chain: Any, address: str) -> None:
        super().__init__(chain, address)
        self.name_ = ""
        self.symbol_ = ""
        self._token_counter = 0
        self._owners: dict[int, str] = {}
        self._balances: dict[str, int] = {}
        self._token_approvals: dict[int, str] = {}
        self._operator_approvals: dict[tuple[str, str], bool] = {}

    def constructor(self, name: str = "Dogie", symbol: str = "DOG") -> None:
        self.name_ = name
        self.symbol_ = symbol

    # ------------------------------------------------------------------
    # Minting and metadata
    # ------------------------------------------------------------------

    @external
    def mint_nft(self) -> int:
        """Mint the next token to the caller and return its id."""
        token_id = self._token_counter
        self._token_counter += 1
        self._mint(self.msg_sender, token_id)
        logger.debug("Minted token %d to %s.", token_id, self.msg_sender)
        return token_id

    @view
    def token_uri(self, token_id: int) -> str:
        self._require_owned(token_id)
        return TOKEN_URI

    @view
    def get_token_counter(self) -> int:
        return self._token_counter

    @view
    def name(self) -> str:
        return self.name_

    @view
    def symbol(self) -> str:
        return self.symbol_

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    @view
    def owner_of(self, token_id: int) -> str:
        return self._require_owned(token_id)

    @view
    def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    # ------------------------------------------------------------------
    # Approvals
    # ------------------------------------------------------------------

    @external
    def approve(self, to: str, token_id: int) -> None:
        owner = self._require_owned(token_id)
        sender = self.msg_sender
        if sender != owner and not self.is_approved_for_all(owner, sender):
            raise ERC721InvalidApprover(sender)
        self._token_approvals[token_id] = to
        self.emit(Approval(owner=owner, approved=to, token_id=token_id))

    @view
    def get_approved(self, token_id: int) -> str:
        self._require_owned(token_id)
        return self._token_approvals.get(token_id, ZERO_ADDRESS)

    @external
    def set_approval_for_all(self, operator: str, approved: bool) -> None:
        if operator == ZERO_ADDRESS:
            raise ERC721InvalidOperator(operator)
        owner = self.msg_sender
        self._operator_approvals[(owner, operator)] = bool(approved)
        self.emit(ApprovalForAll(owner=owner, operator=operator, approved=bool(approved)))

    @view
    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return self._operator_approvals.get((owner, operator), False)

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    @external
    def transfer_from(self, from_address: str, to_address: str, token_id: int) -> None:
        self._transfer(self.msg_sender, from_address, to_address, token_id)

    @external
    def safe_transfer_from(
        self, from_address: str, to_address: str, token_id: int, data: str = ""
    ) -> None:
        """Transfer, then require contract recipients to acknowledge receipt."""
        operator = self.msg_sender
        self._transfer(operator, from_address, to_address, token_id)
        if self.chain.is_contract(to_address):
            if not self.chain.has_method(to_address, "on_erc721_received"):
                raise ERC721InvalidReceiver(to_address)
            answer = self.chain.invoke(
                to_address, "on_erc721_received", operator, from_address, token_id, data
            )
            if answer != ERC721_RECEIVED:
                raise ERC721InvalidReceiver(to_address)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_owned(self, token_id: int) -> str:
        owner = self._owners.get(token_id)
        if owner is None:
            raise ERC721NonexistentToken(token_id)
        return owner

    def _is_authorized(self, owner: str, spender: str, token_id: int) -> bool:
        return (
            spender == owner
            or self.is_approved_for_all(owner, spender)
            or self._token_approvals.get(token_id) == spender
        )

    def _mint(self, to: str, token_id: int) -> None:
        if to == ZERO_ADDRESS:
            raise ERC721InvalidReceiver(to)
        self._owners[token_id] = to
        self._balances[to] = self._balances.get(to, 0) + 1
        self.emit(Transfer(from_address=ZERO_ADDRESS, to_address=to, token_id=token_id))

    def _transfer(
        self, spender: str, from_address: str, to_address: str, token_id: int
    ) -> None:
        if to_address == ZERO_ADDRESS:
            raise ERC721InvalidReceiver(to_address)
        owner = self._require_owned(token_id)
        if owner != from_address:
            raise ERC721IncorrectOwner(from_address, token_id, owner)
        if not self._is_authorized(owner, spender, token_id):
            raise ERC721InsufficientApproval(spender, token_id)

        self._token_approvals.pop(token_id, None)
        self._balances[from_address] -= 1
        self._balances[to_address] = self._balances.get(to_address, 0) + 1
        self._owners[token_id] = to_address
        self.emit(
            Transfer(from_address=from_address, to_address=to_address, token_id=token_id)
        )
