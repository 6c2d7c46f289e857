"""Contract base class and method visibility markers.

A contract is a plain Python object whose instance attributes are its
storage.  Only methods marked with ``@external``, ``@payable`` or ``@view``
can be reached through the chain; everything else is internal.

The chain snapshots and restores contract storage around every call frame,
so contract code may mutate ``self`` freely and rely on a revert to undo
it.  Contracts never hold references to chain state outside their own
storage.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from mintmarket.models.events import ContractEvent

if TYPE_CHECKING:
    from mintmarket.core.chain import Chain

F = TypeVar("F", bound=Callable[..., Any])

_MUTABILITY_ATTR = "__mutability__"
_NON_STATE_ATTRS = frozenset({"chain", "address"})


def _mark(fn: F, mutability: str) -> F:
    setattr(fn, _MUTABILITY_ATTR, mutability)
    return fn


def external(fn: F) -> F:
    """Mark a state-changing method that rejects attached value."""
    return _mark(fn, "nonpayable")


def payable(fn: F) -> F:
    """Mark a state-changing method that accepts attached value."""
    return _mark(fn, "payable")


def view(fn: F) -> F:
    """Mark a read-only method."""
    return _mark(fn, "view")


def method_mutability(contract: Contract, name: str) -> str | None:
    """Return ``"nonpayable"``, ``"payable"`` or ``"view"``, or ``None`` if
    *name* is not reachable from outside the contract."""
    if name.startswith("_"):
        return None
    fn = getattr(type(contract), name, None)
    return getattr(fn, _MUTABILITY_ATTR, None)


class Contract:
    """Base class for contracts deployed on a :class:`~mintmarket.core.chain.Chain`.

    Parameters
    ----------
    chain:
        The chain hosting this contract.
    address:
        The address assigned at deployment.
    """

    contract_name: ClassVar[str] = "Contract"

    def __init__(self, chain: Chain, address: str) -> None:
        self.chain = chain
        self.address = address

    def constructor(self, *args: Any) -> None:
        """Run once, inside the deployment transaction."""

    # ------------------------------------------------------------------
    # Execution context
    # ------------------------------------------------------------------

    @property
    def msg_sender(self) -> str:
        return self.chain.current_frame.sender

    @property
    def msg_value(self) -> int:
        return self.chain.current_frame.value

    def emit(self, event: ContractEvent) -> None:
        self.chain.emit(self.address, event)

    # ------------------------------------------------------------------
    # Storage snapshots (used by the chain for rollback)
    # ------------------------------------------------------------------

    def snapshot_state(self) -> dict[str, Any]:
        return copy.deepcopy(
            {k: v for k, v in vars(self).items() if k not in _NON_STATE_ATTRS}
        )

    def restore_state(self, state: dict[str, Any]) -> None:
        for name in [k for k in vars(self) if k not in _NON_STATE_ATTRS]:
            if name not in state:
                delattr(self, name)
        self.__dict__.update(copy.deepcopy(state))
