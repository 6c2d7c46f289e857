"""Simulated chain — the host execution environment for contracts.

Transactions are fully serialized: each one runs to completion before the
next may start.  A transaction executes in call frames; contract code can
open nested frames with :meth:`Chain.invoke` (reverts propagate) and
:meth:`Chain.send_value` (reverts are reported as ``False``, like a
low-level call).  Every frame is snapshotted on entry, and a
``ContractRevert`` raised inside it restores balances, contract storage and
pending logs to the snapshot.

A reverted top-level transaction is not mined: no block, no nonce
increment, no gas charge, no logs.  The revert error propagates to the
caller unchanged.

Gas model
---------
``gas_used = base + LOG_GAS * logs + CALL_GAS * nested calls`` where
``base`` is ``INTRINSIC_GAS`` for calls and ``INTRINSIC_GAS + CREATE_GAS``
for deployments.  The sender pays ``gas_used * gas_price_wei``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from mintmarket.config import MarketConfig
from mintmarket.core.addresses import is_address, to_address
from mintmarket.core.contract import Contract, method_mutability
from mintmarket.core.errors import (
    ChainError,
    ContractRevert,
    InsufficientFunds,
    NonPayable,
    UnknownContract,
)
from mintmarket.core.hasher import (
    compute_tx_hash,
    derive_account_address,
    derive_contract_address,
)
from mintmarket.core.units import parse_ether
from mintmarket.models.accounts import ZERO_ADDRESS, Account
from mintmarket.models.events import ContractEvent
from mintmarket.models.journal import JournalEntry
from mintmarket.models.receipts import TxReceipt

if TYPE_CHECKING:
    from mintmarket.core.event_journal import EventJournal

logger = logging.getLogger(__name__)

INTRINSIC_GAS = 21_000
CREATE_GAS = 32_000
LOG_GAS = 1_875
CALL_GAS = 2_600


class CallFrame(BaseModel):
    """Execution context of one call: who called, which contract, how much value."""

    model_config = ConfigDict(frozen=True)

    sender: str
    address: str
    value: int = 0
    depth: int = 0


def _coerce_arg(value: Any) -> Any:
    """Resolve accounts and contract handles passed as call arguments."""
    if isinstance(value, (Account, ContractHandle)):
        return value.address
    if is_address(value):
        return value.lower()
    return value


class Chain:
    """In-process chain with funded accounts, contracts and an event log.

    Parameters
    ----------
    config:
        Chain configuration.  Uses defaults if not provided.
    journal:
        Optional event journal.  When attached, every committed event is
        appended to it.
    """

    def __init__(
        self,
        config: MarketConfig | None = None,
        *,
        journal: EventJournal | None = None,
    ) -> None:
        self.config = config or MarketConfig()
        self.chain_id = self.config.chain_id
        self.block_number = 0
        self.journal = journal

        self.accounts: list[Account] = [
            Account(address=derive_account_address(i), index=i)
            for i in range(self.config.account_count)
        ]
        funding = parse_ether(self.config.initial_balance_ether)
        self._balances: dict[str, int] = {a.address: funding for a in self.accounts}
        self._nonces: dict[str, int] = {}
        self._contracts: dict[str, Contract] = {}

        self._frames: list[CallFrame] = []
        self._in_transaction = False
        self._pending_events: list[ContractEvent] = []
        self._nested_calls = 0

        self._logs: list[ContractEvent] = []
        self._receipts: dict[str, TxReceipt] = {}

    # ------------------------------------------------------------------
    # Accounts and balances
    # ------------------------------------------------------------------

    def get_balance(self, address: Any) -> int:
        return self._balances.get(to_address(address), 0)

    def set_balance(self, address: Any, wei: int) -> None:
        """Overwrite a balance outside any transaction (test helper)."""
        if self._in_transaction:
            raise ChainError("Cannot set balances while a transaction is executing.")
        self._balances[to_address(address)] = wei

    def get_nonce(self, address: Any) -> int:
        return self._nonces.get(to_address(address), 0)

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def get_contract(self, address: Any) -> Contract:
        address = to_address(address)
        contract = self._contracts.get(address)
        if contract is None:
            raise UnknownContract(f"No contract deployed at {address}.")
        return contract

    def is_contract(self, address: Any) -> bool:
        return to_address(address) in self._contracts

    def has_method(self, address: Any, name: str) -> bool:
        contract = self._contracts.get(to_address(address))
        return contract is not None and method_mutability(contract, name) is not None

    def deploy(
        self, contract_cls: type[Contract], sender: Any, *args: Any
    ) -> ContractHandle:
        """Deploy *contract_cls* from *sender* and run its constructor.

        Returns a handle connected to the deployer.
        """
        sender = to_address(sender)
        address = derive_contract_address(sender, self.get_nonce(sender))
        ctor_args = tuple(_coerce_arg(a) for a in args)

        def _create() -> str:
            contract = contract_cls(self, address)
            self._contracts[address] = contract
            self._frames.append(CallFrame(sender=sender, address=address))
            try:
                contract.constructor(*ctor_args)
            finally:
                self._frames.pop()
            return address

        receipt = self._run_transaction(
            sender, address, 0, _create, INTRINSIC_GAS + CREATE_GAS
        )
        logger.info(
            "Deployed %s at %s (block %d, gas %d).",
            contract_cls.contract_name,
            address,
            receipt.block_number,
            receipt.gas_used,
        )
        return ContractHandle(self, address, signer=sender, deploy_receipt=receipt)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def transact(
        self,
        sender: Any,
        address: Any,
        method: str,
        *args: Any,
        value: int = 0,
    ) -> TxReceipt:
        """Execute *method* on the contract at *address* as one atomic transaction.

        Raises
        ------
        ContractRevert
            If execution reverts.  The chain is left exactly as it was.
        ChainError
            If another transaction is already executing.
        """
        sender = to_address(sender)
        address = to_address(address)
        return self._run_transaction(
            sender,
            address,
            value,
            lambda: self._execute(sender, address, method, args, value),
            INTRINSIC_GAS,
        )

    def call(
        self,
        address: Any,
        method: str,
        *args: Any,
        sender: Any = ZERO_ADDRESS,
    ) -> Any:
        """Evaluate *method* without committing anything (a static call)."""
        sender = to_address(sender)
        address = to_address(address)
        saved_events = self._pending_events
        saved_calls = self._nested_calls
        self._pending_events = []
        snapshot = self._snapshot()
        try:
            return self._execute(sender, address, method, args, 0)
        finally:
            self._restore(snapshot)
            self._pending_events = saved_events
            self._nested_calls = saved_calls

    def _run_transaction(
        self,
        sender: str,
        to: str,
        value: int,
        body: Callable[[], Any],
        base_gas: int,
    ) -> TxReceipt:
        if self._in_transaction:
            raise ChainError(
                "A transaction is already executing; contracts must use invoke()."
            )
        self._in_transaction = True
        self._pending_events = []
        self._nested_calls = 0
        snapshot = self._snapshot()
        try:
            result = body()
            gas_used = (
                base_gas
                + LOG_GAS * len(self._pending_events)
                + CALL_GAS * self._nested_calls
            )
            gas_price = self.config.gas_price_wei
            fee = gas_used * gas_price
            balance = self._balances.get(sender, 0)
            if balance < fee:
                raise InsufficientFunds(sender, balance, fee)
            self._balances[sender] = balance - fee

            nonce = self._nonces.get(sender, 0)
            block_number = self.block_number + 1
            tx_hash = compute_tx_hash(
                {
                    "chain_id": self.chain_id,
                    "from": sender,
                    "to": to,
                    "nonce": nonce,
                    "value": value,
                    "block": block_number,
                }
            )
            receipt = TxReceipt(
                tx_hash=tx_hash,
                block_number=block_number,
                from_address=sender,
                to_address=to,
                value=value,
                gas_used=gas_used,
                effective_gas_price=gas_price,
                events=list(self._pending_events),
                return_value=result,
            )
            # The journal write is part of the transaction.
            self._journal_events(receipt)
        except Exception as exc:
            # Any failure aborts the whole transaction, not only reverts.
            self._restore(snapshot)
            self._frames.clear()
            logger.debug("Transaction from %s to %s reverted: %s", sender, to, exc)
            raise
        finally:
            self._pending_events = []
            self._in_transaction = False

        self._nonces[sender] = nonce + 1
        self.block_number = block_number
        self._receipts[tx_hash] = receipt
        self._logs.extend(receipt.events)
        logger.debug(
            "Mined %s in block %d (gas %d, %d log(s)).",
            tx_hash[:18],
            block_number,
            gas_used,
            len(receipt.events),
        )
        return receipt

    def _journal_events(self, receipt: TxReceipt) -> None:
        if self.journal is None or not receipt.events:
            return
        self.journal.append_all(
            [
                JournalEntry(
                    contract_address=event.contract_address,
                    event_name=event.event_name,
                    block_number=receipt.block_number,
                    tx_hash=receipt.tx_hash,
                    log_index=event.log_index,
                    args=event.payload(),
                )
                for event in receipt.events
            ]
        )

    # ------------------------------------------------------------------
    # Call frames (used by contract code)
    # ------------------------------------------------------------------

    @property
    def current_frame(self) -> CallFrame:
        if not self._frames:
            raise ChainError("No call frame is executing.")
        return self._frames[-1]

    def invoke(
        self, address: Any, method: str, *args: Any, value: int = 0
    ) -> Any:
        """Call another contract from the executing one.

        The callee's frame is rolled back if it reverts, and the revert
        propagates to the calling contract.
        """
        caller = self.current_frame.address
        self._nested_calls += 1
        snapshot = self._snapshot()
        try:
            return self._execute(caller, to_address(address), method, args, value)
        except ContractRevert:
            self._restore(snapshot)
            raise

    def send_value(self, to: Any, amount: int) -> bool:
        """Send native value from the executing contract.

        Returns ``False`` instead of raising when the transfer fails: the
        recipient is a contract without a payable ``receive``, the
        recipient's ``receive`` reverts, or the sender is short of funds.
        """
        caller = self.current_frame.address
        to = to_address(to)
        self._nested_calls += 1
        contract = self._contracts.get(to)
        if contract is not None and method_mutability(contract, "receive") != "payable":
            logger.debug("Value transfer to %s rejected: no payable receive.", to)
            return False

        snapshot = self._snapshot()
        try:
            if contract is None:
                self._move_value(caller, to, amount)
            else:
                self._execute(caller, to, "receive", (), amount)
        except ContractRevert as exc:
            self._restore(snapshot)
            logger.debug("Value transfer to %s failed: %s", to, exc)
            return False
        return True

    def emit(self, address: str, event: ContractEvent) -> None:
        if not self._frames:
            raise ChainError("Events can only be emitted from executing contract code.")
        self._pending_events.append(
            event.model_copy(
                update={
                    "contract_address": address,
                    "log_index": len(self._pending_events),
                }
            )
        )

    def _execute(
        self,
        sender: str,
        address: str,
        method: str,
        args: tuple[Any, ...],
        value: int,
    ) -> Any:
        contract = self.get_contract(address)
        mutability = method_mutability(contract, method)
        if mutability is None:
            raise ChainError(
                f"{contract.contract_name} at {address} has no external method {method!r}."
            )
        if value and mutability != "payable":
            raise NonPayable(method)

        call_args = tuple(_coerce_arg(a) for a in args)
        self._move_value(sender, address, value)
        self._frames.append(
            CallFrame(sender=sender, address=address, value=value, depth=len(self._frames))
        )
        try:
            return getattr(contract, method)(*call_args)
        finally:
            self._frames.pop()

    def _move_value(self, sender: str, to: str, amount: int) -> None:
        if amount <= 0:
            return
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise InsufficientFunds(sender, balance, amount)
        self._balances[sender] = balance - amount
        self._balances[to] = self._balances.get(to, 0) + amount

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def _snapshot(self) -> dict[str, Any]:
        return {
            "balances": dict(self._balances),
            "nonces": dict(self._nonces),
            "contracts": {
                addr: (contract, contract.snapshot_state())
                for addr, contract in self._contracts.items()
            },
            "event_count": len(self._pending_events),
        }

    def _restore(self, snapshot: dict[str, Any]) -> None:
        self._balances = snapshot["balances"]
        self._nonces = snapshot["nonces"]
        self._contracts = {
            addr: contract for addr, (contract, _) in snapshot["contracts"].items()
        }
        for contract, state in snapshot["contracts"].values():
            contract.restore_state(state)
        del self._pending_events[snapshot["event_count"]:]

    # ------------------------------------------------------------------
    # Blocks and logs
    # ------------------------------------------------------------------

    def mine(self, blocks: int = 1, sleep_ms: int = 0) -> int:
        """Advance the chain by *blocks* empty blocks.

        Optionally sleeps *sleep_ms* between blocks, for local-chain
        scripts that poll for new blocks.  Returns the new block number.
        """
        if self._in_transaction:
            raise ChainError("Cannot mine while a transaction is executing.")
        logger.info("Moving %d block(s)...", blocks)
        for _ in range(blocks):
            if sleep_ms:
                logger.debug("Sleeping for %d ms.", sleep_ms)
                time.sleep(sleep_ms / 1000)
            self.block_number += 1
        return self.block_number

    def get_logs(
        self, address: Any | None = None, event_name: str | None = None
    ) -> list[ContractEvent]:
        """Return committed events, optionally filtered by contract and name."""
        wanted = to_address(address) if address is not None else None
        return [
            e
            for e in self._logs
            if (wanted is None or e.contract_address == wanted)
            and (event_name is None or e.event_name == event_name)
        ]

    def get_receipt(self, tx_hash: str) -> TxReceipt | None:
        return self._receipts.get(tx_hash)


class ContractHandle:
    """Signer-bound proxy for a deployed contract.

    View methods evaluate with :meth:`Chain.call` and return their value;
    state-changing methods send a transaction and return its
    :class:`TxReceipt`.  Payable methods accept a ``value=`` keyword.

    Examples
    --------
    >>> market = chain.deploy(NftMarketplace, deployer)      # doctest: +SKIP
    >>> market.connect(player).buy_item(nft, 0, value=price)  # doctest: +SKIP
    """

    def __init__(
        self,
        chain: Chain,
        address: str,
        signer: str | None = None,
        *,
        deploy_receipt: TxReceipt | None = None,
    ) -> None:
        self.chain = chain
        self.address = address
        self.signer = signer
        self.deploy_receipt = deploy_receipt

    @property
    def contract(self) -> Contract:
        """The deployed contract object (for inspection in tests and tools)."""
        return self.chain.get_contract(self.address)

    @property
    def contract_name(self) -> str:
        return self.contract.contract_name

    def connect(self, signer: Any) -> ContractHandle:
        """Return a handle for the same contract bound to another signer."""
        return ContractHandle(
            self.chain,
            self.address,
            to_address(signer),
            deploy_receipt=self.deploy_receipt,
        )

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        contract = self.chain.get_contract(self.address)
        mutability = method_mutability(contract, name)
        if mutability is None:
            raise AttributeError(
                f"{contract.contract_name} has no external method {name!r}"
            )

        if mutability == "view":

            def _view(*args: Any) -> Any:
                return self.chain.call(
                    self.address, name, *args, sender=self.signer or ZERO_ADDRESS
                )

            return _view

        def _send(*args: Any, value: int = 0) -> TxReceipt:
            if self.signer is None:
                raise ChainError("Contract handle has no signer; call connect() first.")
            return self.chain.transact(self.signer, self.address, name, *args, value=value)

        return _send

    def __repr__(self) -> str:
        return f"ContractHandle(address={self.address!r}, signer={self.signer!r})"
