"""Deployment registry — runs tagged deploy scripts against a chain.

Each deploy script is a callable receiving the ``Deployments`` instance.
``fixture(tags)`` runs every script carrying one of *tags*, once, in
registration order, so a test can ask for ``["all"]`` and get a freshly
wired marketplace and NFT collection.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict

from mintmarket.core.chain import Chain, ContractHandle
from mintmarket.core.contract import Contract
from mintmarket.models.accounts import Account
from mintmarket.models.deployment import DeploymentRecord

logger = logging.getLogger(__name__)


class DeployScript(BaseModel):
    """A named, tagged deployment step."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    tags: list[str]
    run: Callable[..., Any]  # called with the Deployments instance


class Deployments:
    """Named deployments on one chain.

    Parameters
    ----------
    chain:
        Target chain.  Its ``config`` decides the network name and the
        confirmations to wait for.
    scripts:
        Deploy scripts to run from ``fixture()``.  Defaults to
        ``DEFAULT_SCRIPTS``.
    """

    def __init__(
        self,
        chain: Chain,
        scripts: list[DeployScript] | None = None,
    ) -> None:
        from mintmarket.deploy.scripts import DEFAULT_SCRIPTS

        self.chain = chain
        self._scripts = list(scripts if scripts is not None else DEFAULT_SCRIPTS)
        self._executed: set[str] = set()
        self._records: dict[str, DeploymentRecord] = {}
        self._handles: dict[str, ContractHandle] = {}
        self._running: DeployScript | None = None

    # ------------------------------------------------------------------
    # Named accounts
    # ------------------------------------------------------------------

    @property
    def deployer(self) -> Account:
        return self.chain.accounts[0]

    def log(self, message: str, *args: Any) -> None:
        logger.info(message, *args)

    # ------------------------------------------------------------------
    # Deploy
    # ------------------------------------------------------------------

    def deploy(
        self,
        name: str,
        contract_cls: type[Contract],
        *,
        from_address: Any | None = None,
        args: list[Any] | None = None,
        wait_confirmations: int | None = None,
        tags: list[str] | None = None,
    ) -> DeploymentRecord:
        """Deploy *contract_cls* under *name* and wait for confirmations.

        Confirmations default to 1 on development chains and to
        ``config.verification_block_confirmations`` elsewhere; the extra
        blocks are mined immediately.
        Tags default to those of the deploy script being run by
        ``fixture()``.
        """
        deployer = from_address if from_address is not None else self.deployer
        args = list(args or [])
        confirmations = (
            wait_confirmations
            if wait_confirmations is not None
            else self.chain.config.wait_block_confirmations
        )

        handle = self.chain.deploy(contract_cls, deployer, *args)
        receipt = handle.deploy_receipt
        if confirmations > 1:
            self.chain.mine(confirmations - 1)

        record = DeploymentRecord(
            name=name,
            address=handle.address,
            deployer=handle.signer or "",
            args=args,
            tx_hash=receipt.tx_hash if receipt else "",
            block_number=receipt.block_number if receipt else self.chain.block_number,
            confirmations=confirmations,
            tags=list(tags if tags is not None else self._running_tags()),
        )
        self._records[name] = record
        self._handles[name] = handle
        logger.info(
            "deployed %s at %s with %d confirmation(s).",
            name,
            handle.address,
            confirmations,
        )
        return record

    def _running_tags(self) -> list[str]:
        return self._running.tags if self._running is not None else []

    # ------------------------------------------------------------------
    # Fixtures
    # ------------------------------------------------------------------

    def fixture(self, tags: list[str] | None = None) -> dict[str, DeploymentRecord]:
        """Run every not-yet-run script with a tag in *tags* (all scripts if None).

        Returns all deployment records known after the run.
        """
        wanted = set(tags) if tags is not None else None
        for script in self._scripts:
            if script.name in self._executed:
                continue
            if wanted is not None and not wanted.intersection(script.tags):
                continue
            self.log("-------------------------------------------------")
            self.log("Running deploy script %s (tags: %s).", script.name, ", ".join(script.tags))
            self._running = script
            try:
                script.run(self)
            finally:
                self._running = None
            self._executed.add(script.name)
        return dict(self._records)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_deployment(self, name: str) -> DeploymentRecord:
        """Return the record for *name*.

        Raises
        ------
        KeyError
            If nothing was deployed under *name*.
        """
        record = self._records.get(name)
        if record is None:
            raise KeyError(f"No deployment named '{name}'.")
        return record

    def get_contract(self, name: str, signer: Any | None = None) -> ContractHandle:
        """Return a handle for the deployment *name*, bound to *signer* or the deployer."""
        handle = self._handles.get(name)
        if handle is None:
            raise KeyError(f"No deployment named '{name}'.")
        return handle.connect(signer) if signer is not None else handle

    def all(self) -> dict[str, DeploymentRecord]:
        return dict(self._records)
