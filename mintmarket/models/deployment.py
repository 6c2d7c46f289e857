"""Deployment record model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class DeploymentRecord(BaseModel):
    """Where and how a named contract was deployed."""

    model_config = ConfigDict(frozen=True)

    name: str
    address: str
    deployer: str
    args: list[Any] = []
    tx_hash: str
    block_number: int
    confirmations: int = 1
    tags: list[str] = []
