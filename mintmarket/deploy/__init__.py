"""Tag-based deployment of the marketplace contracts onto a chain."""

from mintmarket.deploy.deployments import DeployScript, Deployments
from mintmarket.deploy.scripts import DEFAULT_SCRIPTS

__all__ = ["DEFAULT_SCRIPTS", "DeployScript", "Deployments"]
