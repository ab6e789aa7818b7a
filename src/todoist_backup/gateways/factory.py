"""Gateway factory."""

from __future__ import annotations

from todoist_backup.contracts.config import BackupConfig
from todoist_backup.contracts.exceptions import AuthenticationError
from todoist_backup.contracts.gateway import BlockGateway
from todoist_backup.gateways.dry_run import DryRunGateway
from todoist_backup.gateways.roam.client import RoamGateway


def create_gateway(config: BackupConfig, token: str | None, *, dry_run: bool = False) -> BlockGateway:
    """Build the destination gateway for one run.

    A dry run reads through the real gateway when a token is available and
    previews against an empty graph otherwise.
    """
    if not token:
        if dry_run:
            return DryRunGateway()
        raise AuthenticationError("Roam API token is not configured (set roam_token or ROAM_API_TOKEN)")

    gateway = RoamGateway(config.roam_graph, token, base_url=config.roam_api_url)
    return DryRunGateway(gateway) if dry_run else gateway
