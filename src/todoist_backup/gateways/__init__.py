"""Destination gateways and factory."""

from todoist_backup.gateways.dry_run import DryRunGateway, RecordedWrite
from todoist_backup.gateways.factory import create_gateway
from todoist_backup.gateways.roam import RoamGateway

__all__ = ["DryRunGateway", "RecordedWrite", "RoamGateway", "create_gateway"]
