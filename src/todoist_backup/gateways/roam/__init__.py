"""Roam Research destination."""

from todoist_backup.gateways.roam.client import RoamGateway

__all__ = ["RoamGateway"]
