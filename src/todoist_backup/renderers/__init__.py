"""Renderer implementations."""

from todoist_backup.renderers.factory import create_renderer
from todoist_backup.renderers.roam import RoamBlockRenderer, build_tree

__all__ = ["RoamBlockRenderer", "build_tree", "create_renderer"]
