"""Renderer factory."""

from __future__ import annotations

from todoist_backup.contracts.renderer import TaskRenderer
from todoist_backup.renderers.roam import RoamBlockRenderer

RENDERERS: dict[str, type[TaskRenderer]] = {"roam": RoamBlockRenderer}


def create_renderer(name: str = "roam", **kwargs: object) -> TaskRenderer:
    renderer_cls = RENDERERS.get(name)
    if renderer_cls is None:
        raise ValueError(f"Unknown renderer: {name}")
    return renderer_cls(**kwargs)
