"""Container collector."""

from __future__ import annotations

from ctui_core.engine import EngineClient
from ctui_core.models import ContainerItem


def collect(engine: EngineClient) -> list[ContainerItem]:
    return [ContainerItem(container) for container in engine.list_containers()]
