"""Volume collector."""

from __future__ import annotations

from ctui_core.engine import EngineClient
from ctui_core.models import VolumeItem


def collect(engine: EngineClient) -> list[VolumeItem]:
    return [VolumeItem(volume) for volume in engine.list_volumes()]
