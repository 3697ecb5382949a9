"""Network collector."""

from __future__ import annotations

from ctui_core.engine import EngineClient
from ctui_core.models import NetworkItem


def collect(engine: EngineClient) -> list[NetworkItem]:
    return [NetworkItem(network) for network in engine.list_networks()]
