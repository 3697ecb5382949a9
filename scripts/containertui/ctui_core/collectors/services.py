"""Compose service collector."""

from __future__ import annotations

from pathlib import Path

from ctui_core.engine import EngineClient
from ctui_core.models import Service, ServiceItem


def collect(engine: EngineClient) -> list[ServiceItem]:
    return [ServiceItem(service) for service in engine.list_services()]


def compose_files(service: Service) -> list[Path]:
    """Resolve the compose files recorded on the service's containers."""
    paths = []
    for name in service.config_files:
        path = Path(name)
        if not path.is_absolute() and service.working_dir:
            path = Path(service.working_dir) / path
        paths.append(path)
    return paths
