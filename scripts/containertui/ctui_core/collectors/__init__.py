"""Loaders that turn engine records into list items."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from ctui_core.engine import EngineClient, EngineError


@dataclass
class Snapshot:
    kind: str
    items: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "count": len(self.items),
            "items": self.items,
            "errors": self.errors,
        }


def snapshot(kind: str, engine: EngineClient) -> Snapshot:
    """Collect one kind's raw records for JSON output."""
    try:
        records = engine.list_items(kind)
    except EngineError as exc:
        return Snapshot(kind, errors=[str(exc)])
    return Snapshot(kind, items=[record.to_dict() for record in records])


def loader_for(collect: Callable[[EngineClient], list], engine: EngineClient) -> Callable[[], list]:
    return lambda: collect(engine)
