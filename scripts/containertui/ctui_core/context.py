"""Shared dependencies handed to every component."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console

from ctui_core.config import Config
from ctui_core.engine import EngineClient
from ctui_core.theme import Theme


@dataclass
class AppContext:
    engine: EngineClient
    config: Config = field(default_factory=Config)
    theme: Theme = field(default_factory=Theme.from_config)
    console: Console = field(default_factory=Console)

    @property
    def no_nerd_fonts(self) -> bool:
        return self.config.no_nerd_fonts
