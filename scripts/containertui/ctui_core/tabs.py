"""Tab selector row."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from ctui_core import keys
from ctui_core.canvas import Canvas
from ctui_core.context import AppContext


@dataclass(frozen=True)
class Tab:
    kind: str
    title: str
    key: str


class TabBar:
    def __init__(self, context: AppContext, tabs: list[Tab]) -> None:
        if not tabs:
            raise ValueError("tab bar needs at least one tab")
        self.context = context
        self.tabs = tabs
        self.active = 0

    @property
    def active_tab(self) -> Tab:
        return self.tabs[self.active]

    def select(self, index: int) -> None:
        self.active = index % len(self.tabs)

    def update(self, name: str) -> bool:
        """Consume a tab-switch key. Returns False for anything else."""
        if keys.NEXT_TAB.matches(name):
            self.select(self.active + 1)
            return True
        if keys.PREV_TAB.matches(name):
            self.select(self.active - 1)
            return True
        for index, tab in enumerate(self.tabs):
            if name == tab.key:
                self.select(index)
                return True
        return False

    def view(self, width: int) -> Canvas:
        theme = self.context.theme
        line = Text(no_wrap=True, overflow="ellipsis")
        for index, tab in enumerate(self.tabs):
            if index:
                line.append(" │ ", style=theme.border)
            label = f" {tab.key} {tab.title} "
            if index == self.active:
                line.append(label, style=f"bold {theme.text} on {theme.primary}")
            else:
                line.append(label, style=theme.muted)
        return Canvas.render(self.context.console, line, width, 1)
