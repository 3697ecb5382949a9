"""Detail panes shown next to the item list."""

from __future__ import annotations

from typing import Protocol

from rich.console import RenderableType
from rich.text import Text

from ctui_core import keys
from ctui_core.canvas import Canvas
from ctui_core.context import AppContext
from ctui_core.events import Command, Event, Key

DETAIL_UP = keys.binding("up", "k", label=("↑/k", "up"))
DETAIL_DOWN = keys.binding("down", "j", label=("↓/j", "down"))


class DetailPane(Protocol):
    def set_size(self, width: int, height: int) -> None: ...

    def update(self, event: Event) -> list[Command]: ...

    def view(self) -> Canvas: ...


class ViewportPane:
    """Scrollable block of text."""

    def __init__(self, context: AppContext) -> None:
        self.context = context
        self.width = 0
        self.height = 0
        self.offset = 0
        self._content: RenderableType = Text("")
        self._rendered: Canvas | None = None

    def set_size(self, width: int, height: int) -> None:
        if (width, height) != (self.width, self.height):
            self.width = max(0, width)
            self.height = max(0, height)
            self._rendered = None
            self._clamp()

    def set_content(self, content: RenderableType) -> None:
        self._content = Text(content) if isinstance(content, str) else content
        self._rendered = None
        self.offset = 0

    def _lines(self) -> Canvas:
        if self._rendered is None:
            self._rendered = Canvas.render(self.context.console, self._content, self.width)
        return self._rendered

    def line_count(self) -> int:
        return self._lines().height

    @property
    def max_offset(self) -> int:
        return max(0, self.line_count() - self.height)

    def at_bottom(self) -> bool:
        return self.offset >= self.max_offset

    def goto_top(self) -> None:
        self.offset = 0

    def goto_bottom(self) -> None:
        self.offset = self.max_offset

    def scroll(self, delta: int) -> None:
        self.offset += delta
        self._clamp()

    def _clamp(self) -> None:
        self.offset = max(0, min(self.offset, self.max_offset))

    def update(self, event: Event) -> list[Command]:
        if not isinstance(event, Key):
            return []
        name = event.name
        if DETAIL_UP.matches(name):
            self.scroll(-1)
        elif DETAIL_DOWN.matches(name):
            self.scroll(1)
        elif name == "pgup":
            self.scroll(-max(1, self.height))
        elif name == "pgdown":
            self.scroll(max(1, self.height))
        elif name in ("home", "g"):
            self.goto_top()
        elif name in ("end", "G"):
            self.goto_bottom()
        return []

    def view(self) -> Canvas:
        lines = self._lines().lines[self.offset : self.offset + self.height]
        return Canvas(lines, self.width).fit(self.width, self.height)
