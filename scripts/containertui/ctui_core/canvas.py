"""Rectangular blocks of rendered cells that can be joined and layered."""

from __future__ import annotations

from typing import Iterable

from rich.console import Console, ConsoleOptions, RenderableType, RenderResult
from rich.segment import Segment
from rich.style import Style

Line = list[Segment]


def _blank_line(width: int, style: Style | None = None) -> Line:
    return [Segment(" " * width, style)] if width > 0 else []


class Canvas:
    """A fixed-size grid of styled segments.

    Every line is exactly ``width`` cells wide, so blocks can be placed side by
    side or spliced over one another without re-rendering.
    """

    def __init__(self, lines: list[Line], width: int) -> None:
        self.width = max(0, width)
        self.lines = [Segment.adjust_line_length(line, self.width) for line in lines]

    @property
    def height(self) -> int:
        return len(self.lines)

    @classmethod
    def blank(cls, width: int, height: int, style: Style | None = None) -> Canvas:
        return cls([_blank_line(width, style) for _ in range(max(0, height))], width)

    @classmethod
    def render(
        cls,
        console: Console,
        renderable: RenderableType,
        width: int,
        height: int | None = None,
        style: Style | None = None,
    ) -> Canvas:
        """Render to exactly ``width`` columns, and exactly ``height`` rows when given."""
        if width <= 0 or (height is not None and height <= 0):
            return cls.blank(max(0, width), max(0, height or 0))
        options = console.options.update(width=width, height=height)
        lines = console.render_lines(renderable, options, style=style, pad=True)
        return cls(lines, width)

    @classmethod
    def join_horizontal(cls, blocks: Iterable[Canvas]) -> Canvas:
        blocks = list(blocks)
        height = max((block.height for block in blocks), default=0)
        lines: list[Line] = []
        for row in range(height):
            line: Line = []
            for block in blocks:
                if row < block.height:
                    line.extend(block.lines[row])
                else:
                    line.extend(_blank_line(block.width))
            lines.append(line)
        return cls(lines, sum(block.width for block in blocks))

    @classmethod
    def join_vertical(cls, blocks: Iterable[Canvas], width: int | None = None) -> Canvas:
        blocks = list(blocks)
        if width is None:
            width = max((block.width for block in blocks), default=0)
        lines: list[Line] = []
        for block in blocks:
            lines.extend(block.lines)
        return cls(lines, width)

    def fit(self, width: int, height: int) -> Canvas:
        """Crop or pad to the given size."""
        lines = self.lines[: max(0, height)]
        lines = lines + [_blank_line(width) for _ in range(max(0, height) - len(lines))]
        return Canvas(lines, width)

    def overlay(self, foreground: Canvas, x: int, y: int) -> Canvas:
        """Return a copy with ``foreground`` painted at column ``x``, row ``y``."""
        x = max(0, x)
        y = max(0, y)
        visible_width = min(foreground.width, self.width - x)
        if visible_width <= 0:
            return Canvas(list(self.lines), self.width)

        lines = list(self.lines)
        for row, fg_line in enumerate(foreground.lines):
            target = y + row
            if target >= self.height:
                break
            left, _, right = Segment.divide(lines[target], [x, x + visible_width, self.width])
            middle = Segment.adjust_line_length(fg_line, visible_width)
            lines[target] = [*left, *middle, *right]
        return Canvas(lines, self.width)

    @property
    def plain(self) -> list[str]:
        return ["".join(segment.text for segment in line) for line in self.lines]

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        last = self.height - 1
        for index, line in enumerate(self.lines):
            yield from line
            if index < last:
                yield Segment.line()
