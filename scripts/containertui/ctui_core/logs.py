"""Streaming container logs overlay."""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque

from rich import box
from rich.panel import Panel
from rich.text import Text

from ctui_core.canvas import Canvas
from ctui_core.context import AppContext
from ctui_core.engine import EngineError, LogStream
from ctui_core.events import (
    CloseDialog,
    Command,
    Event,
    Key,
    LogChunk,
    LogStreamEnded,
    LogStreamOpened,
    OpenOverlay,
    Resize,
    emit,
)
from ctui_core.layout import DETAIL_FRAME, RATIO_LARGE_OVERLAY, Dimensions, calculate
from ctui_core.notifications import show_error
from ctui_core.panes import ViewportPane

logger = logging.getLogger(__name__)

MAX_LINES = 5000
CLOSE_KEYS = ("q", "esc")

_stream_ids = itertools.count(1)


def _close_quietly(stream: LogStream, container_id: str) -> None:
    try:
        stream.close()
    except EngineError as exc:
        logger.warning("closing log stream for %s: %s", container_id, exc)


class LogsOverlay:
    """Follows a container's log stream one chunk at a time.

    Each read runs as its own deferred command and the next one is only
    scheduled after the previous chunk has been delivered. Closing sets the
    cancel flag, so a read already in flight finishes but nothing new is
    scheduled.

    The opening command hands the stream over under ``_lock``. Either it sees
    the overlay already closed and closes the stream itself, or ``close()``
    finds the stream and closes it, whenever the opened event arrives.
    """

    def __init__(self, context: AppContext, container_id: str, name: str) -> None:
        self.context = context
        self.container_id = container_id
        self.name = name
        self.stream_id = next(_stream_ids)
        self.cancelled = threading.Event()
        self.lines: deque[str] = deque(maxlen=MAX_LINES)
        self.pane = ViewportPane(context)
        self.dimensions = Dimensions()
        self.started = False
        self.ended = False
        self._stream: LogStream | None = None
        self._lock = threading.Lock()

    def set_size(self, width: int, height: int) -> None:
        self.dimensions = calculate(width, height, RATIO_LARGE_OVERLAY, DETAIL_FRAME)
        self.pane.set_size(self.dimensions.content_width, self.dimensions.content_height)

    def open_stream(self) -> Command:
        engine = self.context.engine
        container_id = self.container_id
        stream_id = self.stream_id
        cancelled = self.cancelled

        def open_() -> LogStreamOpened | LogStreamEnded | None:
            if cancelled.is_set():
                return None
            try:
                stream = engine.stream_logs(container_id)
            except EngineError as exc:
                return LogStreamEnded(stream_id, str(exc))
            with self._lock:
                if not cancelled.is_set():
                    self._stream = stream
                    return LogStreamOpened(stream_id, stream)
            # closed while the stream was being opened
            _close_quietly(stream, container_id)
            return None

        return open_

    def read_next(self) -> Command:
        stream = self._stream
        stream_id = self.stream_id
        cancelled = self.cancelled

        def read() -> LogChunk | LogStreamEnded | None:
            if cancelled.is_set() or stream is None:
                return None
            try:
                lines = stream.read_lines()
            except EngineError as exc:
                if cancelled.is_set():
                    return None
                return LogStreamEnded(stream_id, str(exc))
            if lines is None:
                return LogStreamEnded(stream_id)
            return LogChunk(stream_id, tuple(lines))

        return read

    def append(self, lines: tuple[str, ...]) -> None:
        follow = self.pane.at_bottom()
        offset = self.pane.offset
        self.lines.extend(lines)
        self.pane.set_content(Text("\n".join(self.lines)))
        if follow:
            self.pane.goto_bottom()
        else:
            self.pane.scroll(offset)

    def close(self) -> None:
        with self._lock:
            self.cancelled.set()
            stream = self._stream
        if stream is not None:
            _close_quietly(stream, self.container_id)

    def update(self, event: Event) -> list[Command]:
        match event:
            case OpenOverlay() if not self.started:
                self.started = True
                return [self.open_stream()]
            case Resize(width=width, height=height):
                self.set_size(width, height)
            case LogStreamOpened(stream_id=stream_id) if stream_id == self.stream_id:
                if self.cancelled.is_set():
                    return []
                return [self.read_next()]
            case LogChunk(stream_id=stream_id, lines=lines) if stream_id == self.stream_id:
                if self.cancelled.is_set():
                    return []
                if lines:
                    self.append(lines)
                return [self.read_next()]
            case LogStreamEnded(stream_id=stream_id, error=error) if stream_id == self.stream_id:
                self.ended = True
                if error and not self.cancelled.is_set():
                    return [show_error(f"Log stream for {self.name} failed: {error}")]
            case Key(name=name) if name in CLOSE_KEYS:
                self.close()
                return [emit(CloseDialog())]
            case Key():
                return self.pane.update(event)
        return []

    def view(self) -> Canvas:
        theme = self.context.theme
        dims = self.dimensions
        status = "ended" if self.ended else "following"
        panel = Panel(
            self.pane.view(),
            box=box.ROUNDED,
            border_style=theme.primary,
            padding=(0, 1),
            title=f"[bold {theme.primary}]Logs: {self.name}[/]",
            subtitle=f"[{theme.muted}]{status} • q/esc close[/]",
        )
        if dims.width < DETAIL_FRAME.horizontal or dims.height < DETAIL_FRAME.vertical:
            return Canvas.blank(dims.width, dims.height)
        return Canvas.render(self.context.console, panel, dims.width, dims.height)
