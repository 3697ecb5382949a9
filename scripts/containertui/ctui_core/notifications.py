"""Self-expiring notification strip."""

from __future__ import annotations

import time
from dataclasses import dataclass

from rich import box
from rich.panel import Panel
from rich.text import Text

from ctui_core.canvas import Canvas
from ctui_core.context import AppContext
from ctui_core.events import AddNotification, Command, Event, RemoveNotification, emit

INFO = "info"
SUCCESS = "success"
ERROR = "error"

DEFAULT_DURATIONS = {
    INFO: 5.0,
    SUCCESS: 5.0,
    ERROR: 10.0,
}

MAX_VISIBLE = 3
MAX_WIDTH = 50


@dataclass
class Notification:
    id: int
    message: str
    level: str
    duration: float


def expire_after(notification_id: int, duration: float) -> Command:
    def expire() -> RemoveNotification:
        time.sleep(duration)
        return RemoveNotification(notification_id)

    return expire


def show_info(message: str) -> Command:
    return emit(AddNotification(message, INFO))


def show_success(message: str) -> Command:
    return emit(AddNotification(message, SUCCESS))


def show_error(message: str) -> Command:
    return emit(AddNotification(message, ERROR))


class Notifications:
    def __init__(self, context: AppContext) -> None:
        self.context = context
        self._items: list[Notification] = []
        self._next_id = 0

    def active(self) -> list[Notification]:
        return list(self._items)

    def update(self, event: Event) -> list[Command]:
        match event:
            case AddNotification(message=message, level=level, duration=duration):
                self._next_id += 1
                if duration is None:
                    duration = DEFAULT_DURATIONS.get(level, DEFAULT_DURATIONS[INFO])
                notification = Notification(self._next_id, message, level, duration)
                self._items.append(notification)
                return [expire_after(notification.id, notification.duration)]
            case RemoveNotification(id=notification_id):
                self._items = [n for n in self._items if n.id != notification_id]
        return []

    def view(self, max_width: int) -> list[Canvas]:
        """Render the newest notifications as separate blocks, oldest first."""
        if max_width < 6:
            return []
        theme = self.context.theme
        console = self.context.console
        blocks = []
        for notification in self._items[-MAX_VISIBLE:]:
            color = theme.for_level(notification.level)
            panel = Panel(
                Text(notification.message, style=theme.text),
                box=box.ROUNDED,
                border_style=color,
                title=f"[{color}]{notification.level}[/]",
                title_align="left",
                expand=False,
            )
            limit = min(MAX_WIDTH, max_width)
            width = min(limit, console.measure(panel, options=console.options.update(width=limit)).maximum)
            blocks.append(Canvas.render(console, panel, width))
        return blocks
