"""Top-level tab router: one panel per resource kind, plus notifications and help."""

from __future__ import annotations

import logging
import time

from rich import box
from rich.panel import Panel
from rich.text import Text

from ctui_core import keys
from ctui_core.canvas import Canvas
from ctui_core.context import AppContext
from ctui_core.events import (
    AddNotification,
    Command,
    DetailLoaded,
    Event,
    ItemsLoaded,
    Key,
    LoadFailed,
    OpenOverlay,
    OperationFinished,
    Quit,
    RefreshTick,
    RemoveNotification,
    Resize,
    StatsLoaded,
    StatsTick,
    emit,
)
from ctui_core.notifications import Notifications
from ctui_core.panels import ResourcePanel
from ctui_core.tabs import Tab, TabBar

logger = logging.getLogger(__name__)

# tab row, blank line, blank line, short help
RESERVED_ROWS = 4
FORCE_QUIT_KEYS = ("ctrl+c", "ctrl+d")


def refresh_tick(delay: float) -> Command:
    def tick() -> RefreshTick:
        time.sleep(delay)
        return RefreshTick()

    return tick


class TabRouter:
    def __init__(self, context: AppContext, panels: list[ResourcePanel]) -> None:
        self.context = context
        self.panels = {panel.kind: panel for panel in panels}
        self.tabs = TabBar(context, [Tab(panel.kind, panel.title, str(index + 1)) for index, panel in enumerate(panels)])
        self.notifications = Notifications(context)
        self.show_full_help = False
        self.width = 0
        self.height = 0

    @property
    def active(self) -> ResourcePanel:
        return self.panels[self.tabs.active_tab.kind]

    def init(self) -> list[Command]:
        commands: list[Command] = []
        for panel in self.panels.values():
            commands.extend(panel.init())
        commands.append(refresh_tick(self.context.config.refresh_seconds))
        return commands

    def _handle_key(self, event: Key) -> list[Command]:
        name = event.name
        if name in FORCE_QUIT_KEYS:
            return [emit(Quit())]

        active = self.active
        if not active.view.is_capturing_input():
            if keys.QUIT.matches(name):
                return [emit(Quit())]
            if keys.HELP.matches(name):
                self.show_full_help = not self.show_full_help
                return []
            if self.tabs.update(name):
                self.show_full_help = False
                logger.debug("switched to %s", self.tabs.active_tab.kind)
                return [self.active.refresh()]
        return active.update(event)

    def update(self, event: Event) -> list[Command]:
        commands = self.notifications.update(event)
        match event:
            case Resize(width=width, height=height):
                self.width = max(0, width)
                self.height = max(0, height)
                inner = Resize(self.width, max(0, self.height - RESERVED_ROWS))
                for panel in self.panels.values():
                    commands.extend(panel.update(inner))
            case Key():
                commands.extend(self._handle_key(event))
            case RefreshTick():
                commands.append(self.active.refresh())
                commands.append(refresh_tick(self.context.config.refresh_seconds))
            case AddNotification() | RemoveNotification():
                pass
            case (
                ItemsLoaded(kind=kind)
                | LoadFailed(kind=kind)
                | OperationFinished(kind=kind)
                | DetailLoaded(kind=kind)
                | StatsTick(kind=kind)
                | StatsLoaded(kind=kind)
                | OpenOverlay(kind=kind)
            ):
                panel = self.panels.get(kind)
                if panel is None:
                    logger.warning("dropping %s for unknown kind %r", type(event).__name__, kind)
                else:
                    commands.extend(panel.update(event))
            case _:
                commands.extend(self.active.update(event))
        return commands

    def close(self) -> None:
        """Close any open overlays so background streams stop."""
        for panel in self.panels.values():
            panel.view.close_overlay()

    # rendering

    def _help_line(self) -> Canvas:
        bindings = self.active.view.short_help() + [keys.HELP, keys.QUIT]
        text = Text(keys.short_help_text(bindings), style=self.context.theme.muted, no_wrap=True, overflow="ellipsis")
        return Canvas.render(self.context.console, text, self.width, 1)

    def _full_help(self, max_height: int) -> Canvas | None:
        columns = self.active.view.full_help() + [[keys.NEXT_TAB, keys.PREV_TAB, keys.HELP, keys.QUIT]]
        rows = keys.full_help_rows(columns)
        height = min(len(rows) + 2, max_height)
        if height < 3:
            return None
        panel = Panel(
            Text("\n".join(rows), style=self.context.theme.text),
            box=box.ROUNDED,
            border_style=self.context.theme.border,
            title="Help",
            title_align="left",
        )
        return Canvas.render(self.context.console, panel, self.width, height)

    def view(self) -> Canvas:
        width = self.width
        content_height = max(0, self.height - RESERVED_ROWS)
        frame = Canvas.join_vertical(
            [
                self.tabs.view(width),
                Canvas.blank(width, 1),
                self.active.view.view().fit(width, content_height),
                Canvas.blank(width, 1),
                self._help_line(),
            ],
            width,
        ).fit(width, self.height)

        if self.show_full_help:
            help_block = self._full_help(content_height)
            if help_block is not None:
                frame = frame.overlay(help_block, 0, self.height - 1 - help_block.height)

        y = 0
        for block in self.notifications.view(width):
            frame = frame.overlay(block, width - block.width, y)
            y += block.height
        return frame
