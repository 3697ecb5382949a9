"""List and detail panes side by side with a single focus owner."""

from __future__ import annotations

from enum import Enum

from rich import box
from rich.panel import Panel

from ctui_core import keys
from ctui_core.canvas import Canvas
from ctui_core.context import AppContext
from ctui_core.events import Command, Event, FocusChanged, Key, Resize, emit
from ctui_core.layout import DEFAULT_GAP, DETAIL_FRAME, Dimensions, calculate_master_detail
from ctui_core.listing import ItemList
from ctui_core.panes import DetailPane


class FocusState(Enum):
    LIST = "list"
    DETAIL = "detail"


class SplitPane:
    def __init__(self, context: AppContext, item_list: ItemList, detail: DetailPane) -> None:
        self.context = context
        self.list = item_list
        self.detail = detail
        self.focus = FocusState.LIST
        self.width = 0
        self.height = 0
        self.master_dims = Dimensions()
        self.detail_dims = Dimensions()

    def is_filtering(self) -> bool:
        return self.list.is_filtering()

    def set_size(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.master_dims, self.detail_dims = calculate_master_detail(self.width, self.height)
        self.list.set_size(self.master_dims.content_width, self.master_dims.content_height)
        self.detail.set_size(
            max(0, self.detail_dims.width - DETAIL_FRAME.horizontal),
            max(0, self.detail_dims.height - DETAIL_FRAME.vertical),
        )

    def toggle_focus(self) -> Command:
        self.focus = FocusState.DETAIL if self.focus is FocusState.LIST else FocusState.LIST
        detail_focused = self.focus is FocusState.DETAIL
        self.list.focused = not detail_focused
        return emit(FocusChanged(detail_focused))

    def update(self, event: Event) -> list[Command]:
        match event:
            case Resize(width=width, height=height):
                self.set_size(width, height)
                return []
            case Key(name=name) if keys.SWITCH_FOCUS.matches(name) and not self.is_filtering():
                return [self.toggle_focus()]
            case FocusChanged(detail_focused=detail_focused):
                self.list.focused = not detail_focused
                return []

        if self.is_filtering() or self.focus is FocusState.LIST:
            return self.list.update(event)
        return self.detail.update(event)

    def view(self) -> Canvas:
        theme = self.context.theme
        console = self.context.console

        master = self.list.view().fit(self.master_dims.width, self.height)
        gap = Canvas.blank(DEFAULT_GAP if self.width >= DEFAULT_GAP else self.width, self.height)

        if self.detail_dims.width < DETAIL_FRAME.horizontal or self.detail_dims.height < DETAIL_FRAME.vertical:
            detail = Canvas.blank(self.detail_dims.width, self.detail_dims.height)
        else:
            border = theme.primary if self.focus is FocusState.DETAIL else theme.muted
            frame = Panel(
                self.detail.view(),
                box=box.ROUNDED,
                border_style=border,
                padding=(0, 1),
            )
            detail = Canvas.render(console, frame, self.detail_dims.width, self.detail_dims.height)
        return Canvas.join_horizontal([master, gap, detail]).fit(self.width, self.height)
