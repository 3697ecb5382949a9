"""Reusable list/detail view with selection and a modal overlay session."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Generic, Hashable, Protocol, Sequence, TypeVar

from ctui_core import keys
from ctui_core.canvas import Canvas
from ctui_core.context import AppContext
from ctui_core.engine import EngineError
from ctui_core.events import (
    CloseDialog,
    Command,
    Confirmation,
    Event,
    ItemsLoaded,
    LoadFailed,
    OpenOverlay,
    Resize,
)
from ctui_core.listing import ItemList
from ctui_core.models import Item
from ctui_core.notifications import show_error
from ctui_core.panes import DETAIL_DOWN, DETAIL_UP, DetailPane, ViewportPane
from ctui_core.selection import SelectionSet
from ctui_core.splitview import FocusState, SplitPane

logger = logging.getLogger(__name__)

ID = TypeVar("ID", bound=Hashable)
ItemT = TypeVar("ItemT", bound=Item)


class SessionState(Enum):
    MAIN = "main"
    OVERLAY = "overlay"


class Overlay(Protocol):
    def set_size(self, width: int, height: int) -> None: ...

    def update(self, event: Event) -> list[Command]: ...

    def view(self) -> Canvas: ...

    def close(self) -> None: ...


class ResourceView(Generic[ID, ItemT]):
    """List/detail split for one resource kind.

    While an overlay is open it owns every input event. Resizes still reach
    the split pane underneath so the background is laid out correctly when
    the overlay closes.
    """

    def __init__(
        self,
        context: AppContext,
        kind: str,
        title: str,
        loader: Callable[[], Sequence[ItemT]],
        detail: DetailPane | None = None,
    ) -> None:
        self.context = context
        self.kind = kind
        self.title = title
        self.loader = loader
        self.list: ItemList[ItemT] = ItemList(context, title)
        self.detail = detail if detail is not None else ViewportPane(context)
        self.split = SplitPane(context, self.list, self.detail)
        self.selections: SelectionSet[ID] = SelectionSet()
        self.session = SessionState.MAIN
        self.foreground: Overlay | None = None
        self.width = 0
        self.height = 0
        self.additional_help: list[keys.Binding] = []

    # loading

    def refresh(self) -> Command:
        kind = self.kind
        loader = self.loader

        def load() -> ItemsLoaded | LoadFailed:
            try:
                items = loader()
            except EngineError as exc:
                logger.warning("loading %s failed: %s", kind, exc)
                return LoadFailed(kind, str(exc))
            return ItemsLoaded(kind, tuple(items))

        return load

    def set_items(self, items: Sequence[ItemT]) -> None:
        """Replace the list wholesale, keeping cursor, selection and busy flags."""
        current = self.list.selected_item()
        current_id = current.identity if current is not None else None
        working = {item.identity for item in self.list.items() if item.working}

        items = list(items)
        positions = {item.identity: index for index, item in enumerate(items)}
        for item in items:
            if item.identity in working:
                item.working = True
        self.selections.reconcile(positions)
        self.list.set_items(items)
        self._sync_selected()
        if current_id in positions:
            self.list.select(positions[current_id])

    def items(self) -> list[ItemT]:
        return self.list.items()

    def selected_item(self) -> ItemT | None:
        return self.list.selected_item()

    def set_content(self, content) -> None:
        if isinstance(self.detail, ViewportPane):
            self.detail.set_content(content)

    def update_content(self, content) -> None:
        """Redraw the detail for the same item, keeping its scroll position."""
        if isinstance(self.detail, ViewportPane):
            offset = self.detail.offset
            self.detail.set_content(content)
            self.detail.scroll(offset)

    # selection

    def _sync_selected(self) -> None:
        for item in self.list.items():
            item.selected = self.selections.is_selected(item.identity)

    def selected_ids(self) -> list[ID]:
        return self.selections.ids_in(item.identity for item in self.list.items())

    def toggle_selection(self, identity: ID) -> None:
        for index, item in enumerate(self.list.items()):
            if item.identity == identity:
                if not item.working:
                    self.selections.toggle(identity, index)
                break
        self._sync_selected()

    def handle_toggle_selection(self) -> None:
        item = self.list.selected_item()
        if item is None or item.working:
            return
        self.selections.toggle(item.identity, self.list.index())
        self._sync_selected()

    def handle_toggle_all(self) -> None:
        """Select every idle item, or clear when they are all selected already."""
        eligible = [(index, item) for index, item in enumerate(self.list.items()) if not item.working]
        all_selected = all(self.selections.is_selected(item.identity) for _, item in eligible)
        self.selections.clear()
        if not all_selected:
            for index, item in eligible:
                self.selections.select(item.identity, index)
        self._sync_selected()

    def clear_selection(self) -> None:
        self.selections.clear()
        self._sync_selected()

    # overlay session

    def set_overlay(self, overlay: Overlay) -> None:
        if self.foreground is not None and self.foreground is not overlay:
            self.foreground.close()
        self.foreground = overlay
        self.session = SessionState.OVERLAY
        overlay.set_size(self.width, self.height)

    def close_overlay(self) -> None:
        foreground, self.foreground = self.foreground, None
        self.session = SessionState.MAIN
        if foreground is not None:
            foreground.close()

    def is_overlay_visible(self) -> bool:
        return self.session is SessionState.OVERLAY

    def is_filtering(self) -> bool:
        return self.split.is_filtering()

    def is_list_focused(self) -> bool:
        return self.split.focus is FocusState.LIST

    def is_capturing_input(self) -> bool:
        return self.is_overlay_visible() or self.is_filtering()

    # events

    def set_size(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.split.set_size(self.width, self.height)
        if self.foreground is not None:
            self.foreground.set_size(self.width, self.height)

    def update(self, event: Event) -> list[Command]:
        match event:
            case Resize(width=width, height=height):
                self.set_size(width, height)
                return []
            case ItemsLoaded(items=items):
                self.set_items(items)
                return []
            case LoadFailed(error=error):
                return [show_error(f"Failed to load {self.title.lower()}: {error}")]
            case OpenOverlay(overlay=overlay):
                self.set_overlay(overlay)
                # lets the overlay start any background work it needs
                return overlay.update(event)

        if self.session is SessionState.OVERLAY and self.foreground is not None:
            commands = self.foreground.update(event)
            if isinstance(event, (CloseDialog, Confirmation)):
                self.close_overlay()
            return commands

        if isinstance(event, (CloseDialog, Confirmation)):
            return []
        return self.split.update(event)

    # rendering

    def view(self) -> Canvas:
        background = self.split.view()
        if self.session is not SessionState.OVERLAY or self.foreground is None:
            return background
        foreground = self.foreground.view()
        x = (background.width - foreground.width) // 2
        y = (background.height - foreground.height) // 2
        return background.overlay(foreground, x, y)

    def short_help(self) -> list[keys.Binding]:
        if self.is_filtering() or self.is_list_focused():
            return self.list.help_bindings() + [keys.SWITCH_FOCUS]
        return [DETAIL_UP, DETAIL_DOWN, keys.SWITCH_FOCUS]

    def full_help(self) -> list[list[keys.Binding]]:
        if self.is_list_focused():
            columns = [
                [keys.LIST_UP, keys.LIST_DOWN, keys.LIST_HOME, keys.LIST_END],
                [keys.LIST_PAGE_UP, keys.LIST_PAGE_DOWN, keys.FILTER, keys.CLEAR_FILTER],
            ]
            if self.additional_help:
                columns.append(list(self.additional_help))
            return columns
        return [[DETAIL_UP, DETAIL_DOWN, keys.SWITCH_FOCUS]]
