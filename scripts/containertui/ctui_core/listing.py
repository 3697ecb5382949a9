"""Scrollable item list with incremental filtering."""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from rich.text import Text

from ctui_core import keys
from ctui_core.canvas import Canvas
from ctui_core.context import AppContext
from ctui_core.events import Command, Event, Key
from ctui_core.formatting import selection_icon

ItemT = TypeVar("ItemT")

HEADER_ROWS = 2
ROWS_PER_ITEM = 3


class FilterState(Enum):
    UNFILTERED = "unfiltered"
    FILTERING = "filtering"
    FILTER_APPLIED = "filter applied"


def fuzzy_match(term: str, value: str) -> bool:
    """Case-insensitive subsequence match."""
    remaining = iter(value.lower())
    return all(ch in remaining for ch in term.lower())


class ItemList(Generic[ItemT]):
    def __init__(self, context: AppContext, title: str = "") -> None:
        self.context = context
        self.title = title
        self.focused = True
        self.width = 0
        self.height = 0
        self.filter_state = FilterState.UNFILTERED
        self.filter_text = ""
        self._items: list[ItemT] = []
        self._visible: list[int] = []
        self._cursor = 0
        self._offset = 0

    # data

    def items(self) -> list[ItemT]:
        return list(self._items)

    def visible_items(self) -> list[ItemT]:
        return [self._items[i] for i in self._visible]

    def set_items(self, items: list[ItemT]) -> None:
        self._items = list(items)
        self._refilter(keep_cursor=True)

    def selected_item(self) -> ItemT | None:
        if not self._visible:
            return None
        return self._items[self._visible[self._cursor]]

    def index(self) -> int:
        """Position of the cursor item in the unfiltered list, or -1."""
        if not self._visible:
            return -1
        return self._visible[self._cursor]

    def select(self, index: int) -> None:
        """Move the cursor to the item at ``index`` in the unfiltered list."""
        if index in self._visible:
            self._cursor = self._visible.index(index)
            self._scroll_to_cursor()

    def is_filtering(self) -> bool:
        return self.filter_state is FilterState.FILTERING

    def set_size(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._scroll_to_cursor()

    @property
    def per_page(self) -> int:
        # the last item on a page needs no spacer row
        return max(1, (self.height - HEADER_ROWS + 1) // ROWS_PER_ITEM)

    # filtering

    def _refilter(self, keep_cursor: bool = False) -> None:
        current = self.index() if keep_cursor else -1
        if self.filter_text and self.filter_state is not FilterState.UNFILTERED:
            self._visible = [
                i for i, item in enumerate(self._items) if fuzzy_match(self.filter_text, item.filter_value())
            ]
        else:
            self._visible = list(range(len(self._items)))

        if keep_cursor and current in self._visible:
            self._cursor = self._visible.index(current)
        elif not keep_cursor:
            self._cursor = 0
        self._cursor = max(0, min(self._cursor, len(self._visible) - 1))
        self._scroll_to_cursor()

    def reset_filter(self) -> None:
        self.filter_state = FilterState.UNFILTERED
        self.filter_text = ""
        self._refilter(keep_cursor=True)

    # movement

    def _move(self, delta: int) -> None:
        if not self._visible:
            return
        self._cursor = max(0, min(len(self._visible) - 1, self._cursor + delta))
        self._scroll_to_cursor()

    def _scroll_to_cursor(self) -> None:
        per_page = self.per_page
        if self._cursor < self._offset:
            self._offset = self._cursor
        elif self._cursor >= self._offset + per_page:
            self._offset = self._cursor - per_page + 1
        self._offset = max(0, min(self._offset, max(0, len(self._visible) - per_page)))

    def update(self, event: Event) -> list[Command]:
        if not isinstance(event, Key):
            return []
        name = event.name

        if self.filter_state is FilterState.FILTERING:
            if name == "esc":
                self.reset_filter()
            elif name == "enter":
                self.filter_state = FilterState.FILTER_APPLIED if self.filter_text else FilterState.UNFILTERED
                self._refilter(keep_cursor=True)
            elif name == "backspace":
                self.filter_text = self.filter_text[:-1]
                self._refilter()
            elif name == "space":
                self.filter_text += " "
                self._refilter()
            elif name in ("up", "down"):
                self._move(-1 if name == "up" else 1)
            elif len(name) == 1 and name.isprintable():
                self.filter_text += name
                self._refilter()
            return []

        if keys.FILTER.matches(name):
            self.filter_state = FilterState.FILTERING
            self.filter_text = ""
            self._refilter()
        elif keys.CLEAR_FILTER.matches(name) and self.filter_state is FilterState.FILTER_APPLIED:
            self.reset_filter()
        elif keys.LIST_UP.matches(name):
            self._move(-1)
        elif keys.LIST_DOWN.matches(name):
            self._move(1)
        elif keys.LIST_HOME.matches(name):
            self._move(-len(self._visible))
        elif keys.LIST_END.matches(name):
            self._move(len(self._visible))
        elif keys.LIST_PAGE_UP.matches(name):
            self._move(-self.per_page)
        elif keys.LIST_PAGE_DOWN.matches(name):
            self._move(self.per_page)
        return []

    def help_bindings(self) -> list[keys.Binding]:
        if self.is_filtering():
            return [keys.CLEAR_FILTER, keys.ACCEPT_FILTER]
        bindings = [keys.LIST_UP, keys.LIST_DOWN, keys.FILTER]
        if self.filter_state is FilterState.FILTER_APPLIED:
            bindings.append(keys.CLEAR_FILTER)
        return bindings

    # rendering

    def _header(self) -> Text:
        theme = self.context.theme
        if self.is_filtering():
            return Text.assemble(("Filter: ", f"bold {theme.primary}"), (self.filter_text, theme.text), ("█", theme.primary))
        count = len(self._visible)
        noun = "item" if len(self._items) == 1 else "items"
        if self.filter_state is FilterState.FILTER_APPLIED:
            return Text(f'{count} of {len(self._items)} {noun} matching "{self.filter_text}"', style=theme.muted)
        return Text(f"{len(self._items)} {noun}", style=theme.muted)

    def _row(self, item, is_cursor: bool) -> tuple[Text, Text]:
        theme = self.context.theme
        title_color = theme.selected if is_cursor else theme.text
        desc_color = theme.selected if is_cursor else theme.muted
        if not self.focused:
            title_color = desc_color = theme.muted

        marker = "│ " if is_cursor else "  "
        icon = selection_icon(item.selected, self.context.no_nerd_fonts)
        icon_color = theme.primary if item.selected else theme.text
        if not self.focused:
            icon_color = theme.muted

        title = Text.assemble((marker, title_color), (icon, icon_color), " ", (item.title, title_color))
        if item.working:
            title.append(" …", style=theme.warning)
        description = Text.assemble((marker, desc_color), (item.description, desc_color))
        title.truncate(self.width, overflow="ellipsis")
        description.truncate(self.width, overflow="ellipsis")
        return title, description

    def view(self) -> Canvas:
        lines = [self._header(), Text("")]
        if not self._visible:
            message = "No matches." if self._items else "No items."
            lines.append(Text(message, style=self.context.theme.muted))
        page = self._visible[self._offset : self._offset + self.per_page]
        for position, index in enumerate(page):
            if position:
                lines.append(Text(""))
            title, description = self._row(self._items[index], self._offset + position == self._cursor)
            lines.extend((title, description))

        text = Text("\n").join(lines)
        text.no_wrap = True
        return Canvas.render(self.context.console, text, self.width, self.height)
