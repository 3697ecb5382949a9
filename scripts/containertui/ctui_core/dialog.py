"""Modal confirmation and warning dialogs."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from ctui_core.canvas import Canvas
from ctui_core.context import AppContext
from ctui_core.events import CloseDialog, Command, Confirmation, DialogAction, Event, Key, Resize, emit
from ctui_core.layout import DIALOG_FRAME, RATIO_MODAL, Dimensions, WindowRatio, calculate

NEXT_KEYS = ("tab", "right", "l")
PREV_KEYS = ("shift+tab", "left", "h")


@dataclass(frozen=True)
class DialogButton:
    label: str
    is_safe: bool = True
    action: DialogAction = field(default_factory=DialogAction)


class Dialog:
    """A message above a row of buttons.

    The highlighted button decides the border color: an unsafe button turns
    the whole dialog the error color before anything is committed.
    """

    def __init__(
        self,
        context: AppContext,
        message: str,
        buttons: list[DialogButton] | None = None,
        ratio: WindowRatio = RATIO_MODAL,
    ) -> None:
        self.context = context
        self.message = message
        self.buttons = list(buttons or []) or [DialogButton("Cancel", is_safe=True)]
        self.ratio = ratio
        self.selected = 0
        self.dimensions = Dimensions()

    @property
    def highlighted(self) -> DialogButton:
        return self.buttons[self.selected]

    def set_size(self, width: int, height: int) -> None:
        self.dimensions = calculate(width, height, self.ratio, DIALOG_FRAME)

    def next_button(self) -> None:
        self.selected = (self.selected + 1) % len(self.buttons)

    def prev_button(self) -> None:
        self.selected = (self.selected - 1) % len(self.buttons)

    def update(self, event: Event) -> list[Command]:
        match event:
            case Resize(width=width, height=height):
                self.set_size(width, height)
            case Key(name="esc"):
                return [emit(CloseDialog())]
            case Key(name=name) if name in NEXT_KEYS:
                self.next_button()
            case Key(name=name) if name in PREV_KEYS:
                self.prev_button()
            case Key(name="enter"):
                action = self.highlighted.action
                if not action.type:
                    return [emit(CloseDialog())]
                return [emit(Confirmation(action))]
        return []

    def close(self) -> None:
        pass

    def border_color(self) -> str:
        theme = self.context.theme
        return theme.primary if self.highlighted.is_safe else theme.error

    def _buttons_row(self) -> Text:
        theme = self.context.theme
        row = Text(justify="center")
        for index, button in enumerate(self.buttons):
            if index == self.selected:
                background = theme.primary if button.is_safe else theme.error
                style = f"bold {theme.text} on {background}"
            else:
                style = f"{theme.text} on {theme.muted}"
            row.append(" ")
            row.append(f" {button.label} ", style=style)
            row.append(" ")
        return row

    def view(self) -> Canvas:
        """Render at the modal width. The modal height is a minimum."""
        dims = self.dimensions
        panel = Panel(
            Group(Text(self.message, justify="center"), Text(""), self._buttons_row()),
            box=box.ROUNDED,
            border_style=self.border_color(),
            padding=1,
        )
        console = self.context.console
        width = max(dims.width, DIALOG_FRAME.horizontal + 1)
        canvas = Canvas.render(console, panel, width)
        if canvas.height < dims.height:
            canvas = Canvas.render(console, panel, width, dims.height)
        return canvas


def warning_dialog(context: AppContext, message: str) -> Dialog:
    return Dialog(context, message, [DialogButton("OK", is_safe=True)])


def confirm_dialog(context: AppContext, message: str, action: DialogAction, confirm_label: str = "Delete") -> Dialog:
    return Dialog(
        context,
        message,
        [
            DialogButton("Cancel", is_safe=True),
            DialogButton(confirm_label, is_safe=False, action=action),
        ],
    )
