"""Per-kind panels built on the shared resource view."""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable

from rich.text import Text

from ctui_core import keys
from ctui_core.context import AppContext
from ctui_core.dialog import confirm_dialog, warning_dialog
from ctui_core.engine import EngineError
from ctui_core.events import (
    AddNotification,
    Command,
    Confirmation,
    DetailLoaded,
    DialogAction,
    Event,
    Key,
    OpenOverlay,
    OperationFinished,
    emit,
)
from ctui_core.formatting import human_bytes, short_id
from ctui_core.notifications import ERROR, show_error, show_success
from ctui_core.resource_view import ResourceView

logger = logging.getLogger(__name__)

PRUNE_ACTION = "Prune"


def remove_request(
    context: AppContext,
    kind: str,
    identity: str,
    label: str,
    action_type: str,
) -> Command:
    """Check for dependent containers, then offer either a warning or a delete confirmation."""
    engine = context.engine

    def check() -> OpenOverlay | AddNotification:
        try:
            users = engine.used_by(kind, identity)
        except EngineError as exc:
            return AddNotification(f"Failed to check {label}: {exc}", ERROR)
        if users:
            message = f"{label[:1].upper()}{label[1:]} is used by {len(users)} containers ({', '.join(users)}).\nCannot delete."
            return OpenOverlay(kind, warning_dialog(context, message))
        message = f"Are you sure you want to delete {label}?"
        return OpenOverlay(kind, confirm_dialog(context, message, DialogAction(action_type, identity)))

    return check


def run_operation(kind: str, operation: str, ids: tuple[Hashable, ...], call: Callable[[], Any]) -> Command:
    """Wrap an engine call so its outcome comes back as ``OperationFinished``."""

    def run() -> OperationFinished:
        try:
            result = call()
        except EngineError as exc:
            return OperationFinished(kind, operation, ids, error=str(exc))
        reclaimed = result if isinstance(result, int) else 0
        return OperationFinished(kind, operation, ids, reclaimed=reclaimed)

    return run


class ResourcePanel:
    """Key handling, dialogs and detail text for one resource kind.

    Subclasses set ``kind``, ``title`` and ``noun``. A ``removable`` panel must
    either implement ``remove(identity)``, which runs off the loop once the
    delete is confirmed, or replace ``request_remove``/``on_confirm`` with its
    own flow. Panels that cannot remove anything set ``removable = False``.
    """

    kind = ""
    title = ""
    noun = ""
    removable = True
    prunable = True

    def __init__(self, context: AppContext, loader: Callable[[], list]) -> None:
        self.context = context
        self.engine = context.engine
        self.view = ResourceView(context, self.kind, self.title, loader)
        self.view.additional_help = self.bindings()
        self._detail_for: Hashable | None = None
        self._detail_dirty = True

    # hooks

    def bindings(self) -> list[keys.Binding]:
        bindings = [keys.TOGGLE_SELECTION, keys.TOGGLE_ALL]
        if self.removable:
            bindings.append(keys.REMOVE)
        if self.prunable:
            bindings.append(keys.PRUNE)
        return bindings

    def handle_key(self, name: str) -> list[Command] | None:
        """Handle a kind-specific key. None lets the view have it."""
        if keys.TOGGLE_SELECTION.matches(name):
            self.view.handle_toggle_selection()
            return []
        if keys.TOGGLE_ALL.matches(name):
            self.view.handle_toggle_all()
            return []
        if self.removable and keys.REMOVE.matches(name):
            return self.request_remove()
        if self.prunable and keys.PRUNE.matches(name):
            return self.request_prune()
        return None

    def request_remove(self) -> list[Command]:
        item = self.view.selected_item()
        if item is None or item.working:
            return []
        return [remove_request(self.context, self.kind, item.identity, self.label_for(item), self.remove_action)]

    @property
    def remove_action(self) -> str:
        return f"Delete{self.noun.capitalize()}"

    def label_for(self, item) -> str:
        return f"{self.noun} {short_id(str(item.identity))}"

    def remove(self, identity: str) -> None:
        raise NotImplementedError(f"{type(self).__name__} is removable but does not implement remove()")

    def request_prune(self) -> list[Command]:
        message = f"Remove all unused {self.title.lower()}?"
        dialog = confirm_dialog(self.context, message, DialogAction(PRUNE_ACTION, self.kind), confirm_label="Prune")
        return [emit(OpenOverlay(self.kind, dialog))]

    def on_confirm(self, action: DialogAction) -> list[Command]:
        if action.type == self.remove_action:
            identity = action.payload
            return [run_operation(self.kind, "remove", (identity,), lambda: self.remove(identity))]
        if action.type == PRUNE_ACTION:
            kind = self.kind
            return [run_operation(kind, "prune", (), lambda: self.engine.prune(kind))]
        return []

    def on_operation_finished(self, event: OperationFinished) -> list[Command]:
        if event.error:
            logger.warning("%s %s failed: %s", event.operation, self.kind, event.error)
            return [show_error(f"Failed to {event.operation} {self.noun}: {event.error}")]
        if event.operation == "prune":
            return [show_success(f"Pruned {self.title.lower()}, reclaimed {human_bytes(event.reclaimed)}"), self.view.refresh()]
        if event.operation == "remove":
            self.view.clear_selection()
            return [show_success(f"Removed {self.noun}"), self.view.refresh()]
        return []

    def detail_text(self, item) -> Any:
        return Text(item.description)

    def describe(self, item) -> list[Command]:
        """Fill the detail pane for ``item``. Slow lookups return a command."""
        self.view.set_content(self.detail_text(item))
        return []

    def render_detail(self, content: Any) -> Any:
        return content

    # plumbing

    def init(self) -> list[Command]:
        return [self.view.refresh()]

    def refresh(self) -> Command:
        return self.view.refresh()

    def invalidate_detail(self) -> None:
        self._detail_dirty = True

    def sync_detail(self) -> list[Command]:
        item = self.view.selected_item()
        identity = item.identity if item is not None else None
        if identity == self._detail_for and not self._detail_dirty:
            return []
        self._detail_for = identity
        self._detail_dirty = False
        if item is None:
            self.view.set_content(Text(f"No {self.noun} selected.", style=self.context.theme.muted))
            return []
        return self.describe(item)

    def update(self, event: Event) -> list[Command]:
        commands: list[Command] | None = None
        match event:
            case Confirmation(action=action) if self.view.is_overlay_visible():
                commands = self.on_confirm(action)
                self.view.close_overlay()
            case OperationFinished(kind=kind) if kind == self.kind:
                commands = self.on_operation_finished(event)
            case DetailLoaded(identity=identity, content=content, error=error):
                if identity == self._detail_for:
                    if error:
                        self.view.set_content(Text(f"Failed to load details: {error}", style=self.context.theme.error))
                    else:
                        self.view.set_content(self.render_detail(content))
                return []
            case Key(name=name) if not self.view.is_capturing_input() and self.view.is_list_focused():
                commands = self.handle_key(name)

        if commands is None:
            commands = self.view.update(event)
        return commands + self.sync_detail()
