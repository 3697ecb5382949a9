"""Containers panel: lifecycle actions, logs, exec and live stats."""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Any

from rich.text import Text

from ctui_core import keys
from ctui_core.collectors import loader_for
from ctui_core.collectors.containers import collect
from ctui_core.context import AppContext
from ctui_core.dialog import confirm_dialog
from ctui_core.engine import EngineError
from ctui_core.events import (
    Command,
    DetailLoaded,
    DialogAction,
    Event,
    ExecRequested,
    OpenOverlay,
    OperationFinished,
    StatsLoaded,
    StatsTick,
    emit,
)
from ctui_core.formatting import format_created, sparkline
from ctui_core.logs import LogsOverlay
from ctui_core.models import CONTAINERS, ContainerItem, ContainerStats
from ctui_core.notifications import show_error, show_info, show_success
from ctui_core.panels import ResourcePanel, run_operation
from ctui_core.theme import Theme

logger = logging.getLogger(__name__)

START = keys.binding("s", label=("s", "start"))
STOP = keys.binding("S", label=("S", "stop"))
RESTART = keys.binding("R", label=("R", "restart"))
PAUSE = keys.binding("p", label=("p", "pause"))
UNPAUSE = keys.binding("P", label=("P", "unpause"))
LOGS = keys.binding("L", label=("L", "logs"))
EXEC = keys.binding("x", label=("x", "exec shell"))

STATE_ACTIONS = (
    (START, "start"),
    (STOP, "stop"),
    (RESTART, "restart"),
    (PAUSE, "pause"),
    (UNPAUSE, "unpause"),
)

STATE_AFTER = {
    "start": "running",
    "restart": "running",
    "unpause": "running",
    "stop": "exited",
    "pause": "paused",
}

DELETE_ACTION = "DeleteContainers"

STATS_SECONDS = 2.0
CPU_HISTORY = 30


def stats_tick(kind: str, delay: float = STATS_SECONDS) -> Command:
    def tick() -> StatsTick:
        time.sleep(delay)
        return StatsTick(kind)

    return tick


def format_stats(stats: ContainerStats, cpu_history: list[float]) -> str:
    usage_mb = stats.memory_usage / 1024 / 1024
    limit_mb = stats.memory_limit / 1024 / 1024
    line = f"CPU: {stats.cpu_percent:.2f}% | Mem: {usage_mb:.0f}MB / {limit_mb:.0f}MB"
    if cpu_history:
        return f"CPU Usage (%) {sparkline(cpu_history)}\n{line}"
    return line


def format_inspection(
    attrs: dict[str, Any],
    theme: Theme,
    stats: ContainerStats | None = None,
    cpu_history: list[float] | None = None,
) -> Text:
    config = attrs.get("Config") or {}
    state = attrs.get("State") or {}
    section = f"bold underline {theme.primary}"

    text = Text()
    name = str(attrs.get("Name", "")).lstrip("/")
    text.append(f"{name} ({str(attrs.get('Id', ''))[:12]})\n\n", style=f"bold {theme.primary}")
    text.append(f"Image: {config.get('Image', '')}\n", style=theme.text)
    text.append("State: ")
    text.append(str(state.get("Status", "")), style=theme.success if state.get("Running") else theme.muted)
    text.append("\n")
    if state.get("StartedAt"):
        text.append(f"Started: {format_created(state['StartedAt'])}\n")
    if state.get("Running") and stats is not None:
        text.append(f"\n{format_stats(stats, cpu_history or [])}\n", style=theme.primary)

    text.append("\nConfiguration\n", style=section)
    text.append(f"Cmd: {config.get('Cmd') or []}\n")
    text.append(f"Entrypoint: {config.get('Entrypoint') or []}\n")
    text.append(f"WorkingDir: {config.get('WorkingDir', '')}\n")

    env = config.get("Env") or []
    if env:
        text.append("\nEnvironment Variables\n", style=section)
        text.append("".join(f"{var}\n" for var in env))

    mounts = attrs.get("Mounts") or []
    if mounts:
        text.append("\nMounts\n", style=section)
        for mount in mounts:
            text.append(f"{mount.get('Source', '')} -> {mount.get('Destination', '')} ({mount.get('Type', '')})\n")

    ports = (attrs.get("NetworkSettings") or {}).get("Ports") or {}
    if ports:
        text.append("\nPorts\n", style=section)
        for port, bindings in sorted(ports.items()):
            hosts = [f"{b.get('HostIp', '')}:{b.get('HostPort', '')}" for b in bindings or []]
            text.append(f"{port} -> {hosts}\n")
    text.rstrip()
    return text


class ContainersPanel(ResourcePanel):
    kind = CONTAINERS
    title = "Containers"
    noun = "container"

    def __init__(self, context: AppContext) -> None:
        super().__init__(context, loader_for(collect, context.engine))
        self._inspection: dict[str, Any] | None = None
        self._stats: ContainerStats | None = None
        self._stats_for: str | None = None
        self.cpu_history: deque[float] = deque(maxlen=CPU_HISTORY)

    def init(self) -> list[Command]:
        return super().init() + [stats_tick(self.kind)]

    def bindings(self) -> list[keys.Binding]:
        return super().bindings() + [START, STOP, RESTART, PAUSE, UNPAUSE, LOGS, EXEC]

    def _targets(self) -> list[ContainerItem]:
        """Selected containers, or the one under the cursor when nothing is selected."""
        selected = set(self.view.selected_ids())
        if selected:
            return [item for item in self.view.items() if item.identity in selected]
        item = self.view.selected_item()
        return [item] if item is not None else []

    def _mark_working(self, ids: set[str], working: bool) -> None:
        for item in self.view.items():
            if item.identity in ids:
                item.working = working

    def handle_key(self, name: str) -> list[Command] | None:
        for binding, action in STATE_ACTIONS:
            if binding.matches(name):
                return self.set_state(action)
        if LOGS.matches(name):
            return self.open_logs()
        if EXEC.matches(name):
            return self.exec_shell()
        return super().handle_key(name)

    def set_state(self, action: str) -> list[Command]:
        targets = self._targets()
        if not targets or any(item.working for item in targets):
            return []
        ids = tuple(item.identity for item in targets)
        self._mark_working(set(ids), True)
        engine = self.engine
        return [run_operation(self.kind, action, ids, lambda: engine.set_state(list(ids), action))]

    def request_remove(self) -> list[Command]:
        targets = self._targets()
        if not targets or any(item.working for item in targets):
            return []
        if len(targets) == 1:
            message = f"Are you sure you want to delete {targets[0].container.name}?"
        else:
            message = f"Are you sure you want to delete the {len(targets)} selected containers?"
        ids = tuple(item.identity for item in targets)
        dialog = confirm_dialog(self.context, message, DialogAction(DELETE_ACTION, ids))
        return [emit(OpenOverlay(self.kind, dialog))]

    def on_confirm(self, action: DialogAction) -> list[Command]:
        if action.type != DELETE_ACTION:
            return super().on_confirm(action)
        ids = tuple(action.payload)
        self._mark_working(set(ids), True)
        engine = self.engine
        return [run_operation(self.kind, "remove", ids, lambda: engine.set_state(list(ids), "remove"))]

    def on_operation_finished(self, event: OperationFinished) -> list[Command]:
        ids = set(event.ids)
        self._mark_working(ids, False)
        # removed or pruned containers are re-described by the refresh that follows
        if event.operation in STATE_AFTER:
            self.invalidate_detail()

        if event.operation == "prune":
            return super().on_operation_finished(event)
        if event.error:
            commands = [show_error(f"Failed to {event.operation} containers: {event.error}")]
            if event.operation == "remove":
                # some of a batch may have gone through
                commands.append(self.view.refresh())
            return commands
        if event.operation == "remove":
            self.view.clear_selection()
            noun = "container" if len(ids) == 1 else "containers"
            return [show_success(f"Removed {len(ids)} {noun}"), self.view.refresh()]

        new_state = STATE_AFTER.get(event.operation)
        if new_state:
            for item in self.view.items():
                if item.identity in ids:
                    item.container.state = new_state
        return []

    def _running_target(self) -> ContainerItem | None:
        item = self.view.selected_item()
        if item is None or item.container.state != "running":
            return None
        return item

    def open_logs(self) -> list[Command]:
        item = self._running_target()
        if item is None:
            return [show_info("Logs are only available for running containers")]
        overlay = LogsOverlay(self.context, item.identity, item.container.name)
        return [emit(OpenOverlay(self.kind, overlay))]

    def exec_shell(self) -> list[Command]:
        item = self._running_target()
        if item is None:
            return [show_info("Exec needs a running container")]
        return [emit(ExecRequested(self.engine.exec_argv(item.identity)))]

    def describe(self, item: ContainerItem) -> list[Command]:
        engine = self.engine
        kind = self.kind
        container_id = item.identity
        self._inspection = None
        if container_id != self._stats_for:
            self._stats_for = container_id
            self._stats = None
            self.cpu_history.clear()
        self.view.set_content(Text(f"{item.container.name}\n\nLoading…", style=self.context.theme.muted))

        def inspect() -> DetailLoaded:
            try:
                attrs = engine.inspect_container(container_id)
            except EngineError as exc:
                return DetailLoaded(kind, container_id, error=str(exc))
            return DetailLoaded(kind, container_id, content=attrs)

        return [inspect]

    def render_detail(self, content: dict[str, Any]) -> Text:
        self._inspection = content
        return format_inspection(content, self.context.theme, self._stats, list(self.cpu_history))

    # stats

    def on_stats_tick(self) -> list[Command]:
        """Reschedule, and sample the cursor container when it is running and nothing covers it."""
        commands = [stats_tick(self.kind)]
        if self.view.is_overlay_visible():
            return commands
        item = self._running_target()
        if item is None:
            return commands

        engine = self.engine
        kind = self.kind
        container_id = item.identity

        def sample() -> StatsLoaded:
            try:
                stats = engine.container_stats(container_id)
            except EngineError as exc:
                return StatsLoaded(kind, container_id, error=str(exc))
            return StatsLoaded(kind, container_id, stats=stats)

        commands.append(sample)
        return commands

    def on_stats_loaded(self, event: StatsLoaded) -> None:
        if event.identity != self._stats_for:
            return
        if event.error:
            logger.debug("stats for %s: %s", event.identity, event.error)
            return
        self._stats = event.stats
        self.cpu_history.append(event.stats.cpu_percent)
        if self._inspection is not None and event.identity == self._detail_for:
            self.view.update_content(self.render_detail(self._inspection))

    def update(self, event: Event) -> list[Command]:
        match event:
            case StatsTick(kind=kind) if kind == self.kind:
                return self.on_stats_tick()
            case StatsLoaded(kind=kind) if kind == self.kind:
                self.on_stats_loaded(event)
                return []
        return super().update(event)
