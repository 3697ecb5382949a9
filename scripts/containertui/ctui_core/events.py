"""Events delivered by the runtime loop and the deferred commands that produce them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Union


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class Key:
    name: str


@dataclass(frozen=True)
class DialogAction:
    """What a dialog button asks for. An empty type means plain close."""

    type: str = ""
    payload: Any = None


@dataclass(frozen=True)
class OpenOverlay:
    kind: str
    overlay: Any


@dataclass(frozen=True)
class CloseDialog:
    pass


@dataclass(frozen=True)
class Confirmation:
    action: DialogAction


@dataclass(frozen=True)
class FocusChanged:
    detail_focused: bool


@dataclass(frozen=True)
class ItemsLoaded:
    kind: str
    items: tuple[Any, ...] = ()


@dataclass(frozen=True)
class LoadFailed:
    kind: str
    error: str


@dataclass(frozen=True)
class OperationFinished:
    kind: str
    operation: str
    ids: tuple[Hashable, ...] = ()
    error: str | None = None
    reclaimed: int = 0


@dataclass(frozen=True)
class DetailLoaded:
    kind: str
    identity: Hashable
    content: Any = ""
    error: str | None = None


@dataclass(frozen=True)
class StatsTick:
    kind: str


@dataclass(frozen=True)
class StatsLoaded:
    kind: str
    identity: Hashable
    stats: Any = None
    error: str | None = None


@dataclass(frozen=True)
class AddNotification:
    message: str
    level: str = "info"
    duration: float | None = None


@dataclass(frozen=True)
class RemoveNotification:
    id: int


@dataclass(frozen=True)
class LogChunk:
    stream_id: int
    lines: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LogStreamOpened:
    stream_id: int
    stream: Any


@dataclass(frozen=True)
class LogStreamEnded:
    stream_id: int
    error: str | None = None


@dataclass(frozen=True)
class ExecRequested:
    argv: tuple[str, ...]


@dataclass(frozen=True)
class RefreshTick:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Event = Union[
    Resize,
    Key,
    OpenOverlay,
    CloseDialog,
    Confirmation,
    FocusChanged,
    ItemsLoaded,
    LoadFailed,
    OperationFinished,
    DetailLoaded,
    StatsTick,
    StatsLoaded,
    AddNotification,
    RemoveNotification,
    LogStreamOpened,
    LogChunk,
    LogStreamEnded,
    ExecRequested,
    RefreshTick,
    Quit,
]

# A deferred unit of work. It runs off the loop and its result is fed back in.
Command = Callable[[], Union[Event, None]]


def emit(event: Event) -> Command:
    return lambda: event
