"""Terminal event loop: keys in, one full frame out per batch of events."""

from __future__ import annotations

import logging
import os
import queue
import select
import subprocess
import sys
import termios
import threading
from typing import Iterable

from rich.live import Live

from ctui_core.context import AppContext
from ctui_core.events import AddNotification, Command, Event, ExecRequested, Key, Quit, Resize
from ctui_core.keys import decode_key, split_keys
from ctui_core.notifications import ERROR, INFO
from ctui_core.router import TabRouter

logger = logging.getLogger(__name__)

POLL_SECONDS = 0.05
READ_SIZE = 1024


class Terminal:
    """stdin in non-canonical, no-echo mode.

    Uses termios (ICANON/ECHO off, VMIN=0/VTIME=0) instead of tty.setraw()
    so Rich Live's alternate screen rendering keeps working over SSH.
    """

    def __init__(self, fd: int | None = None) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self._saved: list | None = None

    @property
    def interactive(self) -> bool:
        return self._saved is not None

    def enter(self) -> None:
        try:
            saved = termios.tcgetattr(self.fd)
            new = termios.tcgetattr(self.fd)
            new[3] &= ~(termios.ICANON | termios.ECHO)
            new[6][termios.VMIN] = 0
            new[6][termios.VTIME] = 0
            termios.tcsetattr(self.fd, termios.TCSADRAIN, new)
        except termios.error as exc:
            # not a tty: render only
            logger.warning("keyboard input unavailable: %s", exc)
            return
        self._saved = saved

    def restore(self) -> None:
        if self._saved is None:
            return
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
        self._saved = None

    def read_keys(self, timeout: float) -> list[str]:
        """Wait up to ``timeout`` for input and decode whatever arrived."""
        if not self.interactive:
            return []
        ready, _, _ = select.select([self.fd], [], [], timeout)
        if not ready:
            return []
        try:
            data = os.read(self.fd, READ_SIZE).decode("utf-8", errors="ignore")
        except OSError as exc:
            logger.warning("reading stdin: %s", exc)
            return []
        names = (decode_key(raw) for raw in split_keys(data))
        return [name for name in names if name]


class Program:
    """Single-threaded delivery loop.

    Commands run on daemon threads and only ever touch the queue; every state
    change happens on the loop thread while an event is being delivered.
    """

    def __init__(self, context: AppContext, router: TabRouter, terminal: Terminal | None = None) -> None:
        self.context = context
        self.router = router
        self.terminal = terminal if terminal is not None else Terminal()
        self.events: queue.Queue[Event] = queue.Queue()
        self.running = False
        self._live: Live | None = None
        self._size = (0, 0)

    def dispatch(self, command: Command) -> None:
        def run() -> None:
            try:
                event = command()
            except Exception as exc:
                logger.exception("background command failed")
                event = AddNotification(f"Unexpected error: {exc}", ERROR)
            if event is not None:
                self.events.put(event)

        threading.Thread(target=run, daemon=True).start()

    def schedule(self, commands: Iterable[Command]) -> None:
        for command in commands:
            self.dispatch(command)

    def handle(self, event: Event) -> None:
        match event:
            case Quit():
                self.running = False
            case ExecRequested(argv=argv):
                self.run_exec(argv)
            case _:
                self.schedule(self.router.update(event))

    def drain(self) -> bool:
        """Deliver everything queued so far. Returns True if anything was delivered."""
        delivered = False
        while self.running:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                break
            self.handle(event)
            delivered = True
        return delivered

    def _check_size(self) -> None:
        size = self.context.console.size
        if (size.width, size.height) != self._size:
            self._size = (size.width, size.height)
            self.events.put(Resize(size.width, size.height))

    def run_exec(self, argv: tuple[str, ...]) -> None:
        """Hand the terminal to an interactive process, then take it back."""
        live = self._live
        if live is not None:
            live.stop()
        self.terminal.restore()
        logger.debug("exec: %s", " ".join(argv))
        try:
            completed = subprocess.run(list(argv), check=False)
        except OSError as exc:
            logger.warning("exec failed: %s", exc)
            self.events.put(AddNotification(f"Failed to run {argv[0]}: {exc}", ERROR))
        else:
            if completed.returncode != 0:
                self.events.put(AddNotification(f"Shell exited with status {completed.returncode}", INFO))
        finally:
            self.terminal.enter()
            if live is not None:
                live.start(refresh=True)
            # force a resize so the frame is redrawn at the current size
            self._size = (0, 0)

    def run(self) -> int:
        console = self.context.console
        self.terminal.enter()
        try:
            with Live(console=console, screen=True, auto_refresh=False) as live:
                self._live = live
                self.running = True
                self._check_size()
                self.schedule(self.router.init())
                while self.running:
                    for name in self.terminal.read_keys(POLL_SECONDS):
                        self.events.put(Key(name))
                    self._check_size()
                    if self.drain():
                        live.update(self.router.view(), refresh=True)
        except KeyboardInterrupt:
            logger.debug("interrupted")
        finally:
            self.running = False
            self._live = None
            self.router.close()
            self.terminal.restore()
        return 0
