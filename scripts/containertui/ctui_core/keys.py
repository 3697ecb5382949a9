"""Key decoding for the raw terminal and key-binding help."""

from __future__ import annotations

from dataclasses import dataclass

ESCAPE_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[5~": "pgup",
    "\x1b[6~": "pgdown",
    "\x1b[3~": "delete",
    "\x1b[Z": "shift+tab",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
}

CONTROL_KEYS = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    " ": "space",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x1b": "esc",
}


def decode_key(raw: str) -> str | None:
    """Turn one read from the terminal into a key name such as ``ctrl+a``."""
    if not raw:
        return None
    if raw in ESCAPE_SEQUENCES:
        return ESCAPE_SEQUENCES[raw]
    if raw in CONTROL_KEYS:
        return CONTROL_KEYS[raw]
    if raw.startswith("\x1b"):
        # unknown sequence, or alt+key
        return None
    if len(raw) == 1 and ord(raw) < 32:
        return f"ctrl+{chr(ord(raw) + 96)}"
    return raw


def split_keys(data: str) -> list[str]:
    """Split a burst of terminal input into individual key reads."""
    keys: list[str] = []
    index = 0
    while index < len(data):
        if data[index] != "\x1b":
            keys.append(data[index])
            index += 1
            continue
        match = None
        for sequence in ESCAPE_SEQUENCES:
            if data.startswith(sequence, index) and (match is None or len(sequence) > len(match)):
                match = sequence
        if match is None:
            match = "\x1b"
        keys.append(match)
        index += len(match)
    return keys


@dataclass(frozen=True)
class Binding:
    keys: tuple[str, ...]
    help_key: str
    help_text: str

    def matches(self, name: str) -> bool:
        return name in self.keys


def binding(*keys: str, label: tuple[str, str]) -> Binding:
    return Binding(tuple(keys), label[0], label[1])


LIST_UP = binding("up", "k", label=("↑/k", "up"))
LIST_DOWN = binding("down", "j", label=("↓/j", "down"))
LIST_HOME = binding("home", "g", label=("g/home", "go to start"))
LIST_END = binding("end", "G", label=("G/end", "go to end"))
LIST_PAGE_UP = binding("pgup", label=("pgup", "prev page"))
LIST_PAGE_DOWN = binding("pgdown", label=("pgdown", "next page"))
FILTER = binding("/", label=("/", "filter"))
CLEAR_FILTER = binding("esc", label=("esc", "clear filter"))
ACCEPT_FILTER = binding("enter", label=("enter", "apply filter"))
SWITCH_FOCUS = binding("tab", label=("tab", "switch focus"))
TOGGLE_SELECTION = binding("space", label=("space", "toggle selection"))
TOGGLE_ALL = binding("ctrl+a", label=("ctrl+a", "toggle selection of all"))
REMOVE = binding("r", label=("r", "remove"))
PRUNE = binding("X", label=("X", "prune"))
NEXT_TAB = binding("]", label=("]", "next tab"))
PREV_TAB = binding("[", label=("[", "prev tab"))
HELP = binding("?", label=("?", "toggle help"))
QUIT = binding("q", "ctrl+c", label=("q", "quit"))


def short_help_text(bindings: list[Binding]) -> str:
    return " • ".join(f"{b.help_key} {b.help_text}" for b in bindings)


def full_help_rows(columns: list[list[Binding]]) -> list[str]:
    """Lay out binding columns side by side as plain text rows."""
    rendered = []
    for column in columns:
        key_width = max((len(b.help_key) for b in column), default=0)
        rendered.append([f"{b.help_key.ljust(key_width)}  {b.help_text}" for b in column])
    widths = [max((len(cell) for cell in column), default=0) for column in rendered]
    depth = max((len(column) for column in rendered), default=0)

    rows = []
    for row in range(depth):
        cells = []
        for column, width in zip(rendered, widths):
            cell = column[row] if row < len(column) else ""
            cells.append(cell.ljust(width))
        rows.append("    ".join(cells).rstrip())
    return rows
