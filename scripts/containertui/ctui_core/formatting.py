"""Shared text formatting helpers for list items and detail panes."""

from __future__ import annotations

from datetime import datetime, timezone

NERD_SELECTED = "\uf046"
NERD_UNSELECTED = "\uf096"
SPARK_BLOCKS = "▁▂▃▄▅▆▇█"


def selection_icon(selected: bool, no_nerd_fonts: bool) -> str:
    if no_nerd_fonts:
        return "[x]" if selected else "[ ]"
    return NERD_SELECTED if selected else NERD_UNSELECTED


def short_id(identifier: str, length: int = 12) -> str:
    if not identifier:
        return ""
    _, sep, digest = identifier.partition(":")
    return (digest if sep else identifier)[:length]


def size_mb(size_bytes: int | float | None) -> str:
    return f"{float(size_bytes or 0) / 1024 / 1024:.2f}MB"


def human_bytes(size_bytes: int | float | None) -> str:
    size = float(size_bytes or 0)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.0f}{unit}" if unit == "B" else f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}TB"


def parse_timestamp(value: str | int | float | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # engine timestamps carry nanoseconds
    head, dot, rest = text.partition(".")
    if dot:
        digits = rest[: len(rest) - len(rest.lstrip("0123456789"))]
        zone = rest[len(digits):]
        text = f"{head}.{digits[:6].ljust(6, '0')}{zone}"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_created(value: str | int | float | None) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return "n/a"
    return parsed.strftime("%Y-%m-%d %H:%M:%S UTC")


def join_or_none(values: list[str] | None) -> str:
    return ", ".join(values) if values else "none"


def sparkline(values: list[float], floor: float = 1.0) -> str:
    """One block character per value, scaled to the peak (at least ``floor``)."""
    if not values:
        return ""
    top = max(max(values), floor)
    last = len(SPARK_BLOCKS) - 1
    return "".join(SPARK_BLOCKS[round(max(0.0, value) / top * last)] for value in values)
