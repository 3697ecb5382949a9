"""Layout math for split panes and centered overlays."""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_GAP = 2
DEFAULT_MASTER_FRACTION = 0.5
STATUS_LINE_ROWS = 1


@dataclass(frozen=True)
class WindowRatio:
    width: float
    height: float


RATIO_FULLSCREEN = WindowRatio(1.0, 1.0)
RATIO_MODAL = WindowRatio(0.4, 0.2)
RATIO_LARGE_OVERLAY = WindowRatio(0.8, 0.8)


@dataclass(frozen=True)
class Frame:
    """Columns and rows a border plus padding consume around content."""

    horizontal: int = 0
    vertical: int = 0


NO_FRAME = Frame()
# rounded border plus one column of padding on each side
DETAIL_FRAME = Frame(4, 2)
# rounded border plus one cell of padding on every side
DIALOG_FRAME = Frame(4, 4)


@dataclass(frozen=True)
class Dimensions:
    width: int = 0
    height: int = 0
    content_width: int = 0
    content_height: int = 0
    offset_x: int = 0
    offset_y: int = 0


def calculate(
    window_width: int,
    window_height: int,
    ratio: WindowRatio = RATIO_FULLSCREEN,
    frame: Frame = NO_FRAME,
) -> Dimensions:
    window_width = max(0, int(window_width))
    window_height = max(0, int(window_height))

    width = min(window_width, max(0, math.floor(window_width * ratio.width)))
    height = min(window_height, max(0, math.floor(window_height * ratio.height)))

    return Dimensions(
        width=width,
        height=height,
        content_width=max(0, width - frame.horizontal),
        content_height=max(0, height - frame.vertical),
        offset_x=(window_width - width) // 2,
        offset_y=(window_height - height) // 2,
    )


def calculate_master_detail(
    window_width: int,
    window_height: int,
    frame: Frame = NO_FRAME,
    gap: int = DEFAULT_GAP,
    fraction: float = DEFAULT_MASTER_FRACTION,
) -> tuple[Dimensions, Dimensions]:
    """Split a window into a list region and a detail region.

    The detail region is one row shorter than the window so a status line
    fits underneath it.
    """
    window_width = max(0, int(window_width))
    window_height = max(0, int(window_height))

    total = max(0, window_width - gap)
    master_width = math.floor(total * fraction)
    detail_width = total - master_width
    detail_height = max(0, window_height - STATUS_LINE_ROWS)

    master = Dimensions(
        width=master_width,
        height=window_height,
        content_width=max(0, master_width - frame.horizontal),
        content_height=max(0, window_height - frame.vertical),
    )
    detail = Dimensions(
        width=detail_width,
        height=detail_height,
        content_width=max(0, detail_width - frame.horizontal),
        content_height=max(0, detail_height - frame.vertical),
        offset_x=master_width + gap,
    )
    return master, detail
