"""
Layout engine.

Pure functions that turn a content area and an ordered list of requested
child sizes into concrete rects. A requested extent of 0 means "auto":
auto children share whatever the fixed children leave over.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Sequence, Tuple


class Pos(IntEnum):
    """Placement of a block within a larger extent."""
    START = 0
    CENTER = 1
    END = 2


class Align(IntEnum):
    """Spacing of items within an extent.

    START, CENTER and END leave placement to the block's ``Pos``; the
    remaining values spread the free space as gaps.
    """
    START = 0
    CENTER = 1
    END = 2
    BETWEEN = 3
    AROUND = 4
    EVENLY = 5


SPACING = frozenset({Align.BETWEEN, Align.AROUND, Align.EVENLY})


@dataclass
class Rect:
    """Rectangle of character cells.

    ``x`` and ``y`` are the top-left corner in the parent's coordinate space.
    """
    w: int = 0
    h: int = 0
    x: int = 0
    y: int = 0

    def inset(self, cells: int) -> "Rect":
        """Return the rect shrunk by ``cells`` on every side."""
        return Rect(
            max(0, self.w - 2 * cells),
            max(0, self.h - 2 * cells),
            self.x + cells,
            self.y + cells,
        )

    def translate(self, dx: int, dy: int) -> "Rect":
        return Rect(self.w, self.h, self.x + dx, self.y + dy)


def share(total: int, weights: Sequence[int]) -> List[int]:
    """Split ``total`` cells proportionally to ``weights``.

    Each slot gets the floor of its share; the cells left over go one each
    to the first slots with a nonzero weight, so the result sums to ``total``.
    """
    weight_sum = sum(weights)
    if total <= 0 or weight_sum <= 0:
        return [0] * len(weights)
    shares = [total * weight // weight_sum for weight in weights]
    leftover = total - sum(shares)
    for index, weight in enumerate(weights):
        if leftover <= 0:
            break
        if weight:
            shares[index] += 1
            leftover -= 1
    return shares


def gap_weights(count: int, align: Align) -> List[int]:
    """Relative gap sizes (edges included) for ``count`` items."""
    if align == Align.BETWEEN:
        return [0] + [1] * (count - 1) + [0]
    if align == Align.AROUND:
        return [1] + [2] * (count - 1) + [1]
    return [1] * (count + 1)


def offset(free: int, pos: Pos) -> int:
    """Start offset of a block with ``free`` spare cells around it."""
    free = max(0, free)
    if pos == Pos.CENTER:
        return free // 2
    if pos == Pos.END:
        return free
    return 0


def auto_sizes(extent: int, requests: Sequence[int]) -> List[int]:
    """Resolve auto (0) requests to an even share of the remaining space."""
    fixed = sum(request for request in requests if request > 0)
    autos = [index for index, request in enumerate(requests) if request <= 0]
    sizes = [max(0, request) for request in requests]
    for index, size in zip(autos, share(max(0, extent - fixed), [1] * len(autos))):
        sizes[index] = size
    return sizes


def distribute(extent: int, sizes: Sequence[int], pos: Pos = Pos.START,
               align: Align = Align.START) -> List[int]:
    """Return the start offset of each item along one axis."""
    if not sizes:
        return []
    free = max(0, extent - sum(sizes))
    if align in SPACING and free:
        gaps = share(free, gap_weights(len(sizes), align))
    else:
        gaps = [offset(free, pos)] + [0] * len(sizes)

    offsets = []
    cursor = gaps[0]
    for size, gap in zip(sizes, gaps[1:]):
        offsets.append(cursor)
        cursor += size + gap
    return offsets


def cross(extent: int, request: int, pos: Pos = Pos.START) -> Tuple[int, int]:
    """Return (offset, size) of an item on the cross axis."""
    if request <= 0:
        return 0, max(0, extent)
    return offset(extent - request, pos), request


def layout(area: Rect, requests: Sequence[Tuple[Rect, Pos]], vertical: bool = False,
           pos: Pos = Pos.START, align: Align = Align.START) -> List[Rect]:
    """Lay out children inside ``area``.

    Args:
        area: Content area, in the parent's coordinate space
        requests: (requested rect, cross-axis pos) per child, in order
        vertical: Stack along the height instead of the width
        pos: Placement of the packed block along the main axis
        align: Spacing along the main axis

    Returns:
        One rect per child, in the same coordinate space as ``area``.
    """
    if not requests:
        return []

    if vertical:
        main_extent, cross_extent = area.h, area.w
        main_requests = [request.h for request, _ in requests]
    else:
        main_extent, cross_extent = area.w, area.h
        main_requests = [request.w for request, _ in requests]

    sizes = auto_sizes(main_extent, main_requests)
    offsets = distribute(main_extent, sizes, pos, align)

    rects = []
    for (request, child_pos), start, size in zip(requests, offsets, sizes):
        if vertical:
            cross_start, cross_size = cross(cross_extent, request.w, child_pos)
            rects.append(Rect(cross_size, size, area.x + cross_start, area.y + start))
        else:
            cross_start, cross_size = cross(cross_extent, request.h, child_pos)
            rects.append(Rect(size, cross_size, area.x + start, area.y + cross_start))
    return rects


def place(width: int, height: int, request: Rect) -> Rect:
    """Rect of a top-level window on a ``width`` x ``height`` screen."""
    return Rect(
        request.w if request.w > 0 else max(0, width - request.x),
        request.h if request.h > 0 else max(0, height - request.y),
        request.x,
        request.y,
    )


def arrange_line(line: str, width: int, align: Align = Align.START) -> Tuple[int, str]:
    """Position one line of text within ``width`` cells.

    Returns the start column and the string to paint. Spacing alignments
    spread the words, keeping at least one space between neighbours.
    """
    line = line[:max(0, width)]
    if align in SPACING:
        words = line.split()
        if not words:
            return 0, ""
        free = width - sum(len(word) for word in words) - (len(words) - 1)
        gaps = share(max(0, free), gap_weights(len(words), align))
        between = [gap + 1 for gap in gaps[1:-1]] + [0]
        return gaps[0], "".join(word + " " * gap for word, gap in zip(words, between))
    return offset(width - len(line), Pos(int(align))), line
