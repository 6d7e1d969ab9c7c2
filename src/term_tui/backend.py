"""
Rendering backends.

The window tree only talks to a :class:`Backend`. :class:`BlessedBackend`
draws through the Blessed library: each surface is an in-memory grid of
cells, and :meth:`BlessedBackend.flush` composites the visible surfaces
onto the terminal in the order they were last cleared (painted).
"""

import logging
from abc import ABC, abstractmethod
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from blessed import Terminal

from .errors import AllocationError, BackendError, InitError
from .keys import KEY_ENTR, KEY_ESC, KEY_TAB
from .layout import Rect

logger = logging.getLogger(__name__)


class Backend(ABC):
    """What the window tree needs from a terminal driver."""

    @abstractmethod
    def init(self) -> Tuple[int, int]:
        """Prepare the terminal and return its (width, height)."""

    @abstractmethod
    def shutdown(self) -> None:
        """Restore the terminal."""

    @abstractmethod
    def create_surface(self, w: int, h: int, x: int, y: int):
        """Return a new surface handle, or raise AllocationError."""

    @abstractmethod
    def resize_move(self, surface, w: int, h: int, x: int, y: int) -> None:
        pass

    @abstractmethod
    def destroy_surface(self, surface) -> None:
        pass

    @abstractmethod
    def show_surface(self, surface, visible: bool) -> None:
        """Include or exclude a surface from the composited screen."""

    @abstractmethod
    def paint_text(self, surface, x: int, y: int, text: str, pair: int,
                   reverse: bool = False) -> None:
        pass

    @abstractmethod
    def paint_border(self, surface, pair: int) -> None:
        pass

    @abstractmethod
    def clear(self, surface, pair: int = 0) -> None:
        """Blank the surface with the given pair."""

    @abstractmethod
    def flush(self) -> None:
        """Push pending painting to the terminal."""

    @abstractmethod
    def register_color_pair(self, index: int, fg: int, bg: int) -> None:
        """Bind a pair index to backend color numbers (-1 is the default color)."""

    @abstractmethod
    def read_key(self, blocking: bool = True) -> Optional[int]:
        """Return the next key code; None when not blocking and no key is pending."""


@dataclass
class Cell:
    char: str = " "
    pair: int = 0
    reverse: bool = False


@dataclass(eq=False)
class Surface:
    """A rectangular grid of cells positioned on the screen.

    Attributes:
        rect: Absolute screen position and size
        cells: Rows of cells, ``rect.h`` rows of ``rect.w`` cells
        visible: Whether flush draws this surface
    """
    rect: Rect
    cells: List[List[Cell]] = field(default_factory=list)
    visible: bool = True

    def __post_init__(self):
        if not self.cells:
            self.blank()

    def blank(self, pair: int = 0):
        self.cells = [[Cell(" ", pair) for _ in range(self.rect.w)] for _ in range(self.rect.h)]

    def put(self, x: int, y: int, text: str, pair: int, reverse: bool = False):
        """Write text at (x, y), clipped to the surface."""
        if not 0 <= y < self.rect.h:
            return
        for col, char in enumerate(text, start=x):
            if 0 <= col < self.rect.w:
                self.cells[y][col] = Cell(char, pair, reverse)

    def rows(self):
        """Yield (row, [(text, pair, reverse), ...]) runs of identically styled cells."""
        for row, cells in enumerate(self.cells):
            runs = []
            for cell in cells:
                if runs and runs[-1][1:] == (cell.pair, cell.reverse):
                    runs[-1] = (runs[-1][0] + cell.char, cell.pair, cell.reverse)
                else:
                    runs.append((cell.char, cell.pair, cell.reverse))
            yield row, runs


class BlessedBackend(Backend):
    """Backend drawing on a Blessed Terminal.

    Attributes:
        term: Blessed Terminal instance
        key_timeout: Timeout in seconds for blocking reads (None waits forever)
        border_chars: Corner, horizontal and vertical border glyphs
    """

    def __init__(self, term: Optional[Terminal] = None, *,
                 key_timeout: Optional[float] = None, border_chars: str = "+-|"):
        if len(border_chars) != 3:
            raise ValueError("border_chars needs exactly three characters")
        self.term = term or Terminal()
        self.key_timeout = key_timeout
        self.border_chars = border_chars
        self.surfaces: List[Surface] = []
        self._pairs: Dict[int, str] = {}
        self._modes: Optional[ExitStack] = None

    def init(self):
        if self.term.number_of_colors < 8:
            raise InitError("terminal lacks color support")
        self._modes = ExitStack()
        self._modes.enter_context(self.term.fullscreen())
        self._modes.enter_context(self.term.raw())
        self._modes.enter_context(self.term.hidden_cursor())
        print(self.term.clear, end="", flush=True)
        logger.info("terminal ready: %dx%d, %d colors",
                    self.term.width, self.term.height, self.term.number_of_colors)
        return self.term.width, self.term.height

    def shutdown(self):
        if self._modes is None:
            return
        print(self.term.normal + self.term.clear, end="", flush=True)
        modes, self._modes = self._modes, None
        modes.close()
        logger.info("terminal restored")

    def create_surface(self, w, h, x, y):
        if w < 0 or h < 0:
            raise AllocationError(f"invalid surface size {w}x{h}")
        try:
            surface = Surface(Rect(w, h, x, y))
        except MemoryError as exc:
            raise AllocationError(f"cannot allocate {w}x{h} surface") from exc
        self.surfaces.append(surface)
        return surface

    def resize_move(self, surface, w, h, x, y):
        if surface.rect != Rect(w, h, x, y):
            surface.rect = Rect(max(0, w), max(0, h), x, y)
            surface.blank()

    def destroy_surface(self, surface):
        try:
            self.surfaces.remove(surface)
        except ValueError:
            raise BackendError("surface already destroyed") from None

    def show_surface(self, surface, visible):
        surface.visible = visible

    def paint_text(self, surface, x, y, text, pair, reverse=False):
        surface.put(x, y, text, pair, reverse)

    def paint_border(self, surface, pair):
        corner, horizontal, vertical = self.border_chars
        w, h = surface.rect.w, surface.rect.h
        if w < 2 or h < 2:
            return
        edge = corner + horizontal * (w - 2) + corner
        surface.put(0, 0, edge, pair)
        surface.put(0, h - 1, edge, pair)
        for row in range(1, h - 1):
            surface.put(0, row, vertical, pair)
            surface.put(w - 1, row, vertical, pair)

    def clear(self, surface, pair=0):
        """Blank the surface and raise it above every other surface.

        Windows are cleared as they are painted, so flush composites in
        the order of the last render pass.
        """
        surface.blank(pair)
        self.surfaces.remove(surface)
        self.surfaces.append(surface)

    def register_color_pair(self, index, fg, bg):
        colors = self.term.number_of_colors
        if fg >= colors or bg >= colors:
            raise BackendError(f"pair {index} needs more than {colors} colors")
        style = ""
        if fg >= 0:
            style += self.term.color(fg)
        if bg >= 0:
            style += self.term.on_color(bg)
        self._pairs[index] = style

    def flush(self):
        output = [self.term.home]
        for surface in self.surfaces:
            if not surface.visible:
                continue
            for row, runs in surface.rows():
                output.append(self.term.move_xy(surface.rect.x, surface.rect.y + row))
                for text, pair, reverse in runs:
                    style = self._pairs.get(pair, "")
                    if reverse:
                        style += self.term.reverse
                    output.append(style + text + self.term.normal)
        print("".join(output), end="", flush=True)

    def read_key(self, blocking=True):
        key = self.term.inkey(timeout=self.key_timeout if blocking else 0)
        if not key:
            return None
        if key.is_sequence:
            named = {
                getattr(self.term, "KEY_ESCAPE", None): KEY_ESC,
                getattr(self.term, "KEY_TAB", None): KEY_TAB,
                getattr(self.term, "KEY_ENTER", None): KEY_ENTR,
            }
            return named.get(key.code, key.code)
        return ord(str(key)[0])
