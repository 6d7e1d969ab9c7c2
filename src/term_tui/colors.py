"""
Color pairs and the per-render-pass color state.

Every (foreground, background) combination of the nine colors is addressed
by one pair index, ``fg * 9 + bg``. ``Color.NONE`` is transparent: when a
pair is activated, a NONE component takes the value of the pair that is
currently active, so nested regions inherit whatever is already painted.
"""

import logging
from contextlib import contextmanager
from enum import IntEnum
from typing import List, Tuple

from .errors import BackendError, InitError

logger = logging.getLogger(__name__)


class Color(IntEnum):
    """The base colors. Ordinal 0 is the transparent color."""
    NONE = 0
    BLACK = 1
    RED = 2
    GREEN = 3
    YELLOW = 4
    BLUE = 5
    MAGENTA = 6
    CYAN = 7
    WHITE = 8

    @property
    def code(self) -> int:
        """Backend color number; -1 is the terminal's default color."""
        return self.value - 1


class ColorMatrix:
    """Addressing scheme for the 81 registered color pairs."""

    SIZE = len(Color)
    PAIRS = SIZE * SIZE

    @staticmethod
    def index(fg: Color, bg: Color) -> int:
        return int(fg) * ColorMatrix.SIZE + int(bg)

    @staticmethod
    def components(index: int) -> Tuple[Color, Color]:
        """Inverse of :meth:`index`."""
        if not 0 <= index < ColorMatrix.PAIRS:
            raise ValueError(f"color pair index out of range: {index}")
        fg, bg = divmod(index, ColorMatrix.SIZE)
        return Color(fg), Color(bg)

    @staticmethod
    def register(backend) -> None:
        """Register every pair with the backend, in index order.

        Raises:
            InitError: the backend could not allocate a pair.
        """
        for index in range(ColorMatrix.PAIRS):
            fg, bg = ColorMatrix.components(index)
            try:
                backend.register_color_pair(index, fg.code, bg.code)
            except BackendError as exc:
                raise InitError(f"cannot register color pair {index}: {exc}") from exc
        logger.debug("registered %d color pairs", ColorMatrix.PAIRS)


class RenderContext:
    """State carried through one render pass.

    Holds the stack of active color pairs. The bottom of the stack is pair 0
    (default on default). Paint helpers draw with the pair on top.

    Attributes:
        backend: Backend the pass paints through
        focused: Window holding keyboard focus during this pass, or None
        last: Most recently activated pair
    """

    def __init__(self, backend, focused=None):
        self.backend = backend
        self.focused = focused
        self._stack: List[int] = [0]
        self.last = 0

    @property
    def current(self) -> int:
        """The currently active pair index."""
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack) - 1

    def resolve(self, fg: Color, bg: Color) -> int:
        """Return the pair for (fg, bg) with NONE taken from the active pair."""
        last_fg, last_bg = ColorMatrix.components(self.current)
        if fg == Color.NONE:
            fg = last_fg
        if bg == Color.NONE:
            bg = last_bg
        return ColorMatrix.index(fg, bg)

    def activate(self, fg: Color, bg: Color) -> int:
        pair = self.resolve(fg, bg)
        self._stack.append(pair)
        self.last = pair
        return pair

    def deactivate(self, fg: Color, bg: Color) -> int:
        """Leave the innermost color region and restore the enclosing pair."""
        pair = self.resolve(fg, bg)
        if len(self._stack) > 1:
            self._stack.pop()
        else:
            logger.debug("deactivate(%s, %s) without a matching activate", fg, bg)
        return pair

    @contextmanager
    def color(self, fg: Color, bg: Color):
        """Activate (fg, bg) for the duration of the block."""
        pair = self.activate(fg, bg)
        try:
            yield pair
        finally:
            self.deactivate(fg, bg)

    # Paint helpers -----------------------------------------------------

    def fill(self, surface) -> None:
        self.backend.clear(surface, self.current)

    def border(self, surface) -> None:
        self.backend.paint_border(surface, self.current)

    def text(self, surface, x: int, y: int, text: str, reverse: bool = False) -> None:
        if text:
            self.backend.paint_text(surface, x, y, text, self.current, reverse=reverse)
