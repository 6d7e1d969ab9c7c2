"""
Window classes.

A window is a rectangle of the screen backed by exactly one backend surface.
There are three kinds: containers lay out child windows, text windows show
wrapped text, and input windows edit a single line. Windows are always
created through their owner (the session, a menu or a container) and are
destroyed children first.
"""

import logging
import textwrap
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Union

from . import keys
from .colors import Color
from .errors import AllocationError, BackendError, DuplicateNameError
from .layout import Align, Pos, Rect, arrange_line, layout, offset, place

logger = logging.getLogger(__name__)


class WindowType(Enum):
    CONTAINER = "container"
    TEXT = "text"
    INPUT = "input"


class ParentType(Enum):
    """Kind of object that owns a window."""
    TUI = "tui"
    MENU = "menu"
    WINDOW = "window"


@dataclass
class Border:
    fg: Color = Color.NONE
    bg: Color = Color.NONE


class WindowOwner:
    """Mixin for objects owning an ordered list of windows.

    Owners place their windows on the screen; :class:`ContainerWindow`
    overrides the placement to stack children inside itself.
    """

    child_parent_type = ParentType.TUI
    windows: List["Window"]

    @property
    def tui(self):
        raise NotImplementedError

    def get_window(self, name: str) -> Optional["Window"]:
        """Return the directly owned window called ``name``, or None."""
        for window in self.windows:
            if window.name == name:
                return window
        return None

    def find_window(self, name: str) -> Optional["Window"]:
        """Search the owned windows and their descendants, depth first."""
        for window in self.windows:
            for node in window.walk():
                if node.name == name:
                    return node
        return None

    def create_container(self, name: Optional[str] = None, *, vertical: bool = False,
                         align: Align = Align.START, **options) -> "ContainerWindow":
        return self._attach(ContainerWindow(name, vertical=vertical, align=align, **options))

    def create_text(self, name: Optional[str] = None, text: str = "", *,
                    align: Align = Align.START, formatter=None, **options) -> "TextWindow":
        return self._attach(TextWindow(name, text, align=align, formatter=formatter, **options))

    def create_input(self, name: Optional[str] = None, *, capacity: int = 16,
                     secret: bool = False, hidden: bool = False, on_submit=None,
                     **options) -> "InputWindow":
        return self._attach(InputWindow(
            name, capacity=capacity, secret=secret, hidden=hidden,
            on_submit=on_submit, **options,
        ))

    def remove_window(self, window: Union["Window", str]) -> bool:
        """Remove and destroy an owned window and its subtree.

        Returns False when no such window is owned here.
        """
        if isinstance(window, str):
            window = self.get_window(window)
        if window is None or not any(window is owned for owned in self.windows):
            return False
        self.windows.remove(window)
        self.tui._forget(window)
        window.destroy()
        self._arrange()
        return True

    def _attach(self, window: "Window") -> "Window":
        if window.name is not None and self.get_window(window.name) is not None:
            raise DuplicateNameError(f"window name already taken: {window.name!r}")
        tui = self.tui
        rect = self._child_rects(self.windows + [window])[-1]
        x, y = self._origin()
        window.surface = tui.backend.create_surface(rect.w, rect.h, rect.x + x, rect.y + y)
        window._bind(self, tui)
        self.windows.append(window)
        if window.interactive:
            tui.tab_windows.append(window)
        logger.debug("created %s window %r in %s", window.type.value, window.name,
                     self.child_parent_type.value)
        self._arrange()
        return window

    def _child_rects(self, windows) -> List[Rect]:
        tui = self.tui
        return [place(tui.w, tui.h, window.request) for window in windows]

    def _origin(self):
        return 0, 0

    def _arrange(self) -> None:
        x, y = self._origin()
        for window, rect in zip(self.windows, self._child_rects(self.windows)):
            window.place(rect, x, y)


class Window:
    """Base class for all windows.

    Attributes:
        name: Name, unique among the owner's windows (may be None)
        visible: Whether the window and its children are drawn
        locked: Whether key input is ignored
        request: Requested size and position; 0 width or height means "fill"
        rect: Computed rect, relative to the parent
        screen_rect: Computed rect in absolute screen coordinates
        surface: Backend surface, None once destroyed
        fg: Foreground color (NONE inherits)
        bg: Background color (NONE inherits)
        border: Border colors, or None for no border
        on_key: Callback ``on_key(window, key)``
        pos: Placement on the parent's cross axis
        parent_type: Kind of the owning object
    """

    type: WindowType

    def __init__(self, name: Optional[str] = None, *, rect: Optional[Rect] = None,
                 visible: bool = True, interactive: bool = False, locked: bool = False,
                 fg: Color = Color.NONE, bg: Color = Color.NONE,
                 border: Optional[Border] = None,
                 on_key: Optional[Callable[["Window", int], None]] = None,
                 pos: Pos = Pos.START):
        self.name = name
        self.visible = visible
        self._interactive = interactive
        self.locked = locked
        self.request = rect or Rect()
        self.rect = Rect()
        self.screen_rect = Rect()
        self.surface = None
        self.fg = fg
        self.bg = bg
        self.border = border
        self.on_key = on_key
        self.pos = pos
        self.parent_type: Optional[ParentType] = None
        self._parent = None
        self._tui = None
        self._backend = None

    def _bind(self, owner, tui):
        self.parent_type = owner.child_parent_type
        self._parent = weakref.ref(owner)
        self._tui = weakref.ref(tui)
        self._backend = tui.backend

    @property
    def parent(self):
        """The owning session, menu or container."""
        return self._parent() if self._parent else None

    @property
    def tui(self):
        return self._tui() if self._tui else None

    @property
    def menu(self):
        """The menu this window belongs to, or None for session-level windows."""
        node = self
        while node.parent_type == ParentType.WINDOW:
            node = node.parent
        return node.parent if node.parent_type == ParentType.MENU else None

    @property
    def interactive(self) -> bool:
        """Whether the window takes part in tab focus cycling."""
        return self._interactive

    @interactive.setter
    def interactive(self, value: bool):
        self._interactive = value
        tui = self.tui
        if tui is not None and self.surface is not None:
            tui._set_tabbable(self, value)

    @property
    def content(self) -> Rect:
        """Area inside the border, relative to the surface."""
        return Rect(self.rect.w, self.rect.h).inset(1 if self.border else 0)

    def is_shown(self) -> bool:
        """Whether this window and all its ancestors are visible."""
        node = self
        while isinstance(node, Window):
            if not node.visible:
                return False
            node = node.parent
        return True

    def walk(self) -> Iterator["Window"]:
        """Yield this window and its descendants in pre-order."""
        yield self

    def resize(self, w: Optional[int] = None, h: Optional[int] = None,
               x: Optional[int] = None, y: Optional[int] = None):
        """Change the requested geometry and lay out again."""
        self.request = Rect(
            self.request.w if w is None else max(0, w),
            self.request.h if h is None else max(0, h),
            self.request.x if x is None else x,
            self.request.y if y is None else y,
        )
        parent = self.parent
        if parent is not None:
            parent._arrange()

    def place(self, rect: Rect, x: int, y: int):
        """Apply a computed rect; (x, y) is the parent's absolute origin."""
        self.rect = rect
        self.screen_rect = rect.translate(x, y)
        if self.surface is not None:
            self._backend.resize_move(self.surface, self.screen_rect.w, self.screen_rect.h,
                                      self.screen_rect.x, self.screen_rect.y)

    def handle_key(self, key: int):
        """Deliver a key to this window. Locked windows ignore input."""
        if self.locked:
            return
        if self.on_key:
            self.on_key(self, key)

    def draw(self, ctx):
        """Paint the window, then its content, inside its color scope."""
        with ctx.color(self.fg, self.bg):
            ctx.fill(self.surface)
            if self.border:
                with ctx.color(self.border.fg, self.border.bg):
                    ctx.border(self.surface)
            self.draw_content(ctx)

    def draw_content(self, ctx):
        pass

    def destroy(self):
        """Release the surface. Backend errors are logged, never raised."""
        if self.surface is None:
            return
        surface, self.surface = self.surface, None
        try:
            self._backend.destroy_surface(surface)
        except (BackendError, OSError) as exc:
            logger.warning("ignoring error destroying window %r: %s", self.name, exc)
        logger.debug("destroyed %s window %r", self.type.value, self.name)


class ContainerWindow(Window, WindowOwner):
    """A window stacking its children along one axis.

    ``pos`` has two jobs here. Like every window's, it places the container
    on its parent's cross axis. It also places the packed block of children
    along the container's own main axis, so a centered container packs its
    children in the middle too. Wrap the children in an inner container to
    place the two independently.

    Attributes:
        windows: Owned child windows, in layout order
        vertical: Stack top to bottom instead of left to right
        pos: Placement in the parent, and of the packed children
        align: Spacing between the children
    """

    type = WindowType.CONTAINER
    child_parent_type = ParentType.WINDOW

    def __init__(self, name=None, *, vertical: bool = False, align: Align = Align.START,
                 **options):
        super().__init__(name, **options)
        self.windows: List[Window] = []
        self.vertical = vertical
        self.align = align

    def walk(self):
        yield self
        for child in self.windows:
            yield from child.walk()

    def place(self, rect, x, y):
        super().place(rect, x, y)
        self._arrange()

    def _child_rects(self, windows):
        return layout(
            self.content,
            [(window.request, window.pos) for window in windows],
            vertical=self.vertical, pos=self.pos, align=self.align,
        )

    def _origin(self):
        return self.screen_rect.x, self.screen_rect.y

    def draw_content(self, ctx):
        for child in self.windows:
            if child.visible:
                child.draw(ctx)

    def destroy(self):
        for child in self.windows:
            child.destroy()
        self.windows.clear()
        super().destroy()


class TextWindow(Window):
    """A window that displays wrapped, optionally scrolled text.

    ``string`` is the template given by the caller and ``text`` the string
    actually shown: the template after the ``formatter`` callback has filled
    in its placeholders. The text is derived again on every render.
    """

    type = WindowType.TEXT

    def __init__(self, name=None, text: str = "", *, align: Align = Align.START,
                 formatter: Optional[Callable[[str], str]] = None, **options):
        super().__init__(name, **options)
        self.align = align
        self.formatter = formatter
        self.scroll = 0
        self.string = ""
        self.text = ""
        self.set_text(text)

    def set_text(self, template: str):
        self.string = template or ""
        self.update_text()

    def update_text(self):
        self.text = self.formatter(self.string) if self.formatter else self.string

    def lines(self) -> List[str]:
        """The text wrapped to the content width."""
        width = self.content.w
        if width <= 0:
            return []
        lines = []
        for line in self.text.splitlines() or [""]:
            lines.extend(textwrap.wrap(line, width) or [""])
        return lines

    def handle_key(self, key):
        if not self.locked:
            max_scroll = max(0, len(self.lines()) - self.content.h)
            match key:
                case keys.KEY_DOWN:
                    self.scroll = min(self.scroll + 1, max_scroll)
                case keys.KEY_UP:
                    self.scroll = max(self.scroll - 1, 0)
        super().handle_key(key)

    def draw_content(self, ctx):
        self.update_text()
        area = self.content
        lines = self.lines()
        self.scroll = max(0, min(self.scroll, len(lines) - area.h))
        shown = lines[self.scroll:self.scroll + area.h]
        top = area.y + offset(area.h - len(shown), self.pos)
        for row, line in enumerate(shown):
            x, text = arrange_line(line, area.w, self.align)
            ctx.text(self.surface, area.x + x, top + row, text)


class InputWindow(Window):
    """A single-line text input.

    The text lives in a byte buffer that doubles its capacity when full.
    ``cursor`` is the insertion point and ``scroll`` the first byte shown;
    both stay within ``[0, length]``.

    Attributes:
        secret: Show mask glyphs instead of the text
        hidden: Show nothing at all
        mask: Glyph used for secret input
        on_submit: Callback ``on_submit(window, value)`` run on Enter
    """

    type = WindowType.INPUT

    def __init__(self, name=None, *, capacity: int = 16, secret: bool = False,
                 hidden: bool = False, mask: str = "*",
                 on_submit: Optional[Callable[["InputWindow", str], None]] = None,
                 **options):
        super().__init__(name, **options)
        self.capacity = max(0, capacity)
        self.buffer = bytearray(self.capacity)
        self.length = 0
        self.cursor = 0
        self.scroll = 0
        self.secret = secret
        self.hidden = hidden
        self.mask = mask
        self.on_submit = on_submit

    @property
    def value(self) -> str:
        return self.buffer[:self.length].decode("latin-1")

    @property
    def visible_width(self) -> int:
        return self.content.w

    def _grow(self):
        capacity = max(1, self.capacity * 2)
        try:
            self.buffer.extend(bytes(capacity - self.capacity))
        except MemoryError as exc:
            raise AllocationError(f"cannot grow input buffer to {capacity} bytes") from exc
        self.capacity = capacity

    def insert(self, char: Union[str, int]):
        """Insert one character at the cursor."""
        code = ord(char) if isinstance(char, str) else char
        if not 0 <= code < 256:
            raise ValueError(f"not a single-byte character: {char!r}")
        if self.length == self.capacity:
            self._grow()
        cursor, length = self.cursor, self.length
        self.buffer[cursor + 1:length + 1] = self.buffer[cursor:length]
        self.buffer[cursor] = code
        self.length += 1
        self.cursor += 1
        self._scroll_to_cursor()

    def delete_backward(self) -> bool:
        """Delete the character before the cursor. Returns False at the start."""
        if self.cursor == 0:
            return False
        cursor, length = self.cursor, self.length
        self.buffer[cursor - 1:length - 1] = self.buffer[cursor:length]
        self.buffer[length - 1] = 0
        self.length -= 1
        self.cursor -= 1
        self._scroll_to_cursor()
        return True

    def delete_forward(self) -> bool:
        """Delete the character under the cursor. Returns False at the end."""
        if self.cursor >= self.length:
            return False
        cursor, length = self.cursor, self.length
        self.buffer[cursor:length - 1] = self.buffer[cursor + 1:length]
        self.buffer[length - 1] = 0
        self.length -= 1
        self._scroll_to_cursor()
        return True

    def move_cursor(self, delta: int):
        self.cursor += delta
        self._scroll_to_cursor()

    def move_home(self):
        self.cursor = 0
        self._scroll_to_cursor()

    def move_end(self):
        self.cursor = self.length
        self._scroll_to_cursor()

    def clear(self):
        self.buffer[:self.length] = bytes(self.length)
        self.length = self.cursor = self.scroll = 0

    def _scroll_to_cursor(self):
        self.cursor = max(0, min(self.cursor, self.length))
        width = self.visible_width
        if self.cursor < self.scroll:
            self.scroll = self.cursor
        elif width > 0 and self.cursor >= self.scroll + width:
            self.scroll = self.cursor - width + 1
        self.scroll = max(0, min(self.scroll, self.length))

    def place(self, rect, x, y):
        super().place(rect, x, y)
        self._scroll_to_cursor()

    def handle_key(self, key):
        if not self.locked:
            match key:
                case _ if keys.is_printable(key):
                    self.insert(key)
                case _ if key in keys.BACKSPACE_KEYS:
                    self.delete_backward()
                case _ if key in keys.DELETE_KEYS:
                    self.delete_forward()
                case keys.KEY_LEFT:
                    self.move_cursor(-1)
                case keys.KEY_RIGHT:
                    self.move_cursor(1)
                case keys.KEY_HOME:
                    self.move_home()
                case keys.KEY_END:
                    self.move_end()
                case _ if key in keys.SUBMIT_KEYS and self.on_submit:
                    self.on_submit(self, self.value)
        super().handle_key(key)

    def draw_content(self, ctx):
        if self.hidden:
            return
        area = self.content
        if area.w <= 0 or area.h <= 0:
            return
        self._scroll_to_cursor()
        if self.secret:
            shown = self.mask * (self.length - self.scroll)
        else:
            shown = self.value[self.scroll:]
        shown = shown[:area.w]
        y = area.y + offset(area.h - 1, self.pos)
        ctx.text(self.surface, area.x, y, shown)

        if ctx.focused is self:
            column = self.cursor - self.scroll
            if 0 <= column < area.w:
                char = shown[column] if column < len(shown) else " "
                ctx.text(self.surface, area.x + column, y, char, reverse=True)
