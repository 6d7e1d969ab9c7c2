"""
Menus, the session object and the key router.

A :class:`Tui` owns every menu and every top-level window. It keeps the
list of windows that take part in tab focus cycling, the active menu and
the focused window, and routes each key through the session, menu and
window handlers.
"""

import logging
import weakref
from enum import Enum
from typing import Callable, List, Optional, Union

from .backend import Backend, BlessedBackend
from .colors import ColorMatrix, RenderContext
from .errors import BackendError, DuplicateNameError, InitError
from .keys import GLOBAL_KEYS, KEY_CTRLC, KEY_ESC, KEY_TAB
from .windows import ParentType, Window, WindowOwner

logger = logging.getLogger(__name__)


class Menu(WindowOwner):
    """A named screen: an ordered set of windows shown together.

    Attributes:
        name: Name, unique within the session
        windows: Owned windows, in paint order
        on_key: Callback ``on_key(menu, key)`` run while the menu is active
    """

    child_parent_type = ParentType.MENU

    def __init__(self, name: str, on_key: Optional[Callable[["Menu", int], None]] = None):
        self.name = name
        self.windows: List[Window] = []
        self.on_key = on_key
        self._tui = None

    @property
    def tui(self):
        return self._tui() if self._tui else None

    def handle_key(self, key: int):
        if self.on_key:
            self.on_key(self, key)

    def destroy(self):
        for window in self.windows:
            window.destroy()
        self.windows.clear()
        logger.debug("destroyed menu %r", self.name)


class State(Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class Tui(WindowOwner):
    """The session: root of the window tree and owner of the key loop.

    Creating a Tui initializes the backend and registers the color pairs.
    Use it as a context manager (or call :meth:`close`) to tear everything
    down and restore the terminal.

    Attributes:
        backend: Rendering backend
        w: Terminal width, read once at start
        h: Terminal height, read once at start
        menus: Owned menus
        windows: Owned top-level windows
        tab_windows: Windows that opted into tab focus (not owned)
        menu: Active menu, or None
        window: Focused window, or None
        color: Last pair activated by the most recent render
        on_key: Callback ``on_key(tui, key)``; for global keys a truthy
            return stops the session
        global_keys: Keys the session handler gets first refusal on
        state: RUNNING or STOPPED
    """

    child_parent_type = ParentType.TUI

    def __init__(self, backend: Optional[Backend] = None,
                 on_key: Optional[Callable[["Tui", int], Optional[bool]]] = None, *,
                 global_keys=GLOBAL_KEYS):
        self.backend = backend or BlessedBackend()
        self.on_key = on_key
        self.global_keys = frozenset(global_keys)
        self.menus: List[Menu] = []
        self.windows: List[Window] = []
        self.tab_windows: List[Window] = []
        self.menu: Optional[Menu] = None
        self.window: Optional[Window] = None
        self.color = 0
        self.state = State.STOPPED
        self._closed = False

        try:
            self.w, self.h = self.backend.init()
            ColorMatrix.register(self.backend)
        except (InitError, BackendError) as exc:
            self.backend.shutdown()
            if isinstance(exc, InitError):
                raise
            raise InitError(str(exc)) from exc
        self.state = State.RUNNING
        logger.info("session started on %dx%d screen", self.w, self.h)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def tui(self):
        return self

    @property
    def running(self) -> bool:
        return self.state == State.RUNNING

    def stop(self):
        self.state = State.STOPPED

    # Menus -----------------------------------------------------------

    def create_menu(self, name: str, on_key=None) -> Menu:
        if self.get_menu(name) is not None:
            raise DuplicateNameError(f"menu name already taken: {name!r}")
        menu = Menu(name, on_key)
        menu._tui = weakref.ref(self)
        self.menus.append(menu)
        logger.debug("created menu %r", name)
        return menu

    def get_menu(self, name: str) -> Optional[Menu]:
        for menu in self.menus:
            if menu.name == name:
                return menu
        return None

    def remove_menu(self, menu: Union[Menu, str]) -> bool:
        """Remove and destroy a menu with all its windows.

        Returns False when the menu is not owned by this session.
        """
        if isinstance(menu, str):
            menu = self.get_menu(menu)
        if menu is None or not any(menu is owned for owned in self.menus):
            return False
        self.menus.remove(menu)
        if self.menu is menu:
            self.menu = None
        for window in menu.windows:
            self._forget(window)
        menu.destroy()
        return True

    def set_menu(self, menu: Union[Menu, str, None]) -> Optional[Menu]:
        """Make a menu active and focus its first focusable window.

        Returns the new active menu, or None when ``menu`` names no menu.
        """
        if isinstance(menu, str):
            menu = self.get_menu(menu)
            if menu is None:
                return None
        elif menu is not None and not any(menu is owned for owned in self.menus):
            raise ValueError(f"menu {menu.name!r} does not belong to this session")
        self.menu = menu
        self.window = self._first_focusable()
        logger.debug("active menu: %r", menu.name if menu else None)
        return menu

    # Focus -----------------------------------------------------------

    def focusable_windows(self) -> List[Window]:
        """The tab-focus windows that can take focus right now."""
        return [window for window in self.tab_windows
                if window.interactive and self._is_displayed(window)]

    def focus(self, window: Optional[Window]):
        """Give keyboard focus to ``window`` (None clears focus).

        Raises:
            ValueError: the window belongs to another session, is destroyed,
                hidden, or sits in a menu that is not active.
        """
        if window is not None:
            if window.tui is not self or window.surface is None:
                raise ValueError(f"window {window.name!r} does not belong to this session")
            if not self._is_displayed(window):
                raise ValueError(f"window {window.name!r} is not displayed")
        self.window = window

    def focus_next(self) -> Optional[Window]:
        """Move focus to the next focusable window, wrapping around."""
        windows = self.focusable_windows()
        if not windows:
            self.window = None
            return None
        index = 0
        for position, window in enumerate(windows):
            if window is self.window:
                index = (position + 1) % len(windows)
                break
        self.window = windows[index]
        logger.debug("focus: %r", self.window.name)
        return self.window

    def _first_focusable(self) -> Optional[Window]:
        """First focusable window of the active menu, else of the session."""
        windows = self.focusable_windows()
        for window in windows:
            if self.menu is not None and window.menu is self.menu:
                return window
        return windows[0] if windows else None

    def _is_displayed(self, window: Window) -> bool:
        menu = window.menu
        return window.is_shown() and (menu is None or menu is self.menu)

    def _set_tabbable(self, window: Window, tabbable: bool):
        present = any(window is entry for entry in self.tab_windows)
        if tabbable and not present:
            self.tab_windows.append(window)
        elif not tabbable and present:
            self.tab_windows.remove(window)
            if self.window is window:
                self.window = self._first_focusable()

    def _forget(self, window: Window):
        """Drop a detached subtree from the focus bookkeeping."""
        subtree = list(window.walk())
        self.tab_windows = [entry for entry in self.tab_windows
                            if not any(entry is node for node in subtree)]
        if any(self.window is node for node in subtree):
            self.window = self._first_focusable()

    # Events ----------------------------------------------------------

    def event(self, key: int):
        """Route one key through the session, menu and window handlers."""
        if not self.running:
            return
        if key in self.global_keys:
            if self._global_key(key):
                logger.debug("global key %d stops the session", key)
                self.stop()
                return
        elif key == KEY_TAB:
            self.focus_next()
            return
        elif self.on_key:
            self.on_key(self, key)

        if self.menu is not None:
            self.menu.handle_key(key)
        window = self.window
        if window is not None and window.surface is not None and self._is_displayed(window):
            window.handle_key(key)

    def _global_key(self, key: int) -> bool:
        if self.on_key:
            return bool(self.on_key(self, key))
        return key in (KEY_CTRLC, KEY_ESC)

    def run(self):
        """Render, then read and route keys until the session stops."""
        self.render()
        while self.running:
            key = self.backend.read_key()
            if key is None:
                continue
            self.event(key)
            if self.running:
                self.render()

    # Rendering -------------------------------------------------------

    def render(self):
        """Paint every displayed window, parents before children, and flush."""
        for menu in self.menus:
            for window in menu.windows:
                self._show(window)
        for window in self.windows:
            self._show(window)

        ctx = RenderContext(self.backend, focused=self.window)
        roots = (self.menu.windows if self.menu else []) + self.windows
        for window in roots:
            if window.visible:
                window.draw(ctx)
        if ctx.depth:
            logger.warning("render finished with %d unbalanced color regions", ctx.depth)
        self.color = ctx.last
        self.backend.flush()

    def _show(self, root: Window):
        for window in root.walk():
            self.backend.show_surface(window.surface, self._is_displayed(window))

    # Teardown --------------------------------------------------------

    def close(self):
        """Destroy all menus and windows and shut the backend down."""
        if self._closed:
            return
        self._closed = True
        self.stop()
        for menu in self.menus:
            menu.destroy()
        self.menus.clear()
        for window in self.windows:
            window.destroy()
        self.windows.clear()
        self.tab_windows.clear()
        self.menu = None
        self.window = None
        try:
            self.backend.shutdown()
        except (BackendError, OSError) as exc:
            logger.warning("ignoring error during backend shutdown: %s", exc)
        logger.info("session closed")
