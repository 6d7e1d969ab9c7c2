"""
Terminal TUI Library

A toolkit for terminal user interfaces built from a tree of windows.
Containers lay out their children, text and input windows display and edit
text, menus group windows into screens, and a session routes keys and
manages focus. Drawing goes through a backend, by default the Blessed library.
"""

from .backend import Backend, BlessedBackend, Surface
from .colors import Color, ColorMatrix, RenderContext
from .errors import (
    AllocationError,
    BackendError,
    DuplicateNameError,
    InitError,
    TuiError,
)
from .layout import Align, Pos, Rect
from .session import Menu, State, Tui
from .windows import (
    Border,
    ContainerWindow,
    InputWindow,
    ParentType,
    TextWindow,
    Window,
    WindowType,
)

__all__ = [
    'Backend',
    'BlessedBackend',
    'Surface',
    'Color',
    'ColorMatrix',
    'RenderContext',
    'TuiError',
    'InitError',
    'AllocationError',
    'BackendError',
    'DuplicateNameError',
    'Align',
    'Pos',
    'Rect',
    'Menu',
    'State',
    'Tui',
    'Border',
    'Window',
    'ContainerWindow',
    'TextWindow',
    'InputWindow',
    'ParentType',
    'WindowType',
]

__version__ = '0.1.0'
