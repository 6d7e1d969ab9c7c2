"""Shared fixtures: a recording in-memory backend."""

import itertools

import pytest

from term_tui import Tui
from term_tui.backend import Backend
from term_tui.errors import AllocationError, BackendError, InitError


class FakeSurface:
    _ids = itertools.count(1)

    def __init__(self, w, h, x, y):
        self.id = next(self._ids)
        self.geometry = (w, h, x, y)
        self.visible = True

    def __repr__(self):
        return f"FakeSurface({self.id})"


class FakeBackend(Backend):
    """Backend that records every call instead of drawing."""

    def __init__(self, width=80, height=24, keys=()):
        self.width = width
        self.height = height
        self.keys = list(keys)
        self.calls = []
        self.pairs = {}
        self.live = []
        self.destroyed = []
        self.painted = []
        self.fail_init = False
        self.fail_register = False
        self.fail_create = False
        self.fail_destroy = False
        self.shut_down = 0
        self.flushes = 0

    def init(self):
        self.calls.append("init")
        if self.fail_init:
            raise InitError("no terminal")
        return self.width, self.height

    def shutdown(self):
        self.shut_down += 1

    def create_surface(self, w, h, x, y):
        if self.fail_create:
            raise AllocationError("out of surfaces")
        surface = FakeSurface(w, h, x, y)
        self.live.append(surface)
        return surface

    def resize_move(self, surface, w, h, x, y):
        surface.geometry = (w, h, x, y)

    def destroy_surface(self, surface):
        self.destroyed.append(surface)
        if surface in self.live:
            self.live.remove(surface)
        if self.fail_destroy:
            raise BackendError("destroy failed")

    def show_surface(self, surface, visible):
        surface.visible = visible

    def paint_text(self, surface, x, y, text, pair, reverse=False):
        self.painted.append((surface, x, y, text, pair, reverse))

    def paint_border(self, surface, pair):
        self.calls.append(("border", surface, pair))

    def clear(self, surface, pair=0):
        self.calls.append(("clear", surface, pair))

    def flush(self):
        self.flushes += 1

    def register_color_pair(self, index, fg, bg):
        if self.fail_register:
            raise BackendError("no colors")
        self.pairs[index] = (fg, bg)

    def read_key(self, blocking=True):
        return self.keys.pop(0) if self.keys else None

    def texts(self, surface):
        """Painted (x, y, text) entries for one surface, in order."""
        return [(x, y, text) for s, x, y, text, _, _ in self.painted if s is surface]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def tui(backend):
    session = Tui(backend)
    yield session
    session.close()
