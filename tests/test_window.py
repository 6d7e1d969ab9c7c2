"""Tests for the window tree: layout, ownership and teardown."""

import pytest
from term_tui import (
    AllocationError, Border, Color, ColorMatrix, DuplicateNameError, ParentType, Pos, Rect,
    Tui, WindowType,
)


class TestWindowGeometry:
    """Tests for rect computation through the tree."""

    def test_top_level_window_fills_screen(self, tui):
        root = tui.create_container("root")
        assert root.rect == Rect(80, 24, 0, 0)
        assert root.screen_rect == Rect(80, 24, 0, 0)

    def test_top_level_window_keeps_requested_rect(self, tui, backend):
        window = tui.create_text("popup", rect=Rect(20, 5, 10, 3))
        assert window.screen_rect == Rect(20, 5, 10, 3)
        assert window.surface.geometry == (20, 5, 10, 3)

    def test_children_share_container(self, tui):
        root = tui.create_container("root")
        a = root.create_text("a", rect=Rect(w=20))
        b = root.create_text("b")
        assert a.rect == Rect(20, 24, 0, 0)
        assert b.rect == Rect(60, 24, 20, 0)

    def test_nested_absolute_coordinates(self, tui, backend):
        root = tui.create_container("root", rect=Rect(40, 20, 5, 3), vertical=True,
                                    border=Border())
        column = root.create_container("column", rect=Rect(h=4))
        leaf = column.create_text("leaf", rect=Rect(w=10))

        assert column.rect == Rect(38, 4, 1, 1)
        assert column.screen_rect == Rect(38, 4, 6, 4)
        assert leaf.rect == Rect(10, 4, 0, 0)
        assert leaf.screen_rect == Rect(10, 4, 6, 4)
        assert leaf.surface.geometry == (10, 4, 6, 4)

    def test_removal_relayouts_siblings(self, tui):
        root = tui.create_container("root")
        root.create_text("a", rect=Rect(w=20))
        b = root.create_text("b")
        assert root.remove_window("a") is True
        assert b.rect == Rect(80, 24, 0, 0)

    def test_resize_relayouts_siblings(self, tui):
        root = tui.create_container("root")
        a = root.create_text("a", rect=Rect(w=20))
        b = root.create_text("b")
        a.resize(w=30)
        assert a.rect.w == 30
        assert b.rect == Rect(50, 24, 30, 0)

    def test_moving_ancestor_moves_descendants(self, tui, backend):
        root = tui.create_container("root", rect=Rect(20, 10, 0, 0))
        leaf = root.create_text("leaf")
        root.resize(x=7, y=2)
        assert leaf.screen_rect == Rect(20, 10, 7, 2)
        assert leaf.surface.geometry == (20, 10, 7, 2)

    def test_container_pos_places_itself_and_its_children(self, tui):
        """A centered container sits centered in its parent and packs its children centered."""
        root = tui.create_container("root", rect=Rect(40, 20, 0, 0), vertical=True)
        bar = root.create_container("bar", rect=Rect(w=20, h=4), pos=Pos.CENTER)
        leaf = bar.create_text("leaf", rect=Rect(w=6))

        assert bar.rect == Rect(20, 4, 10, 0)
        assert leaf.rect == Rect(6, 4, 7, 0)
        assert leaf.screen_rect == Rect(6, 4, 17, 0)

    def test_inner_container_packs_independently(self, tui):
        root = tui.create_container("root", rect=Rect(40, 20, 0, 0), vertical=True)
        bar = root.create_container("bar", rect=Rect(w=20, h=4), pos=Pos.CENTER)
        row = bar.create_container("row")
        leaf = row.create_text("leaf", rect=Rect(w=6))

        assert row.rect == Rect(20, 4, 0, 0)
        assert leaf.screen_rect == Rect(6, 4, 10, 0)


class TestWindowOwnership:
    """Tests for creation, lookup and back-references."""

    def test_window_types(self, tui):
        root = tui.create_container("root")
        assert root.type == WindowType.CONTAINER
        assert root.create_text("t").type == WindowType.TEXT
        assert root.create_input("i").type == WindowType.INPUT

    def test_back_references(self, tui):
        menu = tui.create_menu("main")
        root = menu.create_container("root")
        leaf = root.create_text("leaf")

        assert leaf.parent is root
        assert leaf.parent_type == ParentType.WINDOW
        assert root.parent is menu
        assert root.parent_type == ParentType.MENU
        assert leaf.tui is tui
        assert leaf.menu is menu
        assert tui.create_text("status").menu is None

    def test_duplicate_name_rejected(self, tui, backend):
        root = tui.create_container("root")
        root.create_text("a")
        surfaces = len(backend.live)
        with pytest.raises(DuplicateNameError):
            root.create_text("a")
        assert len(root.windows) == 1
        assert len(backend.live) == surfaces

    def test_same_name_in_different_owners(self, tui):
        first = tui.create_container("first")
        second = tui.create_container("second")
        assert first.create_text("label") is not second.create_text("label")

    def test_unnamed_windows_never_collide(self, tui):
        tui.create_text()
        tui.create_text()
        assert len(tui.windows) == 2

    def test_allocation_failure_inserts_nothing(self, tui, backend):
        root = tui.create_container("root")
        backend.fail_create = True
        with pytest.raises(AllocationError):
            root.create_text("a", interactive=True)
        assert root.windows == []
        assert tui.tab_windows == []

    def test_lookup(self, tui):
        root = tui.create_container("root")
        inner = root.create_container("inner")
        leaf = inner.create_text("leaf")

        assert tui.get_window("root") is root
        assert tui.get_window("leaf") is None
        assert tui.find_window("leaf") is leaf
        assert root.get_window("missing") is None

    def test_remove_unknown_window(self, tui):
        other = tui.create_container("other")
        root = tui.create_container("root")
        assert root.remove_window("nope") is False
        assert root.remove_window(other) is False
        assert other.surface is not None


class TestWindowTeardown:
    """Tests for destroying subtrees."""

    def build(self, tui):
        root = tui.create_container("root")
        column = root.create_container("column")
        first = column.create_text("first")
        second = column.create_input("second")
        text = root.create_text("text")
        return root, [first, second, column, text, root]

    def test_post_order_exactly_once(self, tui, backend):
        root, expected = self.build(tui)
        surfaces = [window.surface for window in expected]

        assert tui.remove_window(root) is True
        assert backend.destroyed == surfaces
        assert all(window.surface is None for window in expected)

    def test_destroy_twice_is_noop(self, tui, backend):
        root, expected = self.build(tui)
        tui.remove_window(root)
        root.destroy()
        assert len(backend.destroyed) == len(expected)

    def test_backend_errors_do_not_stop_teardown(self, tui, backend):
        root, expected = self.build(tui)
        backend.fail_destroy = True
        tui.remove_window(root)
        assert len(backend.destroyed) == len(expected)
        assert backend.live == []

    def test_close_releases_everything(self, backend):
        tui = Tui(backend)
        tui.create_menu("main").create_container("root").create_text("leaf")
        tui.create_text("status")
        tui.close()
        tui.close()

        assert backend.live == []
        assert len(backend.destroyed) == 3
        assert backend.shut_down == 1
        assert tui.menus == [] and tui.windows == []

    def test_context_manager_closes(self, backend):
        with Tui(backend) as tui:
            tui.create_text("status")
        assert backend.live == []
        assert not tui.running


class TestWindowRender:
    """Tests for painting order and colors."""

    def test_transparent_child_inherits_background(self, tui, backend):
        root = tui.create_container("root", fg=Color.WHITE, bg=Color.BLUE)
        label = root.create_text("label", "hi", fg=Color.RED)
        tui.render()

        pairs = [pair for surface, _, _, _, pair, _ in backend.painted if surface is label.surface]
        assert pairs == [ColorMatrix.index(Color.RED, Color.BLUE)]
        assert tui.color == ColorMatrix.index(Color.RED, Color.BLUE)
        assert backend.flushes == 1

    def test_parents_paint_before_children(self, tui, backend):
        root = tui.create_container("root", bg=Color.BLUE)
        child = root.create_text("child")
        tui.render()

        cleared = [call[1] for call in backend.calls if call[0] == "clear"]
        assert cleared == [root.surface, child.surface]

    def test_border_uses_its_own_colors(self, tui, backend):
        root = tui.create_container("root", bg=Color.BLUE, border=Border(fg=Color.YELLOW))
        tui.render()
        assert ("border", root.surface, ColorMatrix.index(Color.YELLOW, Color.BLUE)) in backend.calls

    def test_invisible_subtree_is_hidden(self, tui, backend):
        root = tui.create_container("root")
        hidden = root.create_container("hidden", visible=False)
        leaf = hidden.create_text("leaf", "secret")
        tui.render()

        assert leaf.surface.visible is False
        assert hidden.surface.visible is False
        assert root.surface.visible is True
        assert backend.texts(leaf.surface) == []
