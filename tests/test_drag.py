"""Tests for engine/drag.py: grab offset and clamped repositioning."""
from __future__ import annotations

import pytest

from engine.drag import DragSession
from engine.mapper import RectMapper, SurfaceGeometry
from engine.store import AnnotationStore
from models import Segment


@pytest.fixture()
def store():
    return AnnotationStore(default_segment_set=[
        Segment(id="a", top=10, left=20, width=10, height=10),
        Segment(id="b", top=50, left=50, width=5, height=5),
    ])


@pytest.fixture()
def mapper():
    # 200 x 100 px surface at the origin: 1 px = 0.5% horizontally, 1% vertically
    return RectMapper(lambda: SurfaceGeometry(0, 0, 200, 100))


class TestDragSession:
    def test_grab_offset(self, store, mapper):
        drag = DragSession(store, mapper)
        assert drag.begin("a", 50, 15, edit_mode=True)
        assert drag.grab_offset == (5.0, 5.0)
        assert store.selected_segment_id == "a"

    def test_box_follows_pointer(self, store, mapper):
        drag = DragSession(store, mapper)
        drag.begin("a", 50, 15, edit_mode=True)
        drag.move(100, 40)
        seg = store.get_segment("a")
        assert (seg.left, seg.top) == (45.0, 35.0)
        assert (seg.width, seg.height) == (10, 10)

    def test_final_position_depends_only_on_last_move(self, store, mapper):
        drag = DragSession(store, mapper)
        drag.begin("a", 50, 15, edit_mode=True)
        for x, y in [(10, 90), (190, 2), (0, 0), (120, 60)]:
            drag.move(x, y)
        drag.end()
        seg = store.get_segment("a")
        assert (seg.left, seg.top) == (55.0, 55.0)

    def test_anchor_is_clamped(self, store, mapper):
        drag = DragSession(store, mapper)
        drag.begin("a", 50, 15, edit_mode=True)
        drag.move(0, 0)
        seg = store.get_segment("a")
        assert (seg.left, seg.top) == (0.0, 0.0)
        drag.move(10000, 10000)
        assert (seg.left, seg.top) == (95.0, 95.0)

    def test_end_keeps_position(self, store, mapper):
        drag = DragSession(store, mapper)
        drag.begin("a", 50, 15, edit_mode=True)
        drag.move(60, 25)
        drag.end()
        assert not drag.is_dragging
        drag.move(180, 90)
        seg = store.get_segment("a")
        assert (seg.left, seg.top) == (25.0, 20.0)

    def test_view_mode_activates_instead(self, store, mapper):
        activated = []
        drag = DragSession(store, mapper, on_activate=activated.append)
        assert not drag.begin("b", 100, 50, edit_mode=False)
        assert activated == ["b"]
        assert not drag.is_dragging

    def test_second_begin_is_ignored(self, store, mapper):
        drag = DragSession(store, mapper)
        drag.begin("a", 50, 15, edit_mode=True)
        assert not drag.begin("b", 100, 50, edit_mode=True)
        assert drag.segment_id == "a"

    def test_unmeasured_surface(self, store):
        drag = DragSession(store, RectMapper(lambda: None))
        assert not drag.begin("a", 50, 15, edit_mode=True)

    def test_unknown_segment(self, store, mapper):
        assert not DragSession(store, mapper).begin("zz", 1, 1, edit_mode=True)

    def test_segment_deleted_mid_drag(self, store, mapper):
        drag = DragSession(store, mapper)
        drag.begin("a", 50, 15, edit_mode=True)
        store.delete_segment("a")
        assert not drag.move(70, 30)
        assert not drag.is_dragging
