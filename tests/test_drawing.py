"""Tests for engine/drawing.py: the click-by-click polyline session."""
from __future__ import annotations

import pytest

from engine.drawing import DrawingState, PolylineDrawingSession
from engine.store import PolylineStore
from models import PolylinePoint


@pytest.fixture()
def lines():
    return PolylineStore(defaults=[])


@pytest.fixture()
def session(lines):
    return PolylineDrawingSession(lines)


class TestDrawingSession:
    def test_start_requires_edit_mode(self, lines, session):
        assert session.start(edit_mode=False) is None
        assert session.state is DrawingState.IDLE
        assert len(lines) == 0

    def test_start_creates_active_polyline(self, lines, session):
        line_id = session.start(edit_mode=True)
        assert session.state is DrawingState.DRAWING
        assert session.target_id == line_id
        assert lines.active_id == line_id
        assert lines.get(line_id).points == []

    def test_start_while_drawing_is_ignored(self, lines, session):
        session.start(True)
        assert session.start(True) is None
        assert len(lines) == 1

    def test_points_then_finish(self, lines, session):
        line_id = session.start(True)
        session.add_point(PolylinePoint(10, 20))
        session.set_preview(PolylinePoint(50, 50))
        session.add_point(PolylinePoint(30, 40))
        assert session.finish() == line_id
        assert lines.get(line_id).points == [PolylinePoint(10, 20), PolylinePoint(30, 40)]
        assert session.preview is None
        assert session.state is DrawingState.IDLE

    def test_preview_is_never_committed(self, lines, session):
        line_id = session.start(True)
        session.set_preview(PolylinePoint(5, 5))
        session.finish()
        assert lines.get(line_id).points == []

    def test_unmeasured_point_is_ignored(self, lines, session):
        line_id = session.start(True)
        assert session.add_point(None) is False
        assert lines.get(line_id).points == []

    def test_idle_clicks_do_nothing(self, session):
        assert session.add_point(PolylinePoint(1, 1)) is False
        session.set_preview(PolylinePoint(1, 1))
        assert session.preview is None

    def test_finish_while_idle(self, session):
        assert session.finish() is None

    def test_finish_keeps_short_polyline(self, lines, session):
        line_id = session.start(True)
        session.add_point(PolylinePoint(1, 1))
        session.finish()
        assert len(lines.get(line_id).points) == 1

    def test_deleting_target_forces_idle(self, lines, session):
        line_id = session.start(True)
        session.set_preview(PolylinePoint(3, 3))
        lines.delete(line_id)
        assert session.state is DrawingState.IDLE
        assert session.preview is None

    def test_clear_forces_idle(self, lines, session):
        session.start(True)
        lines.clear()
        assert not session.is_drawing

    def test_deleting_other_polyline_keeps_drawing(self, lines, session):
        other = lines.create()
        line_id = session.start(True)
        lines.delete(other.id)
        assert session.target_id == line_id
