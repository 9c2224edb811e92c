"""Tests for engine/store.py: segment and polyline mutations, selection
re-derivation and change notification."""
from __future__ import annotations

import pytest

from engine.persistence import MemoryStorage, StorageSlot
from engine.store import AnnotationStore, PolylineStore, StoreEvent
from models import PolylinePoint, Segment
from settings import PolylineDefaults, SegmentDefaults


@pytest.fixture()
def store():
    storage = MemoryStorage()
    return AnnotationStore(StorageSlot(storage, "segments"), StorageSlot(storage, "polylines"))


@pytest.fixture()
def events(store):
    seen = []
    store.subscribe(seen.append)
    return seen


# ─────────────────────────────────────────────────────────
# Segments
# ─────────────────────────────────────────────────────────


class TestSegments:
    def test_initial_selection_is_first_segment(self, store):
        assert store.selected_segment_id == "tp2"
        assert store.hovered_segment_id is None

    def test_add_uses_configured_defaults(self):
        store = AnnotationStore(
            segment_defaults=SegmentDefaults(top=5, left=6, width=7, height=8, color="emerald",
                                             fallback_code="BOX"),
            default_segment_set=[],
        )
        seg = store.add_segment()
        assert (seg.code, seg.top, seg.left, seg.width, seg.height, seg.color) == \
            ("BOX-1", 5, 6, 7, 8, "emerald")
        assert store.selected_segment_id == seg.id

    def test_add_with_overrides(self, store):
        seg = store.add_segment(title="Boiler", width=300)
        assert seg.title == "Boiler"
        assert seg.width == 100.0
        assert seg.code == "SEG-4"

    def test_update_coerces_each_field(self, store):
        seg = store.update_segment("otk", {"top": "abc", "left": -5, "height": 250,
                                           "color": "pink", "title": 12})
        assert (seg.top, seg.left, seg.height, seg.color, seg.title) == (0.0, 0.0, 100.0, "cyan", "12")

    def test_update_never_clamps_combined_geometry(self, store):
        seg = store.update_segment("otk", {"left": 95, "width": 20})
        assert (seg.left, seg.width) == (95, 20)

    @pytest.mark.parametrize("patch", [{"id": "other"}, {"colour": "cyan"}])
    def test_update_rejects_bad_keys(self, store, patch):
        with pytest.raises(ValueError):
            store.update_segment("otk", patch)

    def test_rejected_patch_changes_nothing(self):
        storage = MemoryStorage()
        store = AnnotationStore(StorageSlot(storage, "segments"))
        seen = []
        store.subscribe(seen.append)
        top = store.get_segment("tp2").top
        with pytest.raises(ValueError):
            store.update_segment("tp2", {"top": 55, "id": "x"})
        with pytest.raises(ValueError):
            store.update_segment("tp2", {"title": "new", "colour": "amber"})
        seg = store.get_segment("tp2")
        assert seg.top == top
        assert seg.title == "Section TP-2"
        assert "segments" not in storage.values
        assert seen == []

    def test_unknown_ids_are_ignored(self, store, events):
        assert store.update_segment("missing", {"top": 1}) is None
        assert store.move_segment("missing", 1, 1) is None
        assert store.delete_segment("missing") is False
        assert store.select_segment("missing") is False
        assert events == []

    def test_delete_selected_reselects_first(self, store):
        store.select_segment("otk")
        store.delete_segment("otk")
        assert store.selected_segment_id == "tp2"

    def test_delete_last_clears_selection(self):
        store = AnnotationStore(default_segment_set=[Segment(id="only")])
        store.hover_segment("only")
        store.delete_segment("only")
        assert store.selected_segment_id is None
        assert store.hovered_segment_id is None

    def test_move_selects(self, store, events):
        store.move_segment("otk", top=20, left=30)
        seg = store.get_segment("otk")
        assert (seg.top, seg.left) == (20, 30)
        assert store.selected_segment_id == "otk"
        assert events == [StoreEvent.SEGMENTS_CHANGED, StoreEvent.SEGMENT_SELECTED]

    def test_hover_unknown_becomes_none(self, store):
        store.hover_segment("tp2")
        store.hover_segment("missing")
        assert store.hovered_segment_id is None

    def test_import_replaces_everything(self, store):
        store.hover_segment("tp2")
        store.import_segments([Segment(id="a"), Segment(id="b")])
        assert [s.id for s in store.segments] == ["a", "b"]
        assert store.selected_segment_id == "a"
        assert store.hovered_segment_id is None

    def test_reset_restores_defaults(self, store):
        store.delete_segment("tp2")
        store.update_segment("otk", {"title": "x"})
        store.reset_to_defaults()
        assert [s.id for s in store.segments] == ["tp2", "otk", "seg-mljiz58p"]
        assert store.get_segment("otk").title == "Quality control reception (OTK)"

    def test_snapshot(self, store):
        snap = store.snapshot()
        assert [s["id"] for s in snap["segments"]] == ["tp2", "otk", "seg-mljiz58p"]
        assert snap["polylines"][0]["dashStyle"] == "dashed"


# ─────────────────────────────────────────────────────────
# Polylines
# ─────────────────────────────────────────────────────────


class TestPolylines:
    def test_create(self, store, events):
        line = store.polylines.create()
        assert line.label == "Line 2"
        assert line.points == []
        assert store.polylines.active_id == line.id
        assert events == [StoreEvent.POLYLINES_CHANGED, StoreEvent.POLYLINE_SELECTED]

    def test_create_uses_polyline_defaults(self):
        lines = PolylineStore(defaults=[], polyline_defaults=PolylineDefaults(
            color="amber", stroke_width=1.5, dash_style="dotted"))
        line = lines.create()
        assert (line.color, line.stroke_width, line.dash_style) == ("amber", 1.5, "dotted")

    def test_append_point_clamps(self, store):
        line = store.polylines.create()
        store.polylines.append_point(line.id, PolylinePoint(120, -3))
        assert line.points == [PolylinePoint(100.0, 0.0)]

    def test_update(self, store):
        line = store.polylines.create()
        store.polylines.update(line.id, {"label": "Rail", "strokeWidth": 2, "dashStyle": "dotted"})
        assert (line.label, line.stroke_width, line.dash_style) == ("Rail", 2, "dotted")

    def test_update_falls_back(self):
        lines = PolylineStore(defaults=[], polyline_defaults=PolylineDefaults(stroke_width=0.4))
        line = lines.create()
        lines.update(line.id, {"color": "nope", "stroke_width": -1, "dash_style": None})
        assert (line.color, line.stroke_width, line.dash_style) == ("cyan", 0.4, "solid")

    @pytest.mark.parametrize("patch", [{"id": "x"}, {"points": []}, {"width": 3}])
    def test_update_rejects_bad_keys(self, store, patch):
        line = store.polylines.create()
        with pytest.raises(ValueError):
            store.polylines.update(line.id, patch)

    def test_rejected_patch_leaves_polyline_untouched(self, store):
        line = store.polylines.create()
        with pytest.raises(ValueError):
            store.polylines.update(line.id, {"label": "Rail", "points": []})
        assert line.label == "Line 2"

    def test_delete_active_falls_back_to_first(self, store):
        first = store.polylines.polylines[0]
        line = store.polylines.create()
        store.polylines.delete(line.id)
        assert store.polylines.active_id == first.id

    def test_delete_inactive_keeps_active(self, store):
        first = store.polylines.polylines[0]
        line = store.polylines.create()
        store.polylines.delete(first.id)
        assert store.polylines.active_id == line.id

    def test_clear(self, store):
        store.polylines.create()
        store.polylines.clear()
        assert len(store.polylines) == 0
        assert store.polylines.active_id is None

    def test_select(self, store):
        lines = store.polylines
        assert lines.active_id is None
        assert lines.select(lines.polylines[0].id)
        assert not lines.select("missing")
        assert lines.select(None)
        assert lines.active is None

    def test_save_without_slot(self):
        assert PolylineStore(defaults=[]).save() is False

    def test_polyline_writes_do_not_touch_segments(self):
        storage = MemoryStorage()
        store = AnnotationStore(StorageSlot(storage, "segments"), StorageSlot(storage, "polylines"))
        store.polylines.create()
        assert "polylines" in storage.values
        assert "segments" not in storage.values


# ─────────────────────────────────────────────────────────
# Notification
# ─────────────────────────────────────────────────────────


class TestNotification:
    def test_failing_listener_does_not_block_others(self, store, caplog):
        seen = []

        def broken(_event):
            raise RuntimeError("view crashed")

        store.subscribe(broken)
        store.subscribe(seen.append)
        store.update_segment("tp2", {"title": "t"})
        assert seen == [StoreEvent.SEGMENTS_CHANGED]
        assert store.get_segment("tp2").title == "t"
        assert "Store listener failed" in caplog.text

    def test_unsubscribe(self, store):
        seen = []
        store.subscribe(seen.append)
        store.unsubscribe(seen.append)
        store.add_segment()
        assert seen == []

    def test_listeners_see_consistent_state(self, store):
        observed = []
        store.subscribe(lambda _e: observed.append(
            store.selected_segment_id is None or store.get_segment(store.selected_segment_id) is not None))
        store.select_segment("otk")
        store.delete_segment("otk")
        store.delete_segment("tp2")
        assert observed and all(observed)
