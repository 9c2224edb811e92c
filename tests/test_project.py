"""Tests for engine/project.py: project bundle save/open."""
from __future__ import annotations

import json

import pytest

from engine.project import (
    UNTITLED,
    ProjectInfo,
    ProjectRejected,
    apply_bundle,
    collect_bundle,
    parse_bundle,
    read_project,
    write_project,
)
from engine.store import AnnotationStore, PolylineStore
from models import Polyline, PolylinePoint, Segment


@pytest.fixture()
def stores():
    store = AnnotationStore()
    detail = PolylineStore(defaults=[], id_prefix="wheel-poly")
    return store, detail


def _document(**overrides):
    doc = {
        "project": {"name": "Depot", "description": "North yard"},
        "segments": [{"id": "s1", "code": "S1"}],
        "polylines": [{"id": "p1", "points": [{"x": 1, "y": 2}]}],
        "wheelPolylines": [{"id": "w1"}],
    }
    doc.update(overrides)
    return doc


class TestParseBundle:
    def test_valid(self):
        bundle = parse_bundle(_document())
        assert bundle.info == ProjectInfo("Depot", "North yard")
        assert [s.id for s in bundle.segments] == ["s1"]
        assert bundle.polylines[0].points == [PolylinePoint(1, 2)]
        assert [p.id for p in bundle.wheel_polylines] == ["w1"]

    def test_missing_detail_polylines(self):
        doc = _document()
        del doc["wheelPolylines"]
        assert parse_bundle(doc).wheel_polylines == []

    def test_blank_name(self):
        assert parse_bundle(_document(project={"name": "  "})).info.name == UNTITLED
        assert parse_bundle(_document(project=None)).info.name == UNTITLED

    @pytest.mark.parametrize("doc", [
        [],
        "project",
        _document(project="Depot"),
        _document(segments=None),
        _document(polylines={"id": "p"}),
        _document(wheelPolylines=[{"label": "no id"}]),
        _document(segments=[{"id": "s1"}, {"id": ""}]),
    ])
    def test_rejected(self, doc):
        with pytest.raises(ProjectRejected):
            parse_bundle(doc)


class TestProjectFiles:
    def test_round_trip(self, tmp_path, stores):
        store, detail = stores
        detail.create()
        detail.append_point(detail.polylines[0].id, PolylinePoint(4, 5))
        path = tmp_path / "projects" / "depot.json"
        write_project(path, collect_bundle(ProjectInfo("Depot"), store, detail))

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert set(raw) == {"project", "segments", "polylines", "wheelPolylines"}

        bundle = read_project(path)
        assert bundle.info.name == "Depot"
        assert bundle.segments == list(store.segments)
        assert bundle.polylines == list(store.polylines.polylines)
        assert bundle.wheel_polylines == list(detail.polylines)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProjectRejected):
            read_project(tmp_path / "absent.json")

    def test_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ProjectRejected):
            read_project(path)

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "binary.json"
        path.write_bytes(b"{\xff}")
        with pytest.raises(ProjectRejected):
            read_project(path)


class TestApplyBundle:
    def test_replaces_every_collection(self, stores):
        store, detail = stores
        bundle = parse_bundle(_document())
        apply_bundle(bundle, store, detail)
        assert [s.id for s in store.segments] == ["s1"]
        assert store.selected_segment_id == "s1"
        assert [p.id for p in store.polylines] == ["p1"]
        assert store.polylines.active_id == "p1"
        assert [p.id for p in detail] == ["w1"]

    def test_bundle_is_copied(self, stores):
        store, detail = stores
        seg = Segment(id="s")
        line = Polyline(id="p")
        bundle = parse_bundle(_document())
        bundle.segments = [seg]
        bundle.polylines = [line]
        apply_bundle(bundle, store, detail)
        seg.title = "changed later"
        assert store.get_segment("s").title == ""
