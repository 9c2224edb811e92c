"""Tests for schemas/: collection validation and paste import.

Validation is all-or-nothing on shape (an array whose every element has a
non-empty string id) and lenient on fields (bad values get defaults).
"""
from __future__ import annotations

import json

import pytest

from models import Polyline, PolylinePoint, Segment, default_segments, segments_to_json
from schemas import (
    MSG_BAD_JSON,
    MSG_BAD_SHAPE,
    MSG_EMPTY_INPUT,
    ImportRejected,
    check_collection_shape,
    coerce_points,
    get_segments_schema,
    parse_import_text,
    record_defaults,
    validate_polylines,
    validate_segments,
)


# ─────────────────────────────────────────────────────────
# Shape checks
# ─────────────────────────────────────────────────────────


class TestCollectionShape:
    @pytest.mark.parametrize("raw", [
        None,
        {},
        "segments",
        42,
        {"id": "a"},
    ])
    def test_non_array_rejected(self, raw):
        assert validate_segments(raw) is None
        assert validate_polylines(raw) is None

    @pytest.mark.parametrize("bad", [
        {"code": "no id"},
        {"id": ""},
        {"id": "   "},
        {"id": 7},
        {"id": None},
        "tp2",
        None,
    ])
    def test_one_bad_element_rejects_everything(self, bad):
        raw = [{"id": "good", "code": "G"}, bad]
        assert validate_segments(raw) is None
        assert validate_polylines(raw) is None

    def test_empty_array_is_valid(self):
        assert validate_segments([]) == []
        assert validate_polylines([]) == []

    def test_error_messages_name_the_path(self):
        ok, errors = check_collection_shape([{"id": "a"}, {}], get_segments_schema())
        assert not ok
        assert any(msg.startswith("1") for msg in errors)

    def test_record_defaults(self):
        defaults = record_defaults(get_segments_schema())
        assert defaults["code"] == "SEG"
        assert defaults["width"] == 10
        assert defaults["height"] == 8
        assert defaults["color"] == "cyan"


# ─────────────────────────────────────────────────────────
# Field coercion
# ─────────────────────────────────────────────────────────


class TestSegmentCoercion:
    def test_bad_fields_get_defaults(self):
        [seg] = validate_segments([{
            "id": "s1",
            "code": 12,
            "title": None,
            "top": "40",
            "left": True,
            "width": -20,
            "height": 180,
            "color": "purple",
        }])
        assert seg == Segment(
            id="s1", code="SEG", title="", details="",
            top=0, left=0, width=0.0, height=100.0, color="cyan",
        )

    def test_nan_and_infinity_default(self):
        [seg] = validate_segments(json.loads('[{"id": "s", "top": NaN, "left": Infinity}]'))
        assert seg.top == 0
        assert seg.left == 0

    def test_valid_record_passes_through(self):
        raw = {"id": "s", "code": "A", "title": "T", "details": "D",
               "top": 1.5, "left": 2.5, "width": 3, "height": 4, "color": "emerald"}
        [seg] = validate_segments([raw])
        assert seg.to_dict() == raw

    def test_round_trip_of_defaults(self):
        segments = default_segments()
        assert validate_segments(json.loads(json.dumps(segments_to_json(segments)))) == segments


class TestPolylineCoercion:
    def test_bad_fields_get_defaults(self):
        [line] = validate_polylines([{
            "id": "p",
            "label": 3,
            "color": "red",
            "strokeWidth": 0,
            "dashStyle": "zigzag",
            "points": "nope",
        }])
        assert line == Polyline(id="p", label="Line", description="", color="cyan",
                                stroke_width=0.7, dash_style="solid", points=[])

    def test_points(self):
        points = coerce_points([{"x": 10, "y": 20}, "junk", {"x": "a"}, {"x": 150, "y": -4}])
        assert points == [PolylinePoint(10, 20), PolylinePoint(0.0, 0.0), PolylinePoint(100.0, 0.0)]

    def test_order_is_preserved(self):
        raw = [{"id": "p", "points": [{"x": 3, "y": 3}, {"x": 1, "y": 1}, {"x": 2, "y": 2}]}]
        [line] = validate_polylines(raw)
        assert [p.x for p in line.points] == [3, 1, 2]


# ─────────────────────────────────────────────────────────
# Paste import
# ─────────────────────────────────────────────────────────


class TestParseImportText:
    def test_plain_json(self):
        segments = parse_import_text('[{"id": "a", "code": "A"}]')
        assert [s.code for s in segments] == ["A"]

    def test_markdown_fences(self):
        text = '```json\n[{"id": "a"}, {"id": "b"}]\n```'
        assert [s.id for s in parse_import_text(text)] == ["a", "b"]

    @pytest.mark.parametrize("text", ["", "   \n  "])
    def test_empty_input(self, text):
        with pytest.raises(ImportRejected, match=MSG_EMPTY_INPUT):
            parse_import_text(text)

    def test_bad_json(self):
        with pytest.raises(ImportRejected) as exc:
            parse_import_text("[{id: a}]")
        assert str(exc.value) == MSG_BAD_JSON

    @pytest.mark.parametrize("text", [
        "[]",
        '{"id": "a"}',
        '[{"id": "a"}, {"code": "no id"}]',
    ])
    def test_bad_shape(self, text):
        with pytest.raises(ImportRejected) as exc:
            parse_import_text(text)
        assert str(exc.value) == MSG_BAD_SHAPE
