"""Tests for models.py: coercion helpers, id generation and JSON shapes."""
from __future__ import annotations

import math

import pytest

from models import (
    DEFAULT_POLYLINES,
    DEFAULT_SEGMENTS,
    Polyline,
    PolylinePoint,
    Segment,
    clamp_percent,
    default_polylines,
    default_segments,
    is_number,
    new_id,
    to_color,
    to_dash_style,
    to_percent,
    to_stroke_width,
)


# ─────────────────────────────────────────────────────────
# Coercion helpers
# ─────────────────────────────────────────────────────────


class TestClampPercent:
    @pytest.mark.parametrize("value, expected", [
        (-5, 0.0),
        (0, 0),
        (42.5, 42.5),
        (100, 100),
        (250, 100.0),
    ])
    def test_range(self, value, expected):
        assert clamp_percent(value) == expected

    def test_nan_becomes_zero(self):
        assert clamp_percent(float("nan")) == 0.0

    def test_infinities_clamp(self):
        assert clamp_percent(float("inf")) == 100.0
        assert clamp_percent(float("-inf")) == 0.0


class TestToPercent:
    def test_numeric_string(self):
        assert to_percent("12.5") == 12.5

    def test_garbage_becomes_zero(self):
        assert to_percent("abc") == 0.0
        assert to_percent(None) == 0.0
        assert to_percent([1]) == 0.0

    def test_bool_is_not_a_number(self):
        assert to_percent(True) == 0.0

    def test_out_of_range(self):
        assert to_percent(-3) == 0.0
        assert to_percent("140") == 100.0


class TestIsNumber:
    def test_accepts_finite_numbers(self):
        assert is_number(0)
        assert is_number(3.25)

    def test_rejects_others(self):
        assert not is_number(True)
        assert not is_number("5")
        assert not is_number(math.nan)
        assert not is_number(math.inf)
        assert not is_number(None)


class TestKeywordFallbacks:
    def test_color(self):
        assert to_color("amber") == "amber"
        assert to_color("magenta") == "cyan"
        assert to_color(None) == "cyan"

    def test_dash_style(self):
        assert to_dash_style("dotted") == "dotted"
        assert to_dash_style("wavy") == "solid"

    def test_stroke_width(self):
        assert to_stroke_width(1.5) == 1.5
        assert to_stroke_width(0) == 0.7
        assert to_stroke_width(-2, fallback=0.3) == 0.3
        assert to_stroke_width("nan") == 0.7
        assert to_stroke_width(False) == 0.7


# ─────────────────────────────────────────────────────────
# Id generation
# ─────────────────────────────────────────────────────────


class TestNewId:
    def test_prefix(self):
        assert new_id("seg").startswith("seg-")

    def test_unique_among_existing(self):
        first = new_id("poly")
        second = new_id("poly", [first])
        assert second != first
        third = new_id("poly", [first, second])
        assert third not in (first, second)


# ─────────────────────────────────────────────────────────
# Models
# ─────────────────────────────────────────────────────────


class TestPolyline:
    def test_to_dict_uses_camel_case(self):
        p = Polyline(id="p1", stroke_width=1.2, dash_style="dashed",
                     points=[PolylinePoint(1, 2)])
        d = p.to_dict()
        assert d["strokeWidth"] == 1.2
        assert d["dashStyle"] == "dashed"
        assert d["points"] == [{"x": 1, "y": 2}]
        assert "stroke_width" not in d

    def test_copy_is_deep_for_points(self):
        p = Polyline(id="p1", points=[PolylinePoint(1, 2)])
        c = p.copy()
        c.points.append(PolylinePoint(3, 4))
        c.points[0].x = 50
        assert p.points == [PolylinePoint(1, 2)]

    def test_has_stroke(self):
        assert not Polyline(id="a", points=[PolylinePoint(1, 1)]).has_stroke
        assert Polyline(id="a", points=[PolylinePoint(1, 1), PolylinePoint(2, 2)]).has_stroke


class TestDefaults:
    def test_default_segments_are_copies(self):
        segments = default_segments()
        segments[0].title = "changed"
        assert DEFAULT_SEGMENTS[0].title != "changed"
        assert [s.id for s in segments] == ["tp2", "otk", "seg-mljiz58p"]

    def test_default_polylines(self):
        polylines = default_polylines()
        assert [p.id for p in polylines] == ["wheel-poly-mljuz1y8"]
        polylines[0].points.clear()
        assert len(DEFAULT_POLYLINES[0].points) == 3

    def test_explicit_empty_dataset(self):
        assert default_polylines([]) == []

    def test_segment_to_dict_keys(self):
        d = Segment(id="x").to_dict()
        assert set(d) == {"id", "code", "title", "details", "top", "left", "width", "height", "color"}
