"""
models.py

Data models and constants for the Blueprint Annotator.

All geometry is stored in percent of the blueprint's intrinsic size, so
values survive zooming and window resizes unchanged.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional


# ----------------------------
# Enumerated attribute values
# ----------------------------

class Color:
    """Colour keywords shared by segments and polylines."""
    CYAN = "cyan"
    EMERALD = "emerald"
    AMBER = "amber"


COLORS = (Color.CYAN, Color.EMERALD, Color.AMBER)
FALLBACK_COLOR = Color.CYAN


class DashStyle:
    """Stroke dash styles for polylines."""
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


DASH_STYLES = (DashStyle.SOLID, DashStyle.DASHED, DashStyle.DOTTED)
FALLBACK_DASH_STYLE = DashStyle.SOLID

DEFAULT_STROKE_WIDTH = 0.7
FALLBACK_SEGMENT_CODE = "SEG"


class Mode:
    """Interaction mode constants."""
    VIEW = "view"
    EDIT = "edit"


# ----------------------------
# Coercion helpers
# ----------------------------

def clamp_percent(value: float) -> float:
    """Clamp a value into the 0-100 annotation range. NaN becomes 0."""
    if math.isnan(value):
        return 0.0
    if value < 0:
        return 0.0
    if value > 100:
        return 100.0
    return value


def is_number(value: Any) -> bool:
    """True for finite int/float values (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def to_percent(value: Any) -> float:
    """Coerce a form/patch value into the 0-100 range.

    Anything that does not parse as a number is treated like NaN and
    becomes 0.
    """
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return clamp_percent(number)


def to_color(value: Any) -> str:
    """Return *value* if it is a known colour keyword, else the fallback."""
    if isinstance(value, str) and value in COLORS:
        return value
    return FALLBACK_COLOR


def to_dash_style(value: Any) -> str:
    """Return *value* if it is a known dash style, else ``solid``."""
    if isinstance(value, str) and value in DASH_STYLES:
        return value
    return FALLBACK_DASH_STYLE


def to_stroke_width(value: Any, fallback: float = DEFAULT_STROKE_WIDTH) -> float:
    """Return a positive finite stroke width, else *fallback*."""
    if isinstance(value, bool):
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number) or number <= 0:
        return fallback
    return number


def new_id(prefix: str, existing: Iterable[str] = ()) -> str:
    """Generate ``<prefix>-<base36 milliseconds>``, unique among *existing*."""
    millis = int(time.time() * 1000)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    stamp = ""
    while millis:
        millis, rem = divmod(millis, 36)
        stamp = digits[rem] + stamp
    candidate = f"{prefix}-{stamp or '0'}"
    taken = set(existing)
    suffix = 1
    unique = candidate
    while unique in taken:
        suffix += 1
        unique = f"{candidate}-{suffix}"
    return unique


# ----------------------------
# Annotation models
# ----------------------------

@dataclass
class Segment:
    """A labelled rectangular hotspot over the blueprint.

    ``top``/``left`` anchor the top-left corner; each of the four geometry
    fields is clamped to 0-100 on its own, so a box may overhang the
    right or bottom edge.
    """
    id: str
    code: str = FALLBACK_SEGMENT_CODE
    title: str = ""
    details: str = ""
    top: float = 0.0
    left: float = 0.0
    width: float = 10.0
    height: float = 8.0
    color: str = FALLBACK_COLOR

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape used by snapshots and exports."""
        return {
            "id": self.id,
            "code": self.code,
            "title": self.title,
            "details": self.details,
            "top": self.top,
            "left": self.left,
            "width": self.width,
            "height": self.height,
            "color": self.color,
        }

    def copy(self) -> "Segment":
        return replace(self)


@dataclass
class PolylinePoint:
    """A polyline vertex in percent coordinates."""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass
class Polyline:
    """An ordered, user-drawn guide line.

    Point order defines the line topology. Fewer than two points is a
    valid polyline that renders only its vertices.
    """
    id: str
    label: str = ""
    description: str = ""
    color: str = FALLBACK_COLOR
    stroke_width: float = DEFAULT_STROKE_WIDTH
    dash_style: str = FALLBACK_DASH_STYLE
    points: List[PolylinePoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape used by snapshots and exports.

        Keys are camelCase (``strokeWidth``, ``dashStyle``) to match the
        snapshot and API format.
        """
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "color": self.color,
            "strokeWidth": self.stroke_width,
            "dashStyle": self.dash_style,
            "points": [p.to_dict() for p in self.points],
        }

    def copy(self) -> "Polyline":
        return replace(self, points=[replace(p) for p in self.points])

    @property
    def has_stroke(self) -> bool:
        """Whether the polyline has enough points to draw a line."""
        return len(self.points) >= 2


def segments_to_json(segments: Iterable[Segment]) -> List[Dict[str, Any]]:
    return [s.to_dict() for s in segments]


def polylines_to_json(polylines: Iterable[Polyline]) -> List[Dict[str, Any]]:
    return [p.to_dict() for p in polylines]


# ----------------------------
# Named default datasets
# ----------------------------

DEFAULT_SEGMENTS: List[Segment] = [
    Segment(
        id="tp2",
        code="TP-2",
        title="Section TP-2",
        details="Highlight next to the TP-2 label in the upper right part of the drawing.",
        top=13.744785262817327,
        left=86.56305506441433,
        width=10,
        height=7,
        color=Color.CYAN,
    ),
    Segment(
        id="otk",
        code="OTK",
        title="Quality control reception (OTK)",
        details="Quality control reception area on the plan.",
        top=51.423155845950475,
        left=24.31348894489884,
        width=4,
        height=8,
        color=Color.EMERALD,
    ),
    Segment(
        id="seg-mljiz58p",
        code="WS",
        title="Wheel shop",
        details="",
        top=41.13431810215078,
        left=75.61856116451851,
        width=15,
        height=8,
        color=Color.AMBER,
    ),
]

DEFAULT_POLYLINES: List[Polyline] = [
    Polyline(
        id="wheel-poly-mljuz1y8",
        label="Line 1",
        description="",
        color=Color.CYAN,
        stroke_width=0.3,
        dash_style=DashStyle.DASHED,
        points=[
            PolylinePoint(15.412186622619629, 88.62004089355469),
            PolylinePoint(16.129032135009766, 84.09867095947266),
            PolylinePoint(15.770608901977539, 18.53879737854004),
        ],
    ),
]

DEFAULT_DETAIL_POLYLINES: List[Polyline] = []


def default_segments() -> List[Segment]:
    """Fresh copies of the default segment dataset."""
    return [s.copy() for s in DEFAULT_SEGMENTS]


def default_polylines(dataset: Optional[List[Polyline]] = None) -> List[Polyline]:
    """Fresh copies of a default polyline dataset (the primary one by default)."""
    source = DEFAULT_POLYLINES if dataset is None else dataset
    return [p.copy() for p in source]
