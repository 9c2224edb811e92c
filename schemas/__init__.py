"""
schemas/__init__.py

JSON Schema definitions and validation for segment and polyline collections.

Untrusted JSON (pasted import text, persisted snapshots, project bundles)
passes through here before it reaches the store. The schema only pins the
minimal record shape: an array of objects, each with a non-empty string
``id``. Every other field is coerced on its own (numbers clamped, enums
defaulted, strings defaulted). A single bad record rejects the whole
collection; partially valid arrays are never applied.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft202012Validator

from models import (
    Polyline,
    PolylinePoint,
    Segment,
    clamp_percent,
    is_number,
    to_color,
    to_dash_style,
    to_stroke_width,
)
from utils import strip_markdown_fences

log = logging.getLogger(__name__)

# Schema file paths
SCHEMA_DIR = os.path.dirname(os.path.abspath(__file__))
SEGMENTS_SCHEMA_PATH = os.path.join(SCHEMA_DIR, "segments_schema.json")
POLYLINES_SCHEMA_PATH = os.path.join(SCHEMA_DIR, "polylines_schema.json")

# Cached schemas
_segments_schema: Optional[Dict] = None
_polylines_schema: Optional[Dict] = None


def get_segments_schema() -> Dict:
    """Load and return the segment collection schema."""
    global _segments_schema
    if _segments_schema is None:
        with open(SEGMENTS_SCHEMA_PATH, "r", encoding="utf-8") as f:
            _segments_schema = json.load(f)
    return _segments_schema


def get_polylines_schema() -> Dict:
    """Load and return the polyline collection schema."""
    global _polylines_schema
    if _polylines_schema is None:
        with open(POLYLINES_SCHEMA_PATH, "r", encoding="utf-8") as f:
            _polylines_schema = json.load(f)
    return _polylines_schema


def check_collection_shape(raw: Any, schema: Dict) -> Tuple[bool, List[str]]:
    """Check *raw* against a collection schema.

    Args:
        raw: Decoded JSON value.
        schema: One of the collection schemas.

    Returns:
        Tuple of (is_valid, list_of_error_messages).
    """
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(raw), key=lambda e: list(e.absolute_path))
    if not errors:
        return True, []

    error_messages = []
    for error in errors:
        path = " -> ".join(str(p) for p in error.absolute_path) if error.absolute_path else "root"
        error_messages.append(f"{path}: {error.message}")
    return False, error_messages


def record_defaults(schema: Dict) -> Dict[str, Any]:
    """Collect ``{field: default}`` from the record definition of *schema*."""
    defs = schema.get("$defs", {})
    ref = schema.get("items", {}).get("$ref", "")
    record = defs.get(ref.rsplit("/", 1)[-1], {})
    return {
        name: prop["default"]
        for name, prop in record.get("properties", {}).items()
        if "default" in prop
    }


# -------------------------------------------------------------------------
# Field coercion
# -------------------------------------------------------------------------

def _text(value: Any, fallback: str) -> str:
    return value if isinstance(value, str) else fallback


def _percent(value: Any, fallback: float) -> float:
    return clamp_percent(value) if is_number(value) else fallback


def coerce_segment(obj: Dict[str, Any], defaults: Dict[str, Any]) -> Segment:
    """Build a Segment from a shape-checked record, defaulting bad fields."""
    return Segment(
        id=obj["id"],
        code=_text(obj.get("code"), defaults["code"]),
        title=_text(obj.get("title"), defaults["title"]),
        details=_text(obj.get("details"), defaults["details"]),
        top=_percent(obj.get("top"), defaults["top"]),
        left=_percent(obj.get("left"), defaults["left"]),
        width=_percent(obj.get("width"), defaults["width"]),
        height=_percent(obj.get("height"), defaults["height"]),
        color=to_color(obj.get("color")),
    )


def coerce_points(value: Any) -> List[PolylinePoint]:
    """Coerce a raw ``points`` value.

    Non-list values give an empty list; entries that are not objects are
    dropped; missing or non-numeric coordinates become 0.
    """
    if not isinstance(value, list):
        return []
    points = []
    for item in value:
        if not isinstance(item, dict):
            continue
        points.append(PolylinePoint(
            x=_percent(item.get("x"), 0.0),
            y=_percent(item.get("y"), 0.0),
        ))
    return points


def coerce_polyline(obj: Dict[str, Any], defaults: Dict[str, Any]) -> Polyline:
    """Build a Polyline from a shape-checked record, defaulting bad fields."""
    return Polyline(
        id=obj["id"],
        label=_text(obj.get("label"), defaults["label"]),
        description=_text(obj.get("description"), defaults["description"]),
        color=to_color(obj.get("color")),
        stroke_width=to_stroke_width(obj.get("strokeWidth"), defaults["strokeWidth"]),
        dash_style=to_dash_style(obj.get("dashStyle")),
        points=coerce_points(obj.get("points")),
    )


# -------------------------------------------------------------------------
# Collection validation
# -------------------------------------------------------------------------

def validate_segments(raw: Any) -> Optional[List[Segment]]:
    """Validate an untrusted segment collection.

    Returns:
        The coerced segments, or ``None`` if the value is not an array or
        any element lacks a non-empty string ``id``.
    """
    schema = get_segments_schema()
    ok, errors = check_collection_shape(raw, schema)
    if not ok:
        log.info("Rejected segment collection: %s", "; ".join(errors))
        return None
    defaults = record_defaults(schema)
    return [coerce_segment(obj, defaults) for obj in raw]


def validate_polylines(raw: Any) -> Optional[List[Polyline]]:
    """Validate an untrusted polyline collection.

    Returns:
        The coerced polylines, or ``None`` if the value is not an array or
        any element lacks a non-empty string ``id``.
    """
    schema = get_polylines_schema()
    ok, errors = check_collection_shape(raw, schema)
    if not ok:
        log.info("Rejected polyline collection: %s", "; ".join(errors))
        return None
    defaults = record_defaults(schema)
    return [coerce_polyline(obj, defaults) for obj in raw]


# -------------------------------------------------------------------------
# Paste import
# -------------------------------------------------------------------------

class ImportRejected(ValueError):
    """Pasted import text was not applied. ``str(exc)`` is user-facing."""


MSG_EMPTY_INPUT = "Paste JSON before importing."
MSG_BAD_JSON = "Could not parse JSON. Check the format."
MSG_BAD_SHAPE = "Invalid data format or empty segment list."


def parse_import_text(text: str) -> List[Segment]:
    """Parse and validate pasted segment JSON.

    Markdown code fences around the JSON are tolerated.

    Raises:
        ImportRejected: With a user-facing message when the text is empty,
            is not valid JSON, fails validation, or holds no segments.
    """
    body = strip_markdown_fences(text)
    if not body:
        raise ImportRejected(MSG_EMPTY_INPUT)
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        raise ImportRejected(MSG_BAD_JSON) from e
    segments = validate_segments(parsed)
    if not segments:
        raise ImportRejected(MSG_BAD_SHAPE)
    return segments
