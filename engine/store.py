"""
engine/store.py

Authoritative in-memory annotation state.

All mutations of segments and polylines go through :class:`AnnotationStore`
(and the :class:`PolylineStore` it owns). Every mutation is applied
synchronously, followed immediately by a full-snapshot write of the touched
collection, and then announced to subscribers. Active/selected references
are re-derived inside the same call that removes entities, so subscribers
never observe a reference to something that no longer exists.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from models import (
    Polyline,
    PolylinePoint,
    Segment,
    clamp_percent,
    default_polylines,
    default_segments,
    new_id,
    polylines_to_json,
    segments_to_json,
    to_color,
    to_dash_style,
    to_percent,
    to_stroke_width,
)
from schemas import validate_polylines, validate_segments
from settings import PolylineDefaults, SegmentDefaults

log = logging.getLogger(__name__)


class StoreEvent(Enum):
    """Kinds of change announced to store subscribers."""

    SEGMENTS_CHANGED = "segments_changed"
    SEGMENT_SELECTED = "segment_selected"
    SEGMENT_HOVERED = "segment_hovered"
    POLYLINES_CHANGED = "polylines_changed"
    POLYLINE_SELECTED = "polyline_selected"


Listener = Callable[[StoreEvent], None]

SEGMENT_TEXT_FIELDS = ("code", "title", "details")
SEGMENT_GEOMETRY_FIELDS = ("top", "left", "width", "height")
SEGMENT_FIELDS = SEGMENT_TEXT_FIELDS + SEGMENT_GEOMETRY_FIELDS + ("color",)

POLYLINE_FIELDS = ("label", "description", "color", "stroke_width", "dash_style")
# JSON spelling accepted in patches coming from snapshots / the API
POLYLINE_FIELD_ALIASES = {"strokeWidth": "stroke_width", "dashStyle": "dash_style"}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class _Observable:
    """Minimal synchronous pub/sub used by both stores."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, callback: Listener) -> None:
        """Call *callback* with a StoreEvent after every completed change."""
        self._listeners.append(callback)

    def unsubscribe(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit(self, event: StoreEvent) -> None:
        for callback in list(self._listeners):
            try:
                callback(event)
            except Exception:
                # The mutation is already applied; one broken view must not
                # stop the others from refreshing.
                log.exception("Store listener failed on %s", event.value)


# =============================================================================
# Polylines
# =============================================================================

class PolylineStore(_Observable):
    """Owns one polyline collection and its active-polyline reference.

    Args:
        slot: Persistence port (``load()``/``save(snapshot)``), or ``None``
            for an unpersisted collection.
        defaults: Named default dataset used when the snapshot is absent,
            malformed or fails validation.
        polyline_defaults: Attributes for newly started polylines.
        id_prefix: Prefix for generated polyline ids.
    """

    def __init__(
        self,
        slot=None,
        defaults: Optional[Sequence[Polyline]] = None,
        polyline_defaults: Optional[PolylineDefaults] = None,
        id_prefix: str = "poly",
    ):
        super().__init__()
        self._slot = slot
        self._defaults = default_polylines(list(defaults) if defaults is not None else None)
        self._new = polyline_defaults or PolylineDefaults()
        self._id_prefix = id_prefix
        self._polylines: List[Polyline] = self._load()
        self._active_id: Optional[str] = None

    def _load(self) -> List[Polyline]:
        if self._slot is None:
            return [p.copy() for p in self._defaults]
        raw = self._slot.load()
        if raw is None:
            return [p.copy() for p in self._defaults]
        polylines = validate_polylines(raw)
        if polylines is None:
            log.warning("Stored polylines under %r failed validation; using defaults", self._slot.key)
            return [p.copy() for p in self._defaults]
        return polylines

    # ---- read access ----

    @property
    def polylines(self) -> Tuple[Polyline, ...]:
        return tuple(self._polylines)

    def __len__(self) -> int:
        return len(self._polylines)

    def __iter__(self):
        return iter(tuple(self._polylines))

    def get(self, polyline_id: Optional[str]) -> Optional[Polyline]:
        for p in self._polylines:
            if p.id == polyline_id:
                return p
        return None

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active(self) -> Optional[Polyline]:
        return self.get(self._active_id)

    def snapshot(self) -> List[Dict[str, Any]]:
        return polylines_to_json(self._polylines)

    # ---- mutations ----

    def create(self, label: Optional[str] = None) -> Polyline:
        """Append an empty polyline and make it active."""
        polyline = Polyline(
            id=new_id(self._id_prefix, (p.id for p in self._polylines)),
            label=label if label is not None else f"Line {len(self._polylines) + 1}",
            description="",
            color=to_color(self._new.color),
            stroke_width=to_stroke_width(self._new.stroke_width),
            dash_style=to_dash_style(self._new.dash_style),
            points=[],
        )
        self._polylines.append(polyline)
        self._active_id = polyline.id
        log.debug("Created polyline %s", polyline.id)
        self._commit()
        self._emit(StoreEvent.POLYLINE_SELECTED)
        return polyline

    def append_point(self, polyline_id: str, point: PolylinePoint) -> Optional[Polyline]:
        """Append one clamped point to the end of a polyline."""
        polyline = self.get(polyline_id)
        if polyline is None:
            return None
        polyline.points.append(PolylinePoint(clamp_percent(point.x), clamp_percent(point.y)))
        self._commit()
        return polyline

    def update(self, polyline_id: str, patch: Mapping[str, Any]) -> Optional[Polyline]:
        """Merge attribute changes into a polyline.

        Invalid colour / dash style values fall back to ``cyan`` / ``solid``;
        a non-positive stroke width falls back to the configured default.

        Raises:
            ValueError: If *patch* names ``id``, ``points`` or an unknown field.
        """
        polyline = self.get(polyline_id)
        if polyline is None:
            return None
        changes = []
        for key, value in patch.items():
            name = POLYLINE_FIELD_ALIASES.get(key, key)
            if name == "id":
                raise ValueError("Polyline id is immutable")
            if name == "points":
                raise ValueError("Polyline points are append-only; use append_point()")
            if name not in POLYLINE_FIELDS:
                raise ValueError(f"Unknown polyline field {key!r}")
            changes.append((name, value))
        for name, value in changes:
            if name == "color":
                polyline.color = to_color(value)
            elif name == "dash_style":
                polyline.dash_style = to_dash_style(value)
            elif name == "stroke_width":
                polyline.stroke_width = to_stroke_width(value, self._new.stroke_width)
            else:
                setattr(polyline, name, _text(value))
        self._commit()
        return polyline

    def delete(self, polyline_id: str) -> bool:
        """Remove a polyline. An active reference to it falls back to the
        first remaining polyline (or ``None``)."""
        before = len(self._polylines)
        self._polylines = [p for p in self._polylines if p.id != polyline_id]
        if len(self._polylines) == before:
            return False
        reselect = self._active_id == polyline_id
        if reselect:
            self._active_id = self._polylines[0].id if self._polylines else None
        log.debug("Deleted polyline %s (active now %s)", polyline_id, self._active_id)
        self._commit()
        if reselect:
            self._emit(StoreEvent.POLYLINE_SELECTED)
        return True

    def clear(self) -> None:
        """Remove every polyline and drop the active reference."""
        self._polylines = []
        self._active_id = None
        self._commit()
        self._emit(StoreEvent.POLYLINE_SELECTED)

    def select(self, polyline_id: Optional[str]) -> bool:
        """Make an existing polyline active (``None`` clears)."""
        if polyline_id is not None and self.get(polyline_id) is None:
            return False
        if polyline_id != self._active_id:
            self._active_id = polyline_id
            self._emit(StoreEvent.POLYLINE_SELECTED)
        return True

    def replace_all(self, polylines: Sequence[Polyline]) -> None:
        """Replace the whole collection with already-validated polylines."""
        self._polylines = [p.copy() for p in polylines]
        self._active_id = self._polylines[0].id if self._polylines else None
        self._commit()
        self._emit(StoreEvent.POLYLINE_SELECTED)

    def reset_to_defaults(self) -> None:
        self.replace_all(self._defaults)

    def save(self) -> bool:
        """Write the current snapshot now."""
        if self._slot is None:
            return False
        return self._slot.save(self.snapshot())

    def _commit(self) -> None:
        self.save()
        self._emit(StoreEvent.POLYLINES_CHANGED)


# =============================================================================
# Segments + primary polylines
# =============================================================================

class AnnotationStore(_Observable):
    """The authoritative segment collection plus the primary polyline store.

    Polyline events are re-emitted by this store, so one subscription
    covers both collections.

    Args:
        segments_slot: Persistence port for the segment collection.
        polylines_slot: Persistence port for the primary polyline collection.
        segment_defaults: Attributes for newly added segments.
        polyline_defaults: Attributes for newly started polylines.
        default_segment_set: Named default segments (fallback and reset).
        default_polyline_set: Named default polylines.
    """

    def __init__(
        self,
        segments_slot=None,
        polylines_slot=None,
        segment_defaults: Optional[SegmentDefaults] = None,
        polyline_defaults: Optional[PolylineDefaults] = None,
        default_segment_set: Optional[Sequence[Segment]] = None,
        default_polyline_set: Optional[Sequence[Polyline]] = None,
    ):
        super().__init__()
        self._slot = segments_slot
        self._new = segment_defaults or SegmentDefaults()
        if default_segment_set is None:
            self._default_segments = default_segments()
        else:
            self._default_segments = [s.copy() for s in default_segment_set]
        self._segments: List[Segment] = self._load()
        self._selected_id: Optional[str] = self._segments[0].id if self._segments else None
        self._hovered_id: Optional[str] = None

        self.polylines = PolylineStore(polylines_slot, default_polyline_set, polyline_defaults)
        self.polylines.subscribe(self._emit)

    def _load(self) -> List[Segment]:
        if self._slot is None:
            return [s.copy() for s in self._default_segments]
        raw = self._slot.load()
        if raw is None:
            return [s.copy() for s in self._default_segments]
        segments = validate_segments(raw)
        if segments is None:
            log.warning("Stored segments under %r failed validation; using defaults", self._slot.key)
            return [s.copy() for s in self._default_segments]
        return segments

    # ---- read access ----

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return tuple(self._segments)

    def get_segment(self, segment_id: Optional[str]) -> Optional[Segment]:
        for s in self._segments:
            if s.id == segment_id:
                return s
        return None

    @property
    def selected_segment_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_segment(self) -> Optional[Segment]:
        return self.get_segment(self._selected_id)

    @property
    def hovered_segment_id(self) -> Optional[str]:
        return self._hovered_id

    def segments_snapshot(self) -> List[Dict[str, Any]]:
        return segments_to_json(self._segments)

    # ---- segment mutations ----

    def add_segment(self, **fields: Any) -> Segment:
        """Append a segment with the configured default geometry and select it.

        Keyword arguments override individual fields (same coercion as
        :meth:`update_segment`).
        """
        new = self._new
        segment = Segment(
            id=new_id("seg", (s.id for s in self._segments)),
            code=f"{new.fallback_code}-{len(self._segments) + 1}",
            title="",
            details="",
            top=clamp_percent(new.top),
            left=clamp_percent(new.left),
            width=clamp_percent(new.width),
            height=clamp_percent(new.height),
            color=to_color(new.color),
        )
        self._apply_segment_patch(segment, fields)
        self._segments.append(segment)
        self._selected_id = segment.id
        log.debug("Added segment %s", segment.id)
        self._commit()
        self._emit(StoreEvent.SEGMENT_SELECTED)
        return segment

    def update_segment(self, segment_id: str, patch: Mapping[str, Any]) -> Optional[Segment]:
        """Merge field changes into a segment.

        Geometry fields are clamped to 0-100 individually (NaN and
        non-numeric values become 0); an unknown colour becomes ``cyan``.

        Raises:
            ValueError: If *patch* names ``id`` or an unknown field.
        """
        segment = self.get_segment(segment_id)
        if segment is None:
            return None
        self._apply_segment_patch(segment, patch)
        self._commit()
        return segment

    def move_segment(self, segment_id: str, top: float, left: float) -> Optional[Segment]:
        """Reposition a segment's anchor and make it the selected segment."""
        segment = self.update_segment(segment_id, {"top": top, "left": left})
        if segment is not None and self._selected_id != segment_id:
            self._selected_id = segment_id
            self._emit(StoreEvent.SEGMENT_SELECTED)
        return segment

    def delete_segment(self, segment_id: str) -> bool:
        """Remove a segment, re-deriving the selected and hovered references."""
        before = len(self._segments)
        self._segments = [s for s in self._segments if s.id != segment_id]
        if len(self._segments) == before:
            return False
        reselect = self._selected_id == segment_id
        if reselect:
            self._selected_id = self._segments[0].id if self._segments else None
        if self._hovered_id == segment_id:
            self._hovered_id = None
        log.debug("Deleted segment %s (selected now %s)", segment_id, self._selected_id)
        self._commit()
        if reselect:
            self._emit(StoreEvent.SEGMENT_SELECTED)
        return True

    def select_segment(self, segment_id: Optional[str]) -> bool:
        if segment_id is not None and self.get_segment(segment_id) is None:
            return False
        if segment_id != self._selected_id:
            self._selected_id = segment_id
            self._emit(StoreEvent.SEGMENT_SELECTED)
        return True

    def hover_segment(self, segment_id: Optional[str]) -> None:
        if segment_id is not None and self.get_segment(segment_id) is None:
            segment_id = None
        if segment_id != self._hovered_id:
            self._hovered_id = segment_id
            self._emit(StoreEvent.SEGMENT_HOVERED)

    def import_segments(self, segments: Sequence[Segment]) -> None:
        """Replace the whole segment collection with validated segments."""
        self._replace_segments(segments)

    def reset_to_defaults(self) -> None:
        """Restore the named default segments."""
        self._replace_segments(self._default_segments)

    def _replace_segments(self, segments: Sequence[Segment]) -> None:
        self._segments = [s.copy() for s in segments]
        self._selected_id = self._segments[0].id if self._segments else None
        self._hovered_id = None
        self._commit()
        self._emit(StoreEvent.SEGMENT_SELECTED)
        self._emit(StoreEvent.SEGMENT_HOVERED)

    def _apply_segment_patch(self, segment: Segment, patch: Mapping[str, Any]) -> None:
        # Reject the whole patch before touching the segment
        for key in patch:
            if key == "id":
                raise ValueError("Segment id is immutable")
            if key not in SEGMENT_FIELDS:
                raise ValueError(f"Unknown segment field {key!r}")
        for key, value in patch.items():
            if key in SEGMENT_GEOMETRY_FIELDS:
                setattr(segment, key, to_percent(value))
            elif key == "color":
                segment.color = to_color(value)
            else:
                setattr(segment, key, _text(value))

    def save(self) -> bool:
        if self._slot is None:
            return False
        return self._slot.save(self.segments_snapshot())

    def _commit(self) -> None:
        self.save()
        self._emit(StoreEvent.SEGMENTS_CHANGED)

    # ---- whole-store views ----

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Both collections in their JSON shapes."""
        return {
            "segments": self.segments_snapshot(),
            "polylines": self.polylines.snapshot(),
        }
