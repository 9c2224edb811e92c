"""
engine/drawing.py

Click-by-click polyline authoring.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from models import PolylinePoint
from engine.store import PolylineStore, StoreEvent

log = logging.getLogger(__name__)


class DrawingState(Enum):
    IDLE = "idle"
    DRAWING = "drawing"


class PolylineDrawingSession:
    """Accumulates points for one polyline across discrete clicks.

    While drawing, the session targets exactly one polyline in *store*.
    A preview point follows the pointer for rendering only; it is never
    appended to the polyline.

    The session watches the store: if its target polyline is deleted or the
    collection is cleared, it drops back to idle on its own.
    """

    def __init__(self, store: PolylineStore):
        self.store = store
        self._target_id: Optional[str] = None
        self._preview: Optional[PolylinePoint] = None
        store.subscribe(self._on_store_event)

    @property
    def state(self) -> DrawingState:
        return DrawingState.DRAWING if self._target_id is not None else DrawingState.IDLE

    @property
    def is_drawing(self) -> bool:
        return self._target_id is not None

    @property
    def target_id(self) -> Optional[str]:
        return self._target_id

    @property
    def preview(self) -> Optional[PolylinePoint]:
        return self._preview

    def start(self, edit_mode: bool) -> Optional[str]:
        """Create an empty polyline, make it active and start drawing it.

        Returns the new polyline id, or ``None`` when not in edit mode or a
        drawing is already in progress.
        """
        if not edit_mode or self.is_drawing:
            return None
        polyline = self.store.create()
        self._target_id = polyline.id
        self._preview = None
        log.debug("Drawing started on %s", polyline.id)
        return polyline.id

    def add_point(self, point: Optional[PolylinePoint]) -> bool:
        """Append *point* to the target polyline. ``None`` (unmeasured
        surface) and clicks while idle are ignored."""
        if point is None or not self.is_drawing:
            return False
        return self.store.append_point(self._target_id, point) is not None

    def set_preview(self, point: Optional[PolylinePoint]) -> None:
        """Track the pointer; ``None`` hides the preview."""
        if not self.is_drawing:
            point = None
        self._preview = point

    def clear_preview(self) -> None:
        self._preview = None

    def finish(self) -> Optional[str]:
        """Stop drawing, keeping every committed point. Returns the id of
        the polyline that was being drawn."""
        finished = self._target_id
        if finished is not None:
            log.debug("Drawing finished on %s", finished)
        self._target_id = None
        self._preview = None
        return finished

    def force_idle(self) -> None:
        """Leave the drawing state, e.g. when edit mode is switched off."""
        self.finish()

    def _on_store_event(self, event: StoreEvent) -> None:
        if event is not StoreEvent.POLYLINES_CHANGED or self._target_id is None:
            return
        if self.store.get(self._target_id) is None:
            log.debug("Drawing target %s removed; session idle", self._target_id)
            self._target_id = None
            self._preview = None
