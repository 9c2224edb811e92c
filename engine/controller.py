"""
engine/controller.py

Routes pointer, wheel and mode events to the drag and drawing sessions.

The controllers take pointer coordinates in the rendering surface's own
space and let the injected CoordinateMapper translate them, so the same
routing works for any back-end (the Qt view passes viewport pixels).
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from models import Mode, Segment
from schemas import ImportRejected, parse_import_text
from engine.drag import DragSession
from engine.drawing import PolylineDrawingSession
from engine.mapper import CoordinateMapper
from engine.store import AnnotationStore, PolylineStore
from engine.zoom import ZoomController

log = logging.getLogger(__name__)


class PolylineEditor:
    """Edit/view mode plus polyline drawing over one polyline collection.

    Used on its own by the detail view and as the base of
    :class:`AnnotationController` for the main blueprint.
    """

    def __init__(self, polylines: PolylineStore, mapper: CoordinateMapper, edit_mode: bool = False):
        self.polylines = polylines
        self.mapper = mapper
        self.drawing = PolylineDrawingSession(polylines)
        self._edit_mode = edit_mode
        self._mode_listeners: List[Callable[[str], None]] = []
        self._drawing_listeners: List[Callable[[bool], None]] = []

    # ---- mode ----

    @property
    def edit_mode(self) -> bool:
        return self._edit_mode

    @property
    def mode(self) -> str:
        return Mode.EDIT if self._edit_mode else Mode.VIEW

    def on_mode_change(self, callback: Callable[[str], None]) -> None:
        self._mode_listeners.append(callback)

    def set_edit_mode(self, enabled: bool) -> None:
        """Switch modes. Leaving edit mode ends any drawing (points are
        kept); entering it never resumes one."""
        enabled = bool(enabled)
        if enabled == self._edit_mode:
            return
        was_drawing = self.drawing.is_drawing
        self._edit_mode = enabled
        if enabled:
            self._entered_edit_mode()
        else:
            self.drawing.force_idle()
            self._left_edit_mode()
        log.debug("Mode -> %s", self.mode)
        for callback in list(self._mode_listeners):
            callback(self.mode)
        if was_drawing and not self.drawing.is_drawing:
            self._drawing_changed()

    def toggle_edit_mode(self) -> bool:
        self.set_edit_mode(not self._edit_mode)
        return self._edit_mode

    def _entered_edit_mode(self) -> None:
        pass

    def _left_edit_mode(self) -> None:
        pass

    # ---- drawing ----

    def on_drawing_change(self, callback: Callable[[bool], None]) -> None:
        """Register a callback receiving ``is_drawing`` after start or finish."""
        self._drawing_listeners.append(callback)

    def _drawing_changed(self) -> None:
        for callback in list(self._drawing_listeners):
            callback(self.drawing.is_drawing)

    def start_drawing(self) -> Optional[str]:
        polyline_id = self.drawing.start(self._edit_mode)
        if polyline_id is not None:
            self._drawing_changed()
        return polyline_id

    def finish_drawing(self) -> Optional[str]:
        polyline_id = self.drawing.finish()
        if polyline_id is not None:
            self._drawing_changed()
        return polyline_id

    def delete_polyline(self, polyline_id: str) -> bool:
        return self.polylines.delete(polyline_id)

    def clear_polylines(self) -> None:
        self.polylines.clear()

    # ---- surface pointer events ----

    def surface_press(self, pointer_x: float, pointer_y: float) -> bool:
        """Click on the drawing surface. Returns True if a point was added."""
        if not (self._edit_mode and self.drawing.is_drawing):
            return False
        if not self.mapper.contains(pointer_x, pointer_y):
            return False
        return self.drawing.add_point(self.mapper.to_normalized(pointer_x, pointer_y))

    def surface_move(self, pointer_x: float, pointer_y: float) -> None:
        if not (self._edit_mode and self.drawing.is_drawing):
            return
        if self.mapper.contains(pointer_x, pointer_y):
            self.drawing.set_preview(self.mapper.to_normalized(pointer_x, pointer_y))
        else:
            # off the image: no preview, same as leaving it
            self.drawing.clear_preview()

    def surface_leave(self) -> None:
        self.drawing.clear_preview()

    # Generic pointer routing; AnnotationController adds dragging.

    def pointer_move(self, pointer_x: float, pointer_y: float) -> None:
        self.surface_move(pointer_x, pointer_y)

    def pointer_release(self) -> None:
        pass

    def pointer_leave(self) -> None:
        self.surface_leave()

    def window_deactivated(self) -> None:
        pass


class AnnotationController(PolylineEditor):
    """Full event routing for the main blueprint: segments, drag, zoom and
    the primary polyline collection.

    Args:
        store: The annotation store.
        mapper: CoordinateMapper of the blueprint surface.
        zoom: Zoom controller; a default-bounded one is created if omitted.
        on_activate: Called with a segment when it is pressed in view mode.
    """

    def __init__(
        self,
        store: AnnotationStore,
        mapper: CoordinateMapper,
        zoom: Optional[ZoomController] = None,
        on_activate: Optional[Callable[[Segment], None]] = None,
        edit_mode: bool = False,
    ):
        super().__init__(store.polylines, mapper, edit_mode)
        self.store = store
        self.zoom = zoom or ZoomController()
        self.on_activate = on_activate
        self.drag = DragSession(store, mapper, on_activate=self._activate)

    def _activate(self, segment_id: str) -> None:
        segment = self.store.get_segment(segment_id)
        if segment is not None and self.on_activate is not None:
            log.debug("Segment activated: %s", segment_id)
            self.on_activate(segment)

    def _entered_edit_mode(self) -> None:
        self.store.hover_segment(None)
        if self.store.selected_segment_id is None and self.store.segments:
            self.store.select_segment(self.store.segments[0].id)

    def _left_edit_mode(self) -> None:
        self.drag.end()
        self.store.hover_segment(None)

    # ---- pointer ----

    def segment_press(self, segment_id: str, pointer_x: float, pointer_y: float) -> None:
        """Pointer-down on a segment's hit region."""
        if self._edit_mode and self.drawing.is_drawing:
            # segments do not intercept clicks while a line is being drawn
            self.surface_press(pointer_x, pointer_y)
            return
        self.drag.begin(segment_id, pointer_x, pointer_y, self._edit_mode)

    def pointer_move(self, pointer_x: float, pointer_y: float) -> None:
        if self.drag.is_dragging:
            self.drag.move(pointer_x, pointer_y)
        else:
            self.surface_move(pointer_x, pointer_y)

    def pointer_release(self) -> None:
        self.drag.end()

    def pointer_leave(self) -> None:
        """The pointer left the window (or the drawing surface)."""
        self.drag.end()
        self.surface_leave()

    def window_deactivated(self) -> None:
        self.drag.end()

    def segment_hover(self, segment_id: Optional[str]) -> None:
        """Hover tracking; only meaningful in view mode."""
        if not self._edit_mode:
            self.store.hover_segment(segment_id)

    def wheel(self, delta_y: float) -> float:
        return self.zoom.apply_wheel_delta(delta_y)

    # ---- segment commands ----

    def add_segment(self) -> Segment:
        return self.store.add_segment()

    def delete_segment(self, segment_id: str) -> bool:
        if self.drag.segment_id == segment_id:
            self.drag.end()
        return self.store.delete_segment(segment_id)

    def reset(self) -> None:
        """Restore the default segments and 100% zoom."""
        self.drag.end()
        self.store.reset_to_defaults()
        self.zoom.reset()

    def import_text(self, text: str) -> Tuple[bool, str]:
        """Replace the segments with pasted JSON.

        Returns:
            ``(ok, message)``; on failure the store is untouched.
        """
        try:
            segments = parse_import_text(text)
        except ImportRejected as e:
            log.info("Import rejected: %s", e)
            return False, str(e)
        self.drag.end()
        self.store.import_segments(segments)
        return True, f"Imported {len(segments)} segments."
