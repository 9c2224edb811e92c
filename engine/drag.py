"""
engine/drag.py

Pointer-held repositioning of a single segment.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from models import clamp_percent
from engine.mapper import CoordinateMapper
from engine.store import AnnotationStore

log = logging.getLogger(__name__)


class DragSession:
    """Moves one segment's top-left anchor while the pointer is held.

    The grab offset (pointer minus ``(left, top)``) is captured once at
    pointer-down so the box keeps its position relative to the pointer.
    Every move writes the position straight to the store; ending the drag
    never restores the starting position.

    Args:
        store: Store receiving the position patches.
        mapper: Pointer-to-normalized mapper of the rendering surface.
        on_activate: Called with the segment id when a segment is pressed
            outside edit mode.
    """

    def __init__(
        self,
        store: AnnotationStore,
        mapper: CoordinateMapper,
        on_activate: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self.mapper = mapper
        self.on_activate = on_activate
        self._segment_id: Optional[str] = None
        self._grab_offset: Tuple[float, float] = (0.0, 0.0)

    @property
    def is_dragging(self) -> bool:
        return self._segment_id is not None

    @property
    def segment_id(self) -> Optional[str]:
        return self._segment_id

    @property
    def grab_offset(self) -> Tuple[float, float]:
        return self._grab_offset

    def begin(self, segment_id: str, pointer_x: float, pointer_y: float, edit_mode: bool) -> bool:
        """Handle pointer-down on a segment. Returns True if a drag started."""
        if not edit_mode:
            if self.on_activate is not None:
                self.on_activate(segment_id)
            return False
        if self.is_dragging:
            return False
        segment = self.store.get_segment(segment_id)
        if segment is None:
            return False
        point = self.mapper.to_normalized(pointer_x, pointer_y)
        if point is None:
            return False
        self._segment_id = segment_id
        self._grab_offset = (point.x - segment.left, point.y - segment.top)
        self.store.select_segment(segment_id)
        log.debug("Drag start %s offset=%s", segment_id, self._grab_offset)
        return True

    def move(self, pointer_x: float, pointer_y: float) -> bool:
        """Handle pointer-move. Returns True if the segment was repositioned."""
        if not self.is_dragging:
            return False
        point = self.mapper.to_normalized(pointer_x, pointer_y)
        if point is None:
            return False
        dx, dy = self._grab_offset
        moved = self.store.move_segment(
            self._segment_id,
            top=clamp_percent(point.y - dy),
            left=clamp_percent(point.x - dx),
        )
        if moved is None:
            # segment vanished mid-drag
            self.end()
            return False
        return True

    def end(self) -> None:
        """Pointer release, pointer leaving the window, or window blur."""
        if self._segment_id is not None:
            log.debug("Drag end %s", self._segment_id)
        self._segment_id = None
        self._grab_offset = (0.0, 0.0)
