"""
canvas/scene.py

QGraphicsScene holding the blueprint image and the annotation overlay.

The scene does not own any annotation state. It subscribes to the stores
and rebuilds the affected overlay items after every completed mutation.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from PyQt6.QtCore import Qt, QRectF
from PyQt6.QtGui import QBrush, QColor, QPen, QPixmap
from PyQt6.QtWidgets import QGraphicsPixmapItem, QGraphicsRectItem, QGraphicsScene

from canvas.items import PolylineItem, PreviewPointItem, SegmentItem, SurfaceFrame
from debug_trace import trace
from engine.drawing import PolylineDrawingSession
from engine.store import AnnotationStore, PolylineStore, StoreEvent

# Surface used when no blueprint image is loaded
PLACEHOLDER_SIZE = (1600.0, 900.0)


class BlueprintScene(QGraphicsScene):
    """
    Scene for one annotated surface.

    Args:
        polylines: Polyline collection drawn over the surface.
        drawing: Drawing session whose preview point is shown.
        store: Segment store; ``None`` for surfaces without segments
            (the detail view).
    """

    def __init__(
        self,
        polylines: PolylineStore,
        drawing: PolylineDrawingSession,
        store: Optional[AnnotationStore] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.polylines = polylines
        self.drawing = drawing
        self.store = store
        self.edit_mode = False

        self._pixmap_item: Optional[QGraphicsPixmapItem] = None
        self._placeholder: Optional[QGraphicsRectItem] = None
        self._segment_items: Dict[str, SegmentItem] = {}
        self._polyline_items: List[PolylineItem] = []
        self._preview = PreviewPointItem()
        self.addItem(self._preview)

        self._show_placeholder()

        if store is not None:
            store.subscribe(self._on_store_event)
        else:
            polylines.subscribe(self._on_store_event)

        self.rebuild()

    # ---- surface ----

    def _show_placeholder(self):
        w, h = PLACEHOLDER_SIZE
        self._placeholder = QGraphicsRectItem(0, 0, w, h)
        self._placeholder.setBrush(QBrush(QColor("#0b1220")))
        pen = QPen(QColor("#1e293b"))
        pen.setCosmetic(True)
        self._placeholder.setPen(pen)
        self._placeholder.setZValue(0)
        self.addItem(self._placeholder)
        self.setSceneRect(QRectF(0, 0, w, h))

    def set_image(self, path: str) -> bool:
        """Load the blueprint image. Returns False if it cannot be read."""
        pixmap = QPixmap(path)
        if pixmap.isNull():
            trace(f"Could not load image {path!r}", "SCENE")
            return False
        if self._placeholder is not None:
            self.removeItem(self._placeholder)
            self._placeholder = None
        if self._pixmap_item is None:
            self._pixmap_item = QGraphicsPixmapItem()
            self._pixmap_item.setTransformationMode(Qt.TransformationMode.SmoothTransformation)
            self._pixmap_item.setZValue(0)
            self.addItem(self._pixmap_item)
        self._pixmap_item.setPixmap(pixmap)
        self.setSceneRect(self.surface_rect())
        trace(f"Loaded image {path} ({pixmap.width()}x{pixmap.height()})", "SCENE")
        self.rebuild()
        return True

    def has_image(self) -> bool:
        return self._pixmap_item is not None

    def surface_rect(self) -> QRectF:
        """Scene rectangle spanning 0-100 on both axes."""
        if self._pixmap_item is not None:
            return self._pixmap_item.sceneBoundingRect()
        if self._placeholder is not None:
            return self._placeholder.sceneBoundingRect().adjusted(0.5, 0.5, -0.5, -0.5)
        return QRectF()

    def frame(self) -> SurfaceFrame:
        return SurfaceFrame(self.surface_rect())

    # ---- overlay ----

    def set_edit_mode(self, enabled: bool):
        self.edit_mode = enabled
        self.rebuild()

    def rebuild(self):
        self._rebuild_segments()
        self._rebuild_polylines()
        self.update_preview()

    def _rebuild_segments(self):
        for item in self._segment_items.values():
            self.removeItem(item)
        self._segment_items.clear()
        if self.store is None:
            return
        frame = self.frame()
        for segment in self.store.segments:
            item = SegmentItem(
                segment,
                frame,
                self.edit_mode,
                selected=self.edit_mode and segment.id == self.store.selected_segment_id,
                hovered=segment.id == self.store.hovered_segment_id,
            )
            self.addItem(item)
            self._segment_items[segment.id] = item

    def _restyle_segments(self):
        if self.store is None:
            return
        for segment in self.store.segments:
            item = self._segment_items.get(segment.id)
            if item is None:
                continue
            item.apply_style(
                segment.color,
                self.edit_mode,
                self.edit_mode and segment.id == self.store.selected_segment_id,
                segment.id == self.store.hovered_segment_id,
            )

    def _rebuild_polylines(self):
        for item in self._polyline_items:
            self.removeItem(item)
        self._polyline_items = []
        frame = self.frame()
        active_id = self.polylines.active_id
        for polyline in self.polylines:
            item = PolylineItem(polyline, frame, self.edit_mode, active=polyline.id == active_id)
            self.addItem(item)
            self._polyline_items.append(item)

    def update_preview(self):
        point = self.drawing.preview if (self.edit_mode and self.drawing.is_drawing) else None
        self._preview.place(point, self.frame())

    def segment_item(self, segment_id: str) -> Optional[SegmentItem]:
        return self._segment_items.get(segment_id)

    def _on_store_event(self, event: StoreEvent):
        if event is StoreEvent.SEGMENTS_CHANGED:
            self._rebuild_segments()
        elif event in (StoreEvent.SEGMENT_SELECTED, StoreEvent.SEGMENT_HOVERED):
            self._restyle_segments()
        elif event in (StoreEvent.POLYLINES_CHANGED, StoreEvent.POLYLINE_SELECTED):
            self._rebuild_polylines()
            self.update_preview()
