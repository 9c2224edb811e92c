"""
canvas/view.py

QGraphicsView that feeds pointer, wheel and key input to the annotation
controller.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import Qt, QPointF
from PyQt6.QtGui import QPainter, QTransform
from PyQt6.QtWidgets import QGraphicsView

from canvas.items import SegmentItem
from canvas.scene import BlueprintScene
from debug_trace import trace


class BlueprintView(QGraphicsView):
    """
    Graphics view for one annotated surface.

    The rendered scale is the fit-to-viewport scale times the controller's
    zoom factor, so 100% zoom always shows the whole blueprint.

    Input routing:
    - Left press on a segment box -> controller.segment_press
    - Left press elsewhere -> controller.surface_press (adds a point while drawing)
    - Move -> controller.pointer_move and segment hover tracking
    - Release / leave -> controller.pointer_release / pointer_leave
    - Wheel -> controller.wheel (when the controller has a zoom)
    - Escape / Enter -> finish the polyline being drawn
    """

    def __init__(self, scene: BlueprintScene, controller=None, parent=None):
        super().__init__(scene, parent)
        self.controller = controller
        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        zoom = getattr(controller, "zoom", None)
        if zoom is not None:
            zoom.on_change(lambda _scale: self.apply_scale())

    # ---- scale ----

    def fit_scale(self) -> float:
        rect = self.scene().surface_rect()
        vp = self.viewport().rect()
        if rect.isEmpty() or vp.width() <= 0 or vp.height() <= 0:
            return 1.0
        return min(vp.width() / rect.width(), vp.height() / rect.height())

    def zoom_scale(self) -> float:
        zoom = getattr(self.controller, "zoom", None)
        return zoom.scale if zoom is not None else 1.0

    def apply_scale(self):
        s = self.fit_scale() * self.zoom_scale()
        self.setTransform(QTransform.fromScale(s, s))

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.apply_scale()

    def wheelEvent(self, event):
        """Zoom with mouse wheel."""
        zoom = getattr(self.controller, "zoom", None)
        if zoom is None:
            super().wheelEvent(event)
            return
        # Qt reports scroll-up as positive; the controller expects the
        # opposite sign (negative = zoom in).
        delta = event.angleDelta().y()
        self.controller.wheel(-delta)
        event.accept()

    # ---- pointer ----

    def _segment_at(self, pos: QPointF) -> Optional[str]:
        for item in self.items(pos.toPoint()):
            while item is not None and not isinstance(item, SegmentItem):
                item = item.parentItem()
            if isinstance(item, SegmentItem):
                return item.segment_id
        return None

    def mousePressEvent(self, event):
        if self.controller is None or event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        pos = event.position()
        segment_id = self._segment_at(pos) if self.scene().store is not None else None
        if segment_id is not None:
            trace(f"Press on segment {segment_id}", "POINTER")
            self.controller.segment_press(segment_id, pos.x(), pos.y())
        else:
            self.controller.surface_press(pos.x(), pos.y())
        event.accept()

    def mouseMoveEvent(self, event):
        if self.controller is None:
            super().mouseMoveEvent(event)
            return
        pos = event.position()
        self.controller.pointer_move(pos.x(), pos.y())
        if hasattr(self.controller, "segment_hover"):
            self.controller.segment_hover(self._segment_at(pos))
        self.scene().update_preview()
        event.accept()

    def mouseReleaseEvent(self, event):
        if self.controller is not None and event.button() == Qt.MouseButton.LeftButton:
            self.controller.pointer_release()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event):
        if self.controller is not None:
            self.controller.pointer_leave()
            if hasattr(self.controller, "segment_hover"):
                self.controller.segment_hover(None)
            self.scene().update_preview()
        super().leaveEvent(event)

    def keyPressEvent(self, event):
        """Escape or Enter ends the current polyline."""
        if (self.controller is not None
                and event.key() in (Qt.Key.Key_Escape, Qt.Key.Key_Return, Qt.Key.Key_Enter)
                and self.controller.drawing.is_drawing):
            self.controller.finish_drawing()
            self.scene().update_preview()
            event.accept()
            return
        super().keyPressEvent(event)
