"""
canvas/items.py

Graphics items for the annotation overlay: segment boxes, polylines and the
drawing preview point.

Items are laid out in scene coordinates. The scene's surface rectangle (the
blueprint pixmap) defines 0-100 on both axes; :class:`SurfaceFrame` does the
percent-to-scene conversion.
"""

from __future__ import annotations

from typing import Optional, Sequence

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QBrush, QColor, QFont, QPainterPath, QPen
from PyQt6.QtWidgets import (
    QGraphicsEllipseItem,
    QGraphicsItem,
    QGraphicsPathItem,
    QGraphicsRectItem,
    QGraphicsSimpleTextItem,
)

from models import Polyline, PolylinePoint, Segment
from styles import (
    DASH_PATTERNS,
    HOVER_FILL,
    PREVIEW_POINT_COLOR,
    SEGMENT_FILLS,
    SELECTED_BORDER,
    annotation_color,
)


def hex_to_qcolor(value: str, alpha: Optional[int] = None) -> QColor:
    color = QColor(value)
    if alpha is not None:
        color.setAlpha(alpha)
    return color


class SurfaceFrame:
    """Percent <-> scene conversion for one surface rectangle."""

    def __init__(self, rect: QRectF):
        self.rect = QRectF(rect)

    def point(self, x: float, y: float) -> QPointF:
        return QPointF(
            self.rect.left() + x / 100.0 * self.rect.width(),
            self.rect.top() + y / 100.0 * self.rect.height(),
        )

    def length_x(self, percent: float) -> float:
        return percent / 100.0 * self.rect.width()

    def length_y(self, percent: float) -> float:
        return percent / 100.0 * self.rect.height()


def make_stroke_pen(color: str, stroke_width: float, dash_style: str, frame: SurfaceFrame) -> QPen:
    """Pen for a polyline stroke. Width and dashes scale with the surface."""
    pen = QPen(hex_to_qcolor(color))
    pen.setWidthF(max(frame.length_x(stroke_width), 0.5))
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
    pattern = DASH_PATTERNS.get(dash_style)
    if pattern and stroke_width > 0:
        pen.setDashPattern([d / stroke_width for d in pattern])
    else:
        pen.setStyle(Qt.PenStyle.SolidLine)
    return pen


# =============================================================================
# Segment box
# =============================================================================

class SegmentItem(QGraphicsRectItem):
    """A segment's hit region.

    Edit mode draws a tinted box with the segment code; view mode keeps the
    box invisible until hovered.
    """

    def __init__(self, segment: Segment, frame: SurfaceFrame, edit_mode: bool,
                 selected: bool = False, hovered: bool = False):
        super().__init__()
        self.segment_id = segment.id
        self.setAcceptHoverEvents(False)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, False)
        self.setZValue(20)

        top_left = frame.point(segment.left, segment.top)
        self.setRect(QRectF(top_left.x(), top_left.y(),
                            frame.length_x(segment.width), frame.length_y(segment.height)))

        tip = segment.code if not segment.title else f"{segment.code}: {segment.title}"
        self.setToolTip(tip)

        self._label: Optional[QGraphicsSimpleTextItem] = None
        if edit_mode:
            self._label = QGraphicsSimpleTextItem(segment.code, self)
            font = QFont()
            font.setPixelSize(max(9, int(min(self.rect().height() * 0.35, 14))))
            font.setBold(True)
            self._label.setFont(font)
            self._label.setBrush(QBrush(hex_to_qcolor("#f8fafc")))
            self._label.setPos(self.rect().left() + 3, self.rect().top() + 2)

        self.apply_style(segment.color, edit_mode, selected, hovered)

    def apply_style(self, color: str, edit_mode: bool, selected: bool, hovered: bool):
        stroke = annotation_color(color)
        if edit_mode:
            self.setBrush(QBrush(QColor(*SEGMENT_FILLS.get(color, SEGMENT_FILLS["cyan"]))))
            pen = QPen(hex_to_qcolor(SELECTED_BORDER if selected else stroke))
            pen.setWidthF(2.0 if selected else 1.0)
            pen.setCosmetic(True)
            self.setPen(pen)
            self.setCursor(Qt.CursorShape.SizeAllCursor)
        else:
            if hovered:
                self.setBrush(QBrush(QColor(*HOVER_FILL)))
                pen = QPen(hex_to_qcolor(stroke))
                pen.setWidthF(1.5)
                pen.setCosmetic(True)
                self.setPen(pen)
            else:
                self.setBrush(QBrush(Qt.BrushStyle.NoBrush))
                self.setPen(QPen(Qt.PenStyle.NoPen))
            self.setCursor(Qt.CursorShape.PointingHandCursor)


# =============================================================================
# Polyline
# =============================================================================

def polyline_path(points: Sequence[PolylinePoint], frame: SurfaceFrame) -> QPainterPath:
    path = QPainterPath()
    if len(points) < 2:
        return path
    path.moveTo(frame.point(points[0].x, points[0].y))
    for pt in points[1:]:
        path.lineTo(frame.point(pt.x, pt.y))
    return path


class PolylineItem(QGraphicsPathItem):
    """A polyline stroke; vertex dots are added in edit mode.

    Fewer than two points draws no stroke, only the dots.
    """

    def __init__(self, polyline: Polyline, frame: SurfaceFrame, edit_mode: bool, active: bool = False):
        super().__init__()
        self.polyline_id = polyline.id
        self.setZValue(10)
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)
        self.setPath(polyline_path(polyline.points, frame))
        self.setPen(make_stroke_pen(annotation_color(polyline.color), polyline.stroke_width,
                                    polyline.dash_style, frame))
        if polyline.label:
            self.setToolTip(polyline.label)

        if edit_mode:
            radius = frame.length_x(1.2 if active else 0.9)
            brush = QBrush(hex_to_qcolor(annotation_color(polyline.color), 242))
            for pt in polyline.points:
                center = frame.point(pt.x, pt.y)
                dot = QGraphicsEllipseItem(center.x() - radius, center.y() - radius,
                                           radius * 2, radius * 2, self)
                dot.setBrush(brush)
                dot.setPen(QPen(Qt.PenStyle.NoPen))
                dot.setAcceptedMouseButtons(Qt.MouseButton.NoButton)


class PreviewPointItem(QGraphicsEllipseItem):
    """Next-point indicator shown while a polyline is being drawn."""

    def __init__(self):
        super().__init__()
        self.setZValue(50)
        self.setBrush(QBrush(hex_to_qcolor(PREVIEW_POINT_COLOR, 242)))
        self.setPen(QPen(Qt.PenStyle.NoPen))
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)
        self.hide()

    def place(self, point: Optional[PolylinePoint], frame: SurfaceFrame):
        if point is None:
            self.hide()
            return
        radius = frame.length_x(1.0)
        center = frame.point(point.x, point.y)
        self.setRect(center.x() - radius, center.y() - radius, radius * 2, radius * 2)
        self.show()
