"""
canvas package

PyQt6 rendering back-end: graphics items, scene, view and the view's
coordinate mapper.
"""

from canvas.items import PolylineItem, PreviewPointItem, SegmentItem, SurfaceFrame
from canvas.mapper import ViewMapper
from canvas.scene import BlueprintScene
from canvas.view import BlueprintView

__all__ = [
    "PolylineItem",
    "PreviewPointItem",
    "SegmentItem",
    "SurfaceFrame",
    "ViewMapper",
    "BlueprintScene",
    "BlueprintView",
]
