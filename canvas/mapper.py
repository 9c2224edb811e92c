"""
canvas/mapper.py

CoordinateMapper for a QGraphicsView: viewport pixels <-> percent.
"""

from __future__ import annotations

from typing import Optional

from engine.mapper import RectMapper, SurfaceGeometry


class ViewMapper(RectMapper):
    """Maps viewport positions through the view's current transform.

    The surface rectangle comes from the scene (the blueprint pixmap) and is
    projected into viewport pixels on every call, so zoom and scrolling are
    always accounted for. Until a view is attached and shown the mapper
    reports the surface as unmeasured.
    """

    def __init__(self, view=None):
        self.view = view
        super().__init__(self._viewport_geometry)

    def _viewport_geometry(self) -> Optional[SurfaceGeometry]:
        if self.view is None:
            return None
        scene = self.view.scene()
        if scene is None or not self.view.isVisible():
            return None
        rect = scene.surface_rect()
        if rect.isEmpty():
            return None
        projected = self.view.viewportTransform().mapRect(rect)
        return SurfaceGeometry(
            left=float(projected.left()),
            top=float(projected.top()),
            width=float(projected.width()),
            height=float(projected.height()),
        )
