"""
engine/mapper.py

Pointer-space to annotation-space coordinate mapping.

The state machines only talk to the :class:`CoordinateMapper` protocol;
each rendering back-end supplies its own implementation (see
``canvas/mapper.py`` for the QGraphicsView one).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Tuple

from models import PolylinePoint, clamp_percent


class CoordinateMapper(Protocol):
    """Maps pointer coordinates to normalized 0-100 coordinates and back."""

    def to_normalized(self, pointer_x: float, pointer_y: float) -> Optional[PolylinePoint]:
        """Return the clamped annotation-space point, or ``None`` if the
        surface has not been measured yet (callers ignore the event)."""
        ...

    def to_pointer(self, x: float, y: float) -> Optional[Tuple[float, float]]:
        """Inverse mapping, or ``None`` if the surface is not measured.
        Used to place pointer events at known annotation positions."""
        ...

    def contains(self, pointer_x: float, pointer_y: float) -> bool:
        """Whether the pointer is over the measured surface (no clamping)."""
        ...


@dataclass(frozen=True)
class SurfaceGeometry:
    """On-screen rectangle of the rendering surface.

    ``left``/``top`` carry the translation and ``width``/``height`` the
    current scale, so the pair fully describes an axis-aligned transform.
    """
    left: float
    top: float
    width: float
    height: float

    @property
    def is_measured(self) -> bool:
        return self.width > 0 and self.height > 0


class RectMapper:
    """CoordinateMapper over an axis-aligned surface rectangle.

    Args:
        geometry: Callable returning the surface's current on-screen
            geometry, or ``None`` while it is not laid out. It is queried on
            every call; the mapper keeps no history.
    """

    def __init__(self, geometry: Callable[[], Optional[SurfaceGeometry]]):
        self._geometry = geometry

    def _measured(self) -> Optional[SurfaceGeometry]:
        geom = self._geometry()
        if geom is None or not geom.is_measured:
            return None
        return geom

    def to_normalized(self, pointer_x: float, pointer_y: float) -> Optional[PolylinePoint]:
        geom = self._measured()
        if geom is None:
            return None
        x = (pointer_x - geom.left) / geom.width * 100.0
        y = (pointer_y - geom.top) / geom.height * 100.0
        return PolylinePoint(clamp_percent(x), clamp_percent(y))

    def to_pointer(self, x: float, y: float) -> Optional[Tuple[float, float]]:
        geom = self._measured()
        if geom is None:
            return None
        return (geom.left + x / 100.0 * geom.width, geom.top + y / 100.0 * geom.height)

    def contains(self, pointer_x: float, pointer_y: float) -> bool:
        geom = self._measured()
        if geom is None:
            return False
        return (geom.left <= pointer_x <= geom.left + geom.width
                and geom.top <= pointer_y <= geom.top + geom.height)
