"""
engine/zoom.py

Bounded zoom factor driven by wheel input.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from settings import ZoomSettings

log = logging.getLogger(__name__)


class ZoomController:
    """Owns the rendered scale of the blueprint.

    Scale only affects how large the diagram is drawn; stored percent
    coordinates are never touched.

    Args:
        zoom_settings: Bounds and step. Defaults: 0.5 .. 4.0, step 0.1.
    """

    RESET_SCALE = 1.0

    def __init__(self, zoom_settings: Optional[ZoomSettings] = None):
        cfg = zoom_settings or ZoomSettings()
        self.min_scale = cfg.min_scale
        self.max_scale = cfg.max_scale
        self.step = cfg.step
        self._scale = self.RESET_SCALE
        self._listeners: List[Callable[[float], None]] = []

    @property
    def scale(self) -> float:
        return self._scale

    def on_change(self, callback: Callable[[float], None]) -> None:
        """Register a callback receiving the new scale after each change."""
        self._listeners.append(callback)

    def apply_wheel_delta(self, delta_y: float) -> float:
        """Move the scale one step opposite to *delta_y*'s sign.

        Negative deltas (scroll up) zoom in. A zero delta has no direction
        and leaves the scale unchanged.

        Returns:
            The new scale, clamped to the bounds and rounded to 2 places.
        """
        if delta_y == 0:
            return self._scale
        direction = -1 if delta_y > 0 else 1
        target = self._scale + direction * self.step
        self._set(round(min(self.max_scale, max(self.min_scale, target)), 2))
        return self._scale

    def reset(self) -> float:
        """Return to 100%."""
        self._set(self.RESET_SCALE)
        return self._scale

    def _set(self, value: float) -> None:
        if value == self._scale:
            return
        log.debug("Zoom %.2f -> %.2f", self._scale, value)
        self._scale = value
        for callback in list(self._listeners):
            callback(value)
