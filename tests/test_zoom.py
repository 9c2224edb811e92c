"""Tests for engine/zoom.py."""
from __future__ import annotations

from engine.zoom import ZoomController
from settings import ZoomSettings


class TestZoomController:
    def test_starts_at_reset_scale(self):
        assert ZoomController().scale == 1.0

    def test_negative_delta_zooms_in(self):
        zoom = ZoomController()
        for _ in range(4):
            zoom.apply_wheel_delta(-120)
        assert zoom.scale == 1.4

    def test_clamped_at_max(self):
        zoom = ZoomController()
        for _ in range(34):
            zoom.apply_wheel_delta(-1)
        assert zoom.scale == 4.0

    def test_clamped_at_min(self):
        zoom = ZoomController()
        for _ in range(20):
            zoom.apply_wheel_delta(53)
        assert zoom.scale == 0.5

    def test_one_step_per_event_regardless_of_magnitude(self):
        zoom = ZoomController()
        zoom.apply_wheel_delta(-1000)
        assert zoom.scale == 1.1

    def test_zero_delta_is_ignored(self):
        zoom = ZoomController()
        assert zoom.apply_wheel_delta(0) == 1.0

    def test_no_rounding_drift(self):
        zoom = ZoomController()
        for _ in range(7):
            zoom.apply_wheel_delta(-1)
        for _ in range(7):
            zoom.apply_wheel_delta(1)
        assert zoom.scale == 1.0

    def test_reset(self):
        zoom = ZoomController()
        zoom.apply_wheel_delta(-1)
        assert zoom.reset() == 1.0

    def test_listeners_only_on_change(self):
        zoom = ZoomController(ZoomSettings(min_scale=1.0, max_scale=1.2, step=0.1))
        seen = []
        zoom.on_change(seen.append)
        zoom.apply_wheel_delta(10)   # already at min
        zoom.apply_wheel_delta(-10)
        zoom.apply_wheel_delta(-10)
        zoom.apply_wheel_delta(-10)  # already at max
        assert seen == [1.1, 1.2]
