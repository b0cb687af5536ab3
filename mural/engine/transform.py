"""Reference ↔ screen transforms, pan/zoom, hit-testing.

Screen coordinates are logical (CSS) pixels with the origin at the viewport's
top-left; the viewport centre shows the view's pan centre. One scale covers
both directions:

    effective = base_fit * view.scale
    base_fit  = min(viewport_w / ref_w, viewport_h / ref_h)

Device pixel ratio is not part of this transform. The drawing surface applies
it, so hit-testing in logical pixels never sees it.
"""

from __future__ import annotations

import math

from mural.engine.config import MuralConfig
from mural.engine.state import Blob, MuralState, ViewState
from mural.utils.geometry import clamp


class ViewTransform:
    """Maps between reference space and the viewport for one MuralState."""

    def __init__(
        self,
        view: ViewState,
        viewport_width: float,
        viewport_height: float,
        config: MuralConfig | None = None,
        device_pixel_ratio: float = 1.0,
    ) -> None:
        self.view = view
        self.config = config or MuralConfig()
        self.viewport_width = float(viewport_width)
        self.viewport_height = float(viewport_height)
        self.device_pixel_ratio = device_pixel_ratio

    def resize(self, width: float, height: float, device_pixel_ratio: float | None = None) -> None:
        self.viewport_width = float(width)
        self.viewport_height = float(height)
        if device_pixel_ratio is not None:
            self.device_pixel_ratio = device_pixel_ratio

    @property
    def base_fit(self) -> float:
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            return 0.0
        return min(
            self.viewport_width / self.config.ref_width,
            self.viewport_height / self.config.ref_height,
        )

    @property
    def effective_scale(self) -> float:
        return self.base_fit * self.view.scale

    def to_screen(self, rx: float, ry: float) -> tuple[float, float]:
        s = self.effective_scale
        return (
            self.viewport_width / 2 + (rx - self.view.center_x) * s,
            self.viewport_height / 2 + (ry - self.view.center_y) * s,
        )

    def to_reference(self, sx: float, sy: float) -> tuple[float, float]:
        s = self.effective_scale
        if s <= 0:
            return (self.view.center_x, self.view.center_y)
        return (
            self.view.center_x + (sx - self.viewport_width / 2) / s,
            self.view.center_y + (sy - self.viewport_height / 2) / s,
        )

    def to_screen_length(self, length: float) -> float:
        return length * self.effective_scale

    # ── View mutation ──

    def pan_by_screen(self, dx: float, dy: float) -> None:
        """Drag the content by (dx, dy) logical pixels."""
        s = self.effective_scale
        if s <= 0:
            return
        self.view.center_x -= dx / s
        self.view.center_y -= dy / s

    def zoom_around(self, factor: float, sx: float, sy: float) -> None:
        """Scale by ``factor`` keeping the reference point under (sx, sy) fixed.

        With p = to_reference(sx, sy) before the change, solving
        p = c' + (s - half) / eff' for the new centre c' gives the pan update.
        """
        if factor <= 0 or not math.isfinite(factor):
            return
        px, py = self.to_reference(sx, sy)
        cfg = self.config
        self.view.scale = clamp(self.view.scale * factor, cfg.min_zoom, cfg.max_zoom)
        s = self.effective_scale
        if s <= 0:
            return
        self.view.center_x = px - (sx - self.viewport_width / 2) / s
        self.view.center_y = py - (sy - self.viewport_height / 2) / s

    def zoom_at_center(self, factor: float) -> None:
        self.zoom_around(factor, self.viewport_width / 2, self.viewport_height / 2)

    def reset(self) -> None:
        self.view.scale = 1.0
        self.view.center_x, self.view.center_y = self.config.center

    # ── Hit-testing ──

    def hit_test(self, state: MuralState, sx: float, sy: float, now: float) -> Blob | None:
        """Topmost blob whose *animated* position is within the hit radius."""
        rx, ry = self.to_reference(sx, sy)
        radius = self.config.hit_radius
        for blob in reversed(state.entities):
            bx, by = state.animated_position(blob, now)
            if math.hypot(bx - rx, by - ry) <= radius:
                return blob
        return None
