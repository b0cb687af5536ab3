"""MuralPainter — one frame of MuralState onto a RasterSurface.

Draw order is the entity list order (last drawn on top), then deletion
ephemera. Per-entity style precedence:

    highlighted > resonance glow > similarity glow > own > other
"""

from __future__ import annotations

from dataclasses import dataclass

from mural.engine.config import MuralConfig
from mural.engine.state import Blob, MuralState
from mural.engine.transform import ViewTransform
from mural.render.shapes import blob_outline, seed_from_id
from mural.render.surface import RasterSurface


# Fill alphas as hex suffixes on the entity colour
ALPHA_RESONANCE = 0xBB / 255
ALPHA_SIMILARITY = 0xAA / 255
ALPHA_OTHER = 0x88 / 255

HIGHLIGHT_HALO = "#ffffff"
HIGHLIGHT_BLUR = 24.0
RESONANCE_BLUR = 22.0
SIMILARITY_BLUR = 18.0

OWN_RING_COLOR = "#ffffff"
OWN_RING_ALPHA = 0.5
OWN_RING_WIDTH = 1.5

PARTICLE_RADIUS = 1.5
ERROR_COLOR = "#bbbbbb"


@dataclass(frozen=True)
class BlobStyle:
    """Resolved drawing style for one entity in one frame."""

    radius_scale: float = 1.0
    alpha: float = ALPHA_OTHER
    halo_color: str | None = None
    halo_blur: float = 0.0
    own_ring: bool = False


def blob_style(
    blob: Blob,
    state: MuralState,
    user_id: str | None,
    now: float,
    config: MuralConfig,
) -> BlobStyle:
    own = blob.is_owned_by(user_id)

    if state.highlighted == blob.id:
        return BlobStyle(alpha=1.0, halo_color=HIGHLIGHT_HALO, halo_blur=HIGHLIGHT_BLUR, own_ring=own)

    pulse = state.glows.resonance_pulse(blob.id, now)
    if pulse is not None:
        return BlobStyle(
            radius_scale=1.0 + config.resonance_scale * pulse,
            alpha=ALPHA_RESONANCE,
            halo_color=blob.color,
            halo_blur=RESONANCE_BLUR * pulse,
            own_ring=own,
        )

    intensity = state.glows.similarity_intensity(blob.id, now)
    if intensity is not None:
        return BlobStyle(
            alpha=ALPHA_SIMILARITY,
            halo_color=blob.color,
            halo_blur=SIMILARITY_BLUR * intensity,
            own_ring=own,
        )

    if own:
        return BlobStyle(alpha=1.0, own_ring=True)
    return BlobStyle()


class MuralPainter:
    """Renders a MuralState through a ViewTransform into a RasterSurface."""

    def __init__(self, surface: RasterSurface, user_id: str | None = None) -> None:
        self.surface = surface
        self.user_id = user_id
        self.frames = 0

    def resize(self, width: float, height: float, device_pixel_ratio: float | None = None) -> None:
        self.surface.resize(width, height, device_pixel_ratio)

    def paint(self, state: MuralState, transform: ViewTransform, now: float) -> None:
        cfg = state.config
        surface = self.surface
        surface.clear()
        self.frames += 1

        if state.error:
            surface.text_centered(surface.width / 2, surface.height / 2, state.error, ERROR_COLOR)
            return

        base_r = transform.to_screen_length(cfg.blob_radius)
        for blob in state.entities:
            style = blob_style(blob, state, self.user_id, now, cfg)
            sx, sy = transform.to_screen(*state.animated_position(blob, now))
            outline = blob_outline(
                blob.shape, sx, sy, base_r * style.radius_scale, seed_from_id(blob.id)
            )
            surface.fill_polygon(
                outline,
                blob.color,
                alpha=style.alpha,
                glow_color=style.halo_color,
                glow_blur=style.halo_blur,
            )
            if style.own_ring:
                surface.stroke_circle(
                    sx,
                    sy,
                    base_r + cfg.own_ring_gap,
                    OWN_RING_COLOR,
                    alpha=OWN_RING_ALPHA,
                    line_width=OWN_RING_WIDTH,
                )

        self._paint_ephemera(state, transform, now, base_r)

    def _paint_ephemera(
        self, state: MuralState, transform: ViewTransform, now: float, base_r: float
    ) -> None:
        for ghost in state.ephemera.floats:
            alpha = ghost.alpha(now)
            if alpha <= 0:
                continue
            sx, sy = transform.to_screen(*ghost.position(now))
            outline = blob_outline(ghost.shape, sx, sy, base_r, ghost.seed)
            self.surface.fill_polygon(outline, ghost.color, alpha=alpha * ALPHA_OTHER)

        for particle in state.ephemera.particles:
            alpha = particle.alpha(now)
            if alpha <= 0:
                continue
            sx, sy = transform.to_screen(*particle.position(now))
            self.surface.fill_circle(sx, sy, PARTICLE_RADIUS, particle.color, alpha=alpha)
