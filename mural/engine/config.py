"""Engine configuration — every layout, timing and interaction constant."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SpiralParams:
    """One parameter set for Archimedean spiral placement.

    r = separation * angle + base_offset, angle = index * angular_step.
    """

    angular_step: float = 0.62  # radians per index
    separation: float = 6.5  # reference units of radius per radian
    base_offset: float = 18.0
    min_distance: float = 40.0  # 2 * blob radius + 4 units breathing room
    retry_increment: float = 0.35  # radians advanced per collision
    max_attempts: int = 24


# Full layout packs every entity at once: loose spacing keeps the cascade legible.
FULL_LAYOUT = SpiralParams()

# Single insertions arrive one at a time and may sit denser against the tail.
# Separation matches FULL_LAYOUT so the tail continues the same spiral arm.
INSERT_LAYOUT = SpiralParams(angular_step=0.45, min_distance=34.0, retry_increment=0.25)


@dataclass
class MuralConfig:
    """Controls layout, animation, interaction and rendering behavior."""

    # Reference space (entity positions are stored in this space)
    ref_width: float = 800.0
    ref_height: float = 600.0
    # Keep resting positions this far inside the reference bounds
    edge_margin: float = 20.0

    # Visual blob radius / hit-test radius in reference units.
    # Hit radius > visual radius so fingers still land on small blobs.
    blob_radius: float = 18.0
    hit_radius: float = 26.0
    own_ring_gap: float = 4.0

    # Spiral placement
    full_layout: SpiralParams = field(default_factory=lambda: FULL_LAYOUT)
    insert_layout: SpiralParams = field(default_factory=lambda: INSERT_LAYOUT)

    # Spawn animation
    spawn_duration_ms: float = 1400.0
    stagger_ms: float = 40.0
    recency_window_ms: float = 5000.0

    # Glows
    glow_duration_ms: float = 4500.0
    resonance_pulses: int = 5
    resonance_scale: float = 0.35  # radius grows up to 1.35x at pulse peak
    # (threshold, multiplier) bands, checked top-down with strict ">"
    similarity_tiers: tuple[tuple[float, float], ...] = ((0.85, 1.6), (0.7, 1.3), (0.5, 1.0))
    similarity_baseline: float = 0.7

    # Interaction
    double_tap_ms: float = 350.0
    long_press_ms: float = 500.0
    move_threshold_px: float = 8.0
    pinch_ratio_min: float = 0.85
    pinch_ratio_max: float = 1.15
    wheel_zoom_rate: float = 0.0015
    zoom_step: float = 1.25
    min_zoom: float = 0.5
    max_zoom: float = 4.0

    # Deletion ephemera
    float_away_ms: float = 1600.0
    float_away_rise: float = 60.0  # reference units travelled upward
    particle_count: int = 18
    particle_speed: float = 0.09  # reference units per ms
    particle_fade_ms: float = 900.0

    @property
    def center(self) -> tuple[float, float]:
        return (self.ref_width / 2, self.ref_height / 2)
