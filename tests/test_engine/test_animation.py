"""Tests for placements, glow timers and deletion ephemera."""

from __future__ import annotations

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mural.engine.animation import (
    EphemeraPool,
    GlowStore,
    Placement,
    cosine_ease,
    similarity_tier,
)

unit = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)
coord = st.floats(min_value=-1000.0, max_value=1000.0, allow_nan=False)


class TestEase:
    def test_endpoints(self):
        assert cosine_ease(0.0) == 0.0
        assert cosine_ease(1.0) == pytest.approx(1.0)
        assert cosine_ease(0.5) == pytest.approx(0.5)

    @given(unit, unit)
    def test_monotone(self, a, b):
        lo, hi = sorted((a, b))
        assert cosine_ease(lo) <= cosine_ease(hi) + 1e-12

    @given(st.floats(min_value=-5.0, max_value=5.0, allow_nan=False))
    def test_no_overshoot(self, t):
        assert 0.0 <= cosine_ease(t) <= 1.0


class TestPlacement:
    def test_start_before_window_target_after(self):
        p = Placement(start=(400, 300), target=(500, 350), start_ts=1000, delay=200, duration=1000)
        assert p.position(900) == (400, 300)
        assert p.position(1200) == (400, 300)
        assert p.position(2200) == (500, 350)
        assert p.position(99999) == (500, 350)

    @given(coord, coord, coord, coord, unit)
    def test_stays_between_endpoints(self, sx, sy, tx, ty, t):
        p = Placement(start=(sx, sy), target=(tx, ty), start_ts=0.0, duration=1000.0)
        x, y = p.position(t * 1000.0)
        assert min(sx, tx) - 1e-6 <= x <= max(sx, tx) + 1e-6
        assert min(sy, ty) - 1e-6 <= y <= max(sy, ty) + 1e-6

    def test_settle_latch_fires_once(self):
        p = Placement(start=(0, 0), target=(10, 10), start_ts=0, duration=100)
        assert p.advance(50) is False
        assert p.advance(100) is True
        assert p.settled
        assert p.advance(150) is False
        # Latched: earlier timestamps no longer rewind the animation
        assert p.position(0) == (10, 10)

    def test_at_rest(self):
        p = Placement.at_rest((5.0, 6.0), now=123.0)
        assert p.settled
        assert p.position(0.0) == (5.0, 6.0)
        assert p.advance(500.0) is False


class TestSimilarityTier:
    @pytest.mark.parametrize(
        "score, expected",
        [
            (0.95, 1.6),
            (0.85, 1.3),  # bands use strict ">"
            (0.75, 1.3),
            (0.7, 1.0),
            (0.55, 1.0),
            (0.5, 0.7),
            (0.1, 0.7),
        ],
    )
    def test_bands(self, config, score, expected):
        assert similarity_tier(score, config) == expected


class TestGlowStore:
    def test_active_until_duration(self, config):
        glows = GlowStore(config)
        d = config.glow_duration_ms
        glows.set_resonance("a", 1000.0)
        assert glows.has_resonance("a", 1000.0 + d - 0.001)
        assert not glows.has_resonance("a", 1000.0 + d + 0.001)

    def test_expired_record_is_evicted(self, config):
        glows = GlowStore(config)
        glows.set_similarity("a", 0.0, 0.9)
        assert glows.similarity_ids == {"a"}
        assert glows.similarity_age("a", config.glow_duration_ms) is None
        assert glows.similarity_ids == set()

    def test_sweep_covers_undrawn_ids(self, config):
        glows = GlowStore(config)
        glows.set_resonance("gone", 0.0)
        glows.set_resonance("fresh", 4000.0)
        glows.sweep(5000.0)
        assert glows.resonance_ids == {"fresh"}

    def test_pulse_damps_to_zero(self, config):
        glows = GlowStore(config)
        glows.set_resonance("a", 0.0)
        d = config.glow_duration_ms
        assert glows.resonance_pulse("a", 0.0) == pytest.approx(0.0)
        # First peak at t = 1/(2k)
        t = 1 / (2 * config.resonance_pulses)
        assert glows.resonance_pulse("a", t * d) == pytest.approx(1 - t)
        assert glows.resonance_pulse("a", d * 0.999) < 0.01

    def test_similarity_intensity_fades(self, config):
        glows = GlowStore(config)
        glows.set_similarity("a", 0.0, 0.9)
        d = config.glow_duration_ms
        assert glows.similarity_intensity("a", 0.0) == pytest.approx(1.6)
        assert glows.similarity_intensity("a", d / 2) == pytest.approx(0.8)

    def test_overwrite_restarts(self, config):
        glows = GlowStore(config)
        glows.set_resonance("a", 0.0)
        glows.set_resonance("a", 4000.0)
        assert glows.resonance_age("a", 5000.0) == pytest.approx(1000.0)
        assert len(glows) == 1


class TestEphemera:
    def test_spawn_and_fade(self, config):
        pool = EphemeraPool(config)
        pool.spawn_deletion("abc", (100.0, 100.0), "#FF4444", "spiky", 0.3, now=0.0)

        assert len(pool.floats) == 1
        assert len(pool.particles) == config.particle_count

        ghost = pool.floats[0]
        assert ghost.position(0.0) == (100.0, 100.0)
        x, y = ghost.position(config.float_away_ms)
        assert x == 100.0
        assert y == pytest.approx(100.0 - config.float_away_rise)

        pool.update(config.float_away_ms + 1)
        assert len(pool) == 0

    def test_scatter_is_reproducible(self, config):
        a, b = EphemeraPool(config), EphemeraPool(config)
        a.spawn_deletion("same-id", (0.0, 0.0), "#fff", "smooth", 0.0, now=0.0)
        b.spawn_deletion("same-id", (0.0, 0.0), "#fff", "smooth", 0.0, now=0.0)
        assert [(p.vx, p.vy) for p in a.particles] == [(p.vx, p.vy) for p in b.particles]

    def test_particles_fly_outward(self, config):
        pool = EphemeraPool(config)
        pool.spawn_deletion("x", (0.0, 0.0), "#fff", "smooth", 0.0, now=0.0)
        for p in pool.particles:
            x, y = p.position(100.0)
            assert math.hypot(x, y) > 0
