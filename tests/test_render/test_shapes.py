"""Tests for blob silhouettes and the shape seed."""

from __future__ import annotations

import math

import numpy as np
import pytest

from mural.render.shapes import blob_outline, jagged_outline, seed_from_id, spiky_outline


class TestSeed:
    def test_uses_leading_hex_digits(self):
        assert seed_from_id("ffffffff-0000-4000-8000-000000000000") == 1.0
        assert seed_from_id("00000000-ffff-4fff-8fff-ffffffffffff") == 0.0
        assert seed_from_id("80000000-0000-4000-8000-000000000000") == pytest.approx(0.5, abs=1e-9)

    def test_dashes_are_ignored(self):
        assert seed_from_id("1234-5678-aaaa") == seed_from_id("12345678aaaa")

    def test_non_hex_ids_still_deterministic(self):
        a = seed_from_id("not-a-uuid")
        assert a == seed_from_id("not-a-uuid")
        assert 0.0 <= a <= 1.0


def _radii(outline, cx, cy):
    return np.hypot(outline[:, 0] - cx, outline[:, 1] - cy)


class TestOutlines:
    def test_spiky_star(self):
        pts = spiky_outline(50.0, 50.0, 10.0)
        assert pts.shape == (16, 2)
        # First spike points straight up
        assert pts[0] == pytest.approx([50.0, 40.0])
        radii = _radii(pts, 50.0, 50.0)
        assert radii[0::2] == pytest.approx([10.0] * 8)
        assert radii[1::2] == pytest.approx([4.2] * 8)

    def test_jagged_radii_in_band(self):
        pts = jagged_outline(0.0, 0.0, 20.0, seed=0.37)
        assert pts.shape == (7, 2)
        radii = _radii(pts, 0.0, 0.0)
        assert np.all(radii >= 0.45 * 20.0 - 1e-9)
        assert np.all(radii <= 1.35 * 20.0 + 1e-9)

    def test_jagged_depends_on_seed(self):
        a = jagged_outline(0.0, 0.0, 20.0, seed=0.1)
        b = jagged_outline(0.0, 0.0, 20.0, seed=0.9)
        assert not np.allclose(a, b)

    def test_smooth_is_round(self):
        pts = blob_outline("smooth", 5.0, 5.0, 18.0)
        assert len(pts) >= 24
        assert _radii(pts, 5.0, 5.0) == pytest.approx([18.0] * len(pts))

    def test_unknown_shape_draws_smooth(self):
        assert np.allclose(blob_outline("blobby", 0, 0, 10), blob_outline("smooth", 0, 0, 10))

    def test_jagged_first_vertex_is_above_center(self):
        pts = jagged_outline(0.0, 0.0, 10.0, seed=0.0)
        assert pts[0][0] == pytest.approx(0.0, abs=1e-9)
        assert pts[0][1] < 0
        assert math.isfinite(float(pts.sum()))
