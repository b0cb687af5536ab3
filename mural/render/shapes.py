"""Blob silhouettes — deterministic per-entity outlines in drawing coordinates.

Every outline is an (N, 2) float array of vertices. The smooth shape is a
sampled circle so all three shapes fill through the same polygon path.
"""

from __future__ import annotations

import hashlib
import math

import numpy as np
from numpy.typing import NDArray

# ── Named constants ──

_SEED_HEX_DIGITS = 8
_SEED_DENOMINATOR = 0xFFFFFFFF

_SPIKES = 8
_SPIKE_INNER_RATIO = 0.42

_JAGGED_POINTS = 7
_JAGGED_JITTER_BASE = 0.45
_JAGGED_JITTER_SPAN = 0.9

# Circle vertices per logical pixel of radius, floor 24
_CIRCLE_MIN_VERTICES = 24

SHAPES = ("smooth", "spiky", "jagged")


def seed_from_id(entity_id: str) -> float:
    """Deterministic float in [0, 1] from an entity id.

    UUID-like ids use their leading hex digits directly; anything else is
    hashed first so the seed is still stable.
    """
    digits = entity_id.replace("-", "")[:_SEED_HEX_DIGITS]
    try:
        value = int(digits, 16)
    except ValueError:
        value = int(hashlib.sha256(entity_id.encode()).hexdigest()[:_SEED_HEX_DIGITS], 16)
    return value / _SEED_DENOMINATOR


def smooth_outline(cx: float, cy: float, r: float) -> NDArray[np.float64]:
    n = max(_CIRCLE_MIN_VERTICES, int(math.ceil(r)) * 2)
    theta = np.linspace(0.0, 2 * np.pi, n, endpoint=False)
    return np.column_stack([cx + r * np.cos(theta), cy + r * np.sin(theta)])


def spiky_outline(cx: float, cy: float, r: float) -> NDArray[np.float64]:
    """Star with alternating outer/inner vertices, first spike straight up."""
    i = np.arange(_SPIKES * 2)
    theta = i * np.pi / _SPIKES - np.pi / 2
    radii = np.where(i % 2 == 0, r, r * _SPIKE_INNER_RATIO)
    return np.column_stack([cx + radii * np.cos(theta), cy + radii * np.sin(theta)])


def jagged_outline(cx: float, cy: float, r: float, seed: float) -> NDArray[np.float64]:
    """Irregular heptagon; vertex radii jittered by the entity seed."""
    i = np.arange(_JAGGED_POINTS)
    theta = i * 2 * np.pi / _JAGGED_POINTS - np.pi / 2
    jitter = _JAGGED_JITTER_BASE + _JAGGED_JITTER_SPAN * ((np.sin(seed * 100 + i * 2.4) + 1) / 2)
    return np.column_stack([cx + r * jitter * np.cos(theta), cy + r * jitter * np.sin(theta)])


def blob_outline(shape: str, cx: float, cy: float, r: float, seed: float = 0.0) -> NDArray[np.float64]:
    """Outline for ``shape``; unknown shapes draw as smooth."""
    if shape == "spiky":
        return spiky_outline(cx, cy, r)
    if shape == "jagged":
        return jagged_outline(cx, cy, r, seed)
    return smooth_outline(cx, cy, r)
