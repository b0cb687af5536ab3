"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray


def distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def as_points(points: NDArray[np.float64] | list[tuple[float, float]]) -> NDArray[np.float64]:
    """Coerce a point list into an Nx2 float array (empty input → shape (0, 2))."""
    pts = np.asarray(points, dtype=np.float64)
    if pts.size == 0:
        return np.empty((0, 2))
    return pts.reshape(-1, 2)


def nearest_distance(
    point: tuple[float, float],
    points: NDArray[np.float64] | list[tuple[float, float]],
) -> float:
    """Distance from point to the closest member of points. inf when points is empty."""
    pts = as_points(points)
    if len(pts) == 0:
        return float("inf")
    d = np.hypot(pts[:, 0] - point[0], pts[:, 1] - point[1])
    return float(np.min(d))


def min_pairwise_distance(points: NDArray[np.float64] | list[tuple[float, float]]) -> float:
    """Smallest distance between any two points. inf for fewer than two points."""
    pts = as_points(points)
    if len(pts) < 2:
        return float("inf")
    diffs = pts[:, None, :] - pts[None, :, :]
    d = np.sqrt(np.sum(diffs**2, axis=-1))
    np.fill_diagonal(d, np.inf)
    return float(np.min(d))


def polar_offset(
    center: tuple[float, float],
    radius: float,
    angle: float,
) -> tuple[float, float]:
    """center + radius·(cos angle, sin angle)."""
    return (center[0] + radius * math.cos(angle), center[1] + radius * math.sin(angle))


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def clamp_point(
    point: tuple[float, float],
    width: float,
    height: float,
    margin: float = 0.0,
) -> tuple[float, float]:
    """Clamp a point into [margin, width - margin] × [margin, height - margin]."""
    return (
        clamp(point[0], margin, width - margin),
        clamp(point[1], margin, height - margin),
    )
