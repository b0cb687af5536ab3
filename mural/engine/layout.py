"""Spiral layout — assigns non-overlapping reference-space targets.

Candidates walk an Archimedean spiral out from the reference centre:

    angle  = index * angular_step
    radius = separation * angle + base_offset

A candidate within ``min_distance`` of an existing target is pushed further
along the spiral by ``retry_increment`` radians. After ``max_attempts`` the
last candidate is accepted as-is; the caller can see that through
``SpiralSlot.exhausted``.

Every search starts no earlier than one step past the previous slot's angle
(``after_angle``), so the spiral only grows outward. Insertions continue
from the spiral tail the same way and blobs already on screen never move.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from mural.engine.config import MuralConfig, SpiralParams
from mural.utils.geometry import as_points, clamp_point, nearest_distance, polar_offset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpiralSlot:
    """Outcome of one spiral search."""

    point: tuple[float, float]
    angle: float
    attempts: int
    exhausted: bool = False


@dataclass
class LayoutResult:
    """Outcome of a full layout pass."""

    slots: list[SpiralSlot] = field(default_factory=list)

    @property
    def positions(self) -> list[tuple[float, float]]:
        return [s.point for s in self.slots]

    @property
    def exhausted(self) -> int:
        return sum(1 for s in self.slots if s.exhausted)

    @property
    def tail_angle(self) -> float:
        return self.slots[-1].angle if self.slots else 0.0


class SpiralLayout:
    """Deterministic spiral placement with collision back-off."""

    def __init__(self, config: MuralConfig | None = None) -> None:
        self.config = config or MuralConfig()

    def place(
        self,
        index: int,
        existing_targets: list[tuple[float, float]],
        params: SpiralParams | None = None,
        after_angle: float | None = None,
    ) -> tuple[float, float]:
        """Reference-space target for the index-th entity."""
        return self.search(index, existing_targets, params, after_angle).point

    def search(
        self,
        index: int,
        existing_targets: list[tuple[float, float]],
        params: SpiralParams | None = None,
        after_angle: float | None = None,
    ) -> SpiralSlot:
        """Walk the spiral from the index's angle until a free candidate turns up."""
        p = params or self.config.full_layout
        existing = as_points(existing_targets)

        angle = index * p.angular_step
        if after_angle is not None:
            angle = max(angle, after_angle + p.angular_step)

        point = self._candidate(angle, p)
        for attempt in range(1, p.max_attempts + 1):
            point = self._candidate(angle, p)
            if nearest_distance(point, existing) >= p.min_distance:
                return SpiralSlot(point=point, angle=angle, attempts=attempt)
            if attempt < p.max_attempts:
                angle += p.retry_increment

        logger.debug(
            "Spiral retries exhausted for index %d after %d attempts", index, p.max_attempts
        )
        return SpiralSlot(point=point, angle=angle, attempts=p.max_attempts, exhausted=True)

    def layout_all(self, count: int) -> LayoutResult:
        """Full layout of ``count`` entities with the loose parameter set."""
        result = LayoutResult()
        targets: list[tuple[float, float]] = []
        for i in range(count):
            # Never restart behind a slot that collision retries already pushed outward
            after = result.slots[-1].angle if result.slots else None
            slot = self.search(i, targets, self.config.full_layout, after_angle=after)
            result.slots.append(slot)
            targets.append(slot.point)

        if result.exhausted:
            logger.info(
                "Layout: %d/%d placements accepted in collision", result.exhausted, count
            )
        return result

    def append(
        self,
        existing_targets: list[tuple[float, float]],
        tail_angle: float | None = None,
    ) -> SpiralSlot:
        """Place one new entity at the spiral tail with the tight parameter set."""
        return self.search(
            len(existing_targets),
            existing_targets,
            self.config.insert_layout,
            after_angle=tail_angle,
        )

    def _candidate(self, angle: float, p: SpiralParams) -> tuple[float, float]:
        radius = p.separation * angle + p.base_offset
        cfg = self.config
        return clamp_point(
            polar_offset(cfg.center, radius, angle),
            cfg.ref_width,
            cfg.ref_height,
            cfg.edge_margin,
        )
