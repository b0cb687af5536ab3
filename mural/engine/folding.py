"""Folding — turn newly learned facts into state deltas.

Each planner is a pure function of (state snapshot, facts, now) returning a
delta; ``apply_*`` commits the delta. Polling and push subscriptions feed the
same planners, and replaying a fact that is already known yields an empty
delta.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from mural.engine.animation import Placement
from mural.engine.config import MuralConfig
from mural.engine.layout import SpiralLayout
from mural.engine.state import Blob, MuralState


@dataclass(frozen=True)
class Insertion:
    """A blob to append on top of the draw order with its spawn placement."""

    blob: Blob
    placement: Placement
    angle: float


def spawn_placement(
    blob: Blob,
    target: tuple[float, float],
    now: float,
    config: MuralConfig,
    delay: float = 0.0,
) -> Placement:
    """Spawn from the reference centre, unless the blob was created moments ago."""
    if now - blob.created_ms() < config.recency_window_ms:
        return Placement.at_rest(target, now)
    return Placement(
        start=config.center,
        target=target,
        start_ts=now,
        delay=delay,
        duration=config.spawn_duration_ms,
    )


def plan_full_layout(
    blobs: list[Blob],
    now: float,
    layout: SpiralLayout,
) -> list[Insertion]:
    """Initial layout: loose spiral, cascading spawn delays."""
    cfg = layout.config
    result = layout.layout_all(len(blobs))
    return [
        Insertion(
            blob=blob,
            placement=spawn_placement(blob, slot.point, now, cfg, delay=i * cfg.stagger_ms),
            angle=slot.angle,
        )
        for i, (blob, slot) in enumerate(zip(blobs, result.slots))
    ]


def plan_insertions(
    state: MuralState,
    blobs: Iterable[Blob],
    now: float,
    layout: SpiralLayout,
) -> list[Insertion]:
    """Tail insertions for blobs not yet on the mural (and not deleted locally)."""
    known = set(state.tombstones)
    known.update(b.id for b in state.entities)
    targets = state.targets()
    tail = state.spiral_tail_angle

    planned: list[Insertion] = []
    for blob in blobs:
        if blob.id in known:
            continue
        slot = layout.append(targets, tail)
        planned.append(
            Insertion(
                blob=blob,
                placement=spawn_placement(blob, slot.point, now, layout.config),
                angle=slot.angle,
            )
        )
        known.add(blob.id)
        targets.append(slot.point)
        tail = slot.angle
    return planned


def apply_insertions(state: MuralState, insertions: list[Insertion]) -> int:
    """Commit planned insertions. Returns how many were actually added."""
    added = 0
    for ins in insertions:
        if ins.blob.id in state.tombstones:
            continue
        if state.add(ins.blob, ins.placement):
            if ins.placement.settled:
                # No spawn animation will settle it later
                ins.blob.x, ins.blob.y = ins.placement.target
            state.spiral_tail_angle = ins.angle
            added += 1
    return added


def plan_resonance_glows(state: MuralState, target_ids: Iterable[str], now: float) -> list[str]:
    """Targets of incoming resonances that are not already glowing."""
    planned: list[str] = []
    for entity_id in target_ids:
        if entity_id in planned or entity_id in state.tombstones:
            continue
        if state.glows.has_resonance(entity_id, now):
            continue
        planned.append(entity_id)
    return planned


def apply_resonance_glows(state: MuralState, entity_ids: list[str], now: float) -> None:
    for entity_id in entity_ids:
        state.glows.set_resonance(entity_id, now)


def plan_similarity_glows(
    selected_id: str,
    results: Iterable[Blob],
) -> list[tuple[str, float]]:
    """(id, score) pairs for every similarity result other than the selection itself."""
    return [
        (b.id, b.similarity if b.similarity is not None else 0.0)
        for b in results
        if b.id != selected_id
    ]


def apply_similarity_glows(state: MuralState, scored: list[tuple[str, float]], now: float) -> None:
    for entity_id, score in scored:
        state.glows.set_similarity(entity_id, now, score)
