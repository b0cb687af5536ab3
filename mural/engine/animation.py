"""Animation state — spawn interpolation, glow timers, deletion ephemera.

All records are keyed on timestamps in milliseconds and advanced by the
render loop. Nothing here owns a timer: expiry is evaluated when a record is
read, and an expired record is treated exactly like a missing one.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

from mural.engine.config import MuralConfig


def cosine_ease(t: float) -> float:
    """Cosine ease-in-out on [0, 1]. Monotone, no overshoot."""
    t = max(0.0, min(1.0, t))
    return (1.0 - math.cos(math.pi * t)) / 2.0


def similarity_tier(score: float, config: MuralConfig | None = None) -> float:
    """Visual intensity multiplier for a similarity score."""
    cfg = config or MuralConfig()
    for threshold, multiplier in cfg.similarity_tiers:
        if score > threshold:
            return multiplier
    return cfg.similarity_baseline


# ── Display placement ──


@dataclass
class Placement:
    """Per-entity spawn animation from ``start`` to ``target``.

    Active window is [start_ts + delay, start_ts + delay + duration].
    ``settled`` is a one-way latch: once set, position() is the target forever.
    """

    start: tuple[float, float]
    target: tuple[float, float]
    start_ts: float
    delay: float = 0.0
    duration: float = 1400.0
    settled: bool = False

    @classmethod
    def at_rest(cls, target: tuple[float, float], now: float) -> Placement:
        """A placement that skips the spawn animation."""
        return cls(start=target, target=target, start_ts=now, duration=0.0, settled=True)

    def progress(self, now: float) -> float:
        if self.settled:
            return 1.0
        if self.duration <= 0:
            return 1.0
        t = (now - self.start_ts - self.delay) / self.duration
        return max(0.0, min(1.0, t))

    def position(self, now: float) -> tuple[float, float]:
        """Interpolated position at ``now``. Does not flip the latch."""
        if self.settled:
            return self.target
        t = self.progress(now)
        if t <= 0.0:
            return self.start
        if t >= 1.0:
            return self.target
        e = cosine_ease(t)
        sx, sy = self.start
        tx, ty = self.target
        return (sx + (tx - sx) * e, sy + (ty - sy) * e)

    def advance(self, now: float) -> bool:
        """Latch ``settled`` when the window has elapsed. True only on the transition."""
        if self.settled:
            return False
        if self.progress(now) >= 1.0:
            self.settled = True
            return True
        return False


# ── Glow records ──


class GlowStore:
    """Resonance and similarity glow timers with lazy eviction."""

    def __init__(self, config: MuralConfig | None = None) -> None:
        self.config = config or MuralConfig()
        self._resonance: dict[str, float] = {}
        self._similarity: dict[str, tuple[float, float]] = {}

    @property
    def duration(self) -> float:
        return self.config.glow_duration_ms

    # Writes are plain overwrites so duplicate facts are harmless.

    def set_resonance(self, entity_id: str, now: float) -> None:
        self._resonance[entity_id] = now

    def set_similarity(self, entity_id: str, now: float, score: float) -> None:
        self._similarity[entity_id] = (now, score)

    def discard(self, entity_id: str) -> None:
        self._resonance.pop(entity_id, None)
        self._similarity.pop(entity_id, None)

    def clear(self) -> None:
        self._resonance.clear()
        self._similarity.clear()

    # Reads evict expired records.

    def resonance_age(self, entity_id: str, now: float) -> float | None:
        start = self._resonance.get(entity_id)
        if start is None:
            return None
        age = now - start
        if age >= self.duration:
            del self._resonance[entity_id]
            return None
        if age < 0:
            return None
        return age

    def similarity_age(self, entity_id: str, now: float) -> tuple[float, float] | None:
        """(age, score) for an active similarity glow."""
        record = self._similarity.get(entity_id)
        if record is None:
            return None
        start, score = record
        age = now - start
        if age >= self.duration:
            del self._similarity[entity_id]
            return None
        if age < 0:
            return None
        return age, score

    def has_resonance(self, entity_id: str, now: float) -> bool:
        return self.resonance_age(entity_id, now) is not None

    def has_similarity(self, entity_id: str, now: float) -> bool:
        return self.similarity_age(entity_id, now) is not None

    def resonance_pulse(self, entity_id: str, now: float) -> float | None:
        """|sin(t·π·k)|·(1−t): k pulses damping to zero at expiry."""
        age = self.resonance_age(entity_id, now)
        if age is None:
            return None
        t = age / self.duration
        return abs(math.sin(t * math.pi * self.config.resonance_pulses)) * (1.0 - t)

    def similarity_intensity(self, entity_id: str, now: float) -> float | None:
        """Tier multiplier for the score, faded linearly to zero at expiry."""
        active = self.similarity_age(entity_id, now)
        if active is None:
            return None
        age, score = active
        t = age / self.duration
        return similarity_tier(score, self.config) * (1.0 - t)

    def sweep(self, now: float) -> None:
        """Evict every expired record (covers ids no longer drawn)."""
        for entity_id in list(self._resonance):
            self.resonance_age(entity_id, now)
        for entity_id in list(self._similarity):
            self.similarity_age(entity_id, now)

    @property
    def resonance_ids(self) -> set[str]:
        return set(self._resonance)

    @property
    def similarity_ids(self) -> set[str]:
        return set(self._similarity)

    def __len__(self) -> int:
        return len(self._resonance) + len(self._similarity)


# ── Deletion ephemera ──


@dataclass
class FloatAway:
    """Silhouette of a deleted blob drifting upward while fading out."""

    x: float
    y: float
    color: str
    shape: str
    seed: float
    start_ts: float
    duration: float = 1600.0
    rise: float = 60.0

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return max(0.0, min(1.0, (now - self.start_ts) / self.duration))

    def position(self, now: float) -> tuple[float, float]:
        return (self.x, self.y - self.rise * cosine_ease(self.progress(now)))

    def alpha(self, now: float) -> float:
        return 1.0 - self.progress(now)

    def alive(self, now: float) -> bool:
        return self.progress(now) < 1.0


@dataclass
class Particle:
    """A point flung out of a deleted blob, linear motion and linear fade."""

    x: float
    y: float
    vx: float
    vy: float
    color: str
    start_ts: float
    fade_ms: float = 900.0

    def position(self, now: float) -> tuple[float, float]:
        age = max(0.0, now - self.start_ts)
        return (self.x + self.vx * age, self.y + self.vy * age)

    def alpha(self, now: float) -> float:
        if self.fade_ms <= 0:
            return 0.0
        return max(0.0, 1.0 - (now - self.start_ts) / self.fade_ms)

    def alive(self, now: float) -> bool:
        return self.alpha(now) > 0.0


@dataclass
class EphemeraPool:
    """Visual-only deletion effects. Nothing here is persisted."""

    config: MuralConfig = field(default_factory=MuralConfig)
    floats: list[FloatAway] = field(default_factory=list)
    particles: list[Particle] = field(default_factory=list)

    def spawn_deletion(
        self,
        entity_id: str,
        position: tuple[float, float],
        color: str,
        shape: str,
        seed: float,
        now: float,
    ) -> None:
        cfg = self.config
        x, y = position
        self.floats.append(
            FloatAway(
                x=x,
                y=y,
                color=color,
                shape=shape,
                seed=seed,
                start_ts=now,
                duration=cfg.float_away_ms,
                rise=cfg.float_away_rise,
            )
        )
        # Seeded per entity so the scatter is reproducible
        rng = random.Random(entity_id)
        for i in range(cfg.particle_count):
            angle = 2 * math.pi * i / cfg.particle_count + rng.uniform(-0.2, 0.2)
            speed = cfg.particle_speed * rng.uniform(0.5, 1.0)
            self.particles.append(
                Particle(
                    x=x,
                    y=y,
                    vx=math.cos(angle) * speed,
                    vy=math.sin(angle) * speed,
                    color=color,
                    start_ts=now,
                    fade_ms=cfg.particle_fade_ms * rng.uniform(0.7, 1.0),
                )
            )

    def update(self, now: float) -> None:
        """Drop everything that has fully faded."""
        self.floats = [f for f in self.floats if f.alive(now)]
        self.particles = [p for p in self.particles if p.alive(now)]

    def clear(self) -> None:
        self.floats.clear()
        self.particles.clear()

    def __len__(self) -> int:
        return len(self.floats) + len(self.particles)
