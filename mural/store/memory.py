"""Entry store — in-memory reference implementation of the store contracts.

Holds entries (with their embeddings) and resonances, and answers the
queries the mural consumes:

- recent stream, reverse chronological, capped at 50
- similar entries by cosine distance (< 0.5, at most 8)
- similar entries of the same owner (< 0.5, at most 5)
- resonances received by an owner in the last 10 seconds (at most 20)

Classification and embedding happen upstream; entries arrive with colour,
shape and embedding already set.
"""

from __future__ import annotations

import logging
import random
import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import numpy as np
from numpy.typing import NDArray

from mural.models.entry import Entry, IncomingResonance, Resonance, SimilarMoment

logger = logging.getLogger(__name__)

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.I)

MAX_MESSAGE_CHARS = 284
STREAM_LIMIT = 50
SIMILAR_LIMIT = 8
SIMILAR_OWN_LIMIT = 5
# Cosine distance: 0 identical, 1 orthogonal, 2 opposite
SIMILAR_MAX_DISTANCE = 0.5
RESONANCE_WINDOW_SECONDS = 10.0
RESONANCE_LIMIT = 20
# New entries land at least this far from the reference edges
POSITION_MARGIN = 50


class StoreValidationError(ValueError):
    """Rejected input (missing/invalid ids, bad text)."""


class EntryNotFoundError(LookupError):
    pass


class OwnershipError(PermissionError):
    """The caller does not own the entry it tried to change."""


def is_uuid(value: str | None) -> bool:
    return bool(value) and UUID_RE.match(value) is not None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StoredEntry:
    """One entry plus the embedding the store keeps private."""

    id: str
    message: str
    created_at: datetime
    user_id: str | None = None
    color: str = "#888888"
    shape: str = "smooth"
    intensity: int | None = None
    category: str | None = None
    x: float = 0.0
    y: float = 0.0
    embedding: NDArray[np.float64] | None = field(default=None, repr=False)

    def to_entry(self, similarity: float | None = None) -> Entry:
        return Entry(
            id=self.id,
            user_id=self.user_id,
            message=self.message,
            color=self.color,
            shape=self.shape,
            intensity=self.intensity,
            category=self.category,
            x=self.x,
            y=self.y,
            created_at=self.created_at,
            similarity=similarity,
        )


class EntryStore:
    """In-memory entries + resonances with vector similarity."""

    def __init__(
        self,
        ref_width: float = 800.0,
        ref_height: float = 600.0,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.ref_width = ref_width
        self.ref_height = ref_height
        self._clock = clock or utc_now
        self._rng = rng or random.Random()
        self._entries: dict[str, StoredEntry] = {}
        self._resonances: list[Resonance] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries

    def get(self, entry_id: str) -> StoredEntry | None:
        return self._entries.get(entry_id)

    def now(self) -> datetime:
        return self._clock()

    # ── Writes ──

    def create_entry(
        self,
        text: str,
        user_id: str | None = None,
        color: str = "#888888",
        shape: str = "smooth",
        intensity: int | None = None,
        category: str | None = None,
        embedding: list[float] | None = None,
        created_at: datetime | None = None,
    ) -> StoredEntry:
        """Store an already-classified entry at a random reference position."""
        message = (text or "").strip()
        if not message:
            raise StoreValidationError("text is required")
        if len(text) > MAX_MESSAGE_CHARS:
            raise StoreValidationError(f"text exceeds {MAX_MESSAGE_CHARS} characters")

        entry = StoredEntry(
            id=str(uuid.uuid4()),
            # Non-UUID tokens are stored as anonymous
            user_id=user_id if is_uuid(user_id) else None,
            message=message,
            color=color,
            shape=shape,
            intensity=intensity,
            category=category,
            x=float(self._rng.randint(POSITION_MARGIN, int(self.ref_width) - POSITION_MARGIN)),
            y=float(self._rng.randint(POSITION_MARGIN, int(self.ref_height) - POSITION_MARGIN)),
            created_at=created_at or self._clock(),
            embedding=np.asarray(embedding, dtype=float) if embedding else None,
        )
        self._entries[entry.id] = entry
        logger.debug("Created entry %s (%s, %s)", entry.id, entry.shape, entry.color)
        return entry

    def delete_entry(self, entry_id: str, user_id: str | None) -> StoredEntry:
        if not entry_id or not user_id:
            raise StoreValidationError("entry id and userId are required")
        entry = self._entries.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        if entry.user_id is None or entry.user_id != user_id:
            raise OwnershipError(f"entry {entry_id} is not owned by caller")

        del self._entries[entry_id]
        self._resonances = [r for r in self._resonances if r.target_entry_id != entry_id]
        logger.info("Deleted entry %s", entry_id)
        return entry

    def resonate(self, target_id: str, actor_id: str) -> Resonance:
        if not target_id:
            raise StoreValidationError("target_id is required")
        if not actor_id:
            raise StoreValidationError("actor_id is required")
        if target_id not in self._entries:
            raise EntryNotFoundError(target_id)

        resonance = Resonance(
            id=str(uuid.uuid4()),
            target_entry_id=target_id,
            actor_entry_id=actor_id,
            created_at=self._clock(),
        )
        self._resonances.append(resonance)
        return resonance

    def clear(self) -> None:
        self._entries.clear()
        self._resonances.clear()

    # ── Queries ──

    def stream(self, limit: int = STREAM_LIMIT) -> list[Entry]:
        """Most recent entries first."""
        ordered = sorted(self._entries.values(), key=lambda e: e.created_at, reverse=True)
        return [e.to_entry() for e in ordered[:limit]]

    def similar(self, entry_id: str, limit: int = SIMILAR_LIMIT) -> list[Entry]:
        """Other entries within the distance threshold, most similar first."""
        target = self._entries.get(entry_id)
        if target is None or target.embedding is None:
            return []
        candidates = [e for e in self._entries.values() if e.id != entry_id]
        ranked = _rank_by_distance(target.embedding, candidates, limit)
        return [e.to_entry(similarity=1.0 - d) for e, d in ranked]

    def similar_own(
        self, entry_id: str, user_id: str, limit: int = SIMILAR_OWN_LIMIT
    ) -> list[SimilarMoment]:
        """The owner's other entries close to one of their own."""
        if not entry_id or not user_id:
            raise StoreValidationError("entryId and userId are required")
        if not is_uuid(entry_id) or not is_uuid(user_id):
            raise StoreValidationError("Invalid UUID")

        target = self._entries.get(entry_id)
        if target is None or target.user_id != user_id or target.embedding is None:
            return []
        candidates = [
            e for e in self._entries.values() if e.user_id == user_id and e.id != entry_id
        ]
        ranked = _rank_by_distance(target.embedding, candidates, limit)
        return [
            SimilarMoment(id=e.id, message=e.message, created_at=e.created_at, distance=d)
            for e, d in ranked
        ]

    def incoming_resonances(
        self,
        user_id: str,
        window_seconds: float = RESONANCE_WINDOW_SECONDS,
        limit: int = RESONANCE_LIMIT,
    ) -> list[IncomingResonance]:
        """Resonances on the user's entries from the last few seconds, newest first."""
        if not user_id:
            raise StoreValidationError("userId query param required")
        cutoff = self._clock() - timedelta(seconds=window_seconds)

        out: list[IncomingResonance] = []
        for r in sorted(self._resonances, key=lambda r: r.created_at, reverse=True):
            if r.created_at <= cutoff:
                break
            entry = self._entries.get(r.target_entry_id)
            if entry is None or entry.user_id != user_id:
                continue
            out.append(
                IncomingResonance(
                    **entry.to_entry().model_dump(exclude={"similarity"}),
                    target_entry_id=r.target_entry_id,
                )
            )
            if len(out) >= limit:
                break
        return out


def _rank_by_distance(
    target: NDArray[np.float64],
    candidates: list[StoredEntry],
    limit: int,
) -> list[tuple[StoredEntry, float]]:
    """(entry, cosine distance) under the threshold, nearest first."""
    usable = [
        e for e in candidates if e.embedding is not None and e.embedding.shape == target.shape
    ]
    if not usable:
        return []
    target_norm = np.linalg.norm(target)
    if target_norm == 0:
        return []

    matrix = np.vstack([e.embedding for e in usable])
    norms = np.linalg.norm(matrix, axis=1)
    valid = norms > 0
    distances = np.full(len(usable), np.inf)
    distances[valid] = 1.0 - (matrix[valid] @ target) / (norms[valid] * target_norm)

    order = np.argsort(distances, kind="stable")
    ranked: list[tuple[StoredEntry, float]] = []
    for i in order:
        d = max(0.0, float(distances[i]))
        if not d < SIMILAR_MAX_DISTANCE:
            break
        ranked.append((usable[i], d))
        if len(ranked) >= limit:
            break
    return ranked


# ── Demo data ──

_SEED_MESSAGES: dict[str, list[str]] = {
    "work": [
        "School is exhausting",
        "Deadlines are crushing me",
        "I work so hard but it never feels like enough",
        "I have a presentation tomorrow and I'm not ready",
        "The pressure to succeed is suffocating",
        "I don't know what career I actually want",
    ],
    "relationships": [
        "I feel lonely even when I'm surrounded by people",
        "My friend doesn't understand me anymore",
        "No one checked in on me today",
        "My closest friend is slowly drifting away",
        "I wish I had someone I could talk to right now",
        "The person I trusted most broke my trust",
    ],
    "self": [
        "I'm proud of myself today",
        "I keep making the same mistakes over and over",
        "I actually feel okay today and that means something",
        "I'm so tired of pretending to be fine",
        "I'm getting better, slowly",
        "I can't stop overthinking",
        "I'm still here and that's enough",
    ],
}

_SEED_PALETTE: dict[str, list[str]] = {
    "work": ["#FF4444", "#FF8800", "#663399"],
    "relationships": ["#4444FF", "#88CCFF", "#333333"],
    "self": ["#FFDD00", "#44FF44", "#88CCFF"],
}

_EMBEDDING_DIM = 16
_EMBEDDING_NOISE = 0.1


def seed_store(store: EntryStore, seed: int | None = None, spread_minutes: int = 90) -> int:
    """Fill ``store`` with demo entries whose embeddings cluster by category."""
    rng = random.Random(seed)
    np_rng = np.random.default_rng(seed)
    categories = list(_SEED_MESSAGES)
    axes = {c: np.eye(_EMBEDDING_DIM)[i] for i, c in enumerate(categories)}

    now = store.now()
    rows = [(c, m) for c in categories for m in _SEED_MESSAGES[c]]
    rng.shuffle(rows)

    for i, (category, message) in enumerate(rows):
        embedding = axes[category] + np_rng.normal(0.0, _EMBEDDING_NOISE, _EMBEDDING_DIM)
        store.create_entry(
            text=message,
            user_id=str(uuid.UUID(int=rng.getrandbits(128), version=4)),
            color=rng.choice(_SEED_PALETTE[category]),
            shape=rng.choice(["smooth", "spiky", "jagged"]),
            intensity=rng.randint(1, 10),
            category=category,
            embedding=embedding.tolist(),
            created_at=now - timedelta(minutes=spread_minutes * (len(rows) - i) / len(rows)),
        )

    logger.info("Seeded %d entries", len(rows))
    return len(rows)


_store: EntryStore | None = None


def get_entry_store() -> EntryStore:
    """Get or create the global EntryStore singleton."""
    global _store
    if _store is None:
        _store = EntryStore()
    return _store


def reset_entry_store(store: EntryStore | None = None) -> EntryStore:
    global _store
    _store = store if store is not None else EntryStore()
    return _store
