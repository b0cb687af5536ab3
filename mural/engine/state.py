"""MuralState — the single mutable state object shared by render and input paths.

Per-entity data → Blob
Per-entity animation → MuralState.placements / glows
Global view → MuralState.view

The render step and the input step both receive the same MuralState at
construction; they never hold their own copies of entity data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from mural.engine.animation import EphemeraPool, GlowStore, Placement
from mural.engine.config import MuralConfig
from mural.models.entry import Entry, SimilarMoment


@dataclass
class Blob:
    """One entity on the mural."""

    id: str
    message: str
    created_at: datetime
    owner: str | None = None
    color: str = "#888888"
    shape: str = "smooth"
    intensity: int | None = None
    category: str | None = None
    # Canonical reference-space position (committed when the spawn settles)
    x: float = 0.0
    y: float = 0.0
    # Transient: set only on similarity-search results
    similarity: float | None = None

    @classmethod
    def from_entry(cls, entry: Entry) -> Blob:
        return cls(
            id=entry.id,
            owner=entry.user_id,
            message=entry.message,
            color=entry.color,
            shape=entry.shape,
            intensity=entry.intensity,
            category=entry.category,
            x=entry.x,
            y=entry.y,
            created_at=entry.created_at,
            similarity=entry.similarity,
        )

    def is_owned_by(self, user_id: str | None) -> bool:
        return bool(self.owner) and self.owner == user_id

    def created_ms(self) -> float:
        ts = self.created_at
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.timestamp() * 1000.0


@dataclass
class ViewState:
    """Zoom scale and pan centre (reference coordinates)."""

    scale: float = 1.0
    center_x: float = 400.0
    center_y: float = 300.0


@dataclass
class SidePanel:
    """Panel opened by a selection: own history for own blobs, resonate for others."""

    blob: Blob
    moments: list[SimilarMoment] = field(default_factory=list)
    loading: bool = False
    can_resonate: bool = False


def time_ago(created_at: datetime, now: datetime | None = None) -> str:
    """Coarse human label for how long ago something was written."""
    now = now or datetime.now(timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    days = int((now - created_at).total_seconds() // 86400)
    if days <= 0:
        return "today"
    if days == 1:
        return "yesterday"
    if days < 7:
        return f"{days} days ago"
    weeks = days // 7
    if weeks == 1:
        return "1 week ago"
    if weeks < 5:
        return f"{weeks} weeks ago"
    months = days // 30
    return "1 month ago" if months <= 1 else f"{months} months ago"


@dataclass
class MuralState:
    """Shared state for the whole mural."""

    config: MuralConfig = field(default_factory=MuralConfig)
    # Canonical entity list, insertion order = draw order (last drawn on top)
    entities: list[Blob] = field(default_factory=list)
    placements: dict[str, Placement] = field(default_factory=dict)
    glows: GlowStore = field(init=False)
    ephemera: EphemeraPool = field(init=False)
    view: ViewState = field(init=False)

    highlighted: str | None = None
    side_panel: SidePanel | None = None
    # Ids removed locally; later fetches must not bring them back
    tombstones: set[str] = field(default_factory=set)
    spiral_tail_angle: float | None = None

    loading: bool = True
    error: str | None = None

    _index: dict[str, Blob] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self.glows = GlowStore(self.config)
        self.ephemera = EphemeraPool(self.config)
        cx, cy = self.config.center
        self.view = ViewState(center_x=cx, center_y=cy)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._index

    def __len__(self) -> int:
        return len(self.entities)

    def get(self, entity_id: str) -> Blob | None:
        return self._index.get(entity_id)

    def add(self, blob: Blob, placement: Placement) -> bool:
        """Append a blob on top of the draw order. False if already known."""
        if blob.id in self._index:
            return False
        self.entities.append(blob)
        self._index[blob.id] = blob
        self.placements[blob.id] = placement
        return True

    def remove(self, entity_id: str) -> Blob | None:
        """Drop a blob and every per-entity record that refers to it."""
        blob = self._index.pop(entity_id, None)
        if blob is None:
            return None
        self.entities = [b for b in self.entities if b.id != entity_id]
        self.placements.pop(entity_id, None)
        self.glows.discard(entity_id)
        if self.highlighted == entity_id:
            self.highlighted = None
        if self.side_panel is not None and self.side_panel.blob.id == entity_id:
            self.side_panel = None
        return blob

    def targets(self) -> list[tuple[float, float]]:
        """Resting targets of every placed blob, in draw order."""
        return [self.placements[b.id].target for b in self.entities if b.id in self.placements]

    def animated_position(self, blob: Blob, now: float) -> tuple[float, float]:
        placement = self.placements.get(blob.id)
        if placement is None:
            return (blob.x, blob.y)
        return placement.position(now)

    def clear(self) -> None:
        self.entities.clear()
        self._index.clear()
        self.placements.clear()
        self.glows.clear()
        self.ephemera.clear()
        self.highlighted = None
        self.side_panel = None
        self.tombstones.clear()
        self.spiral_tail_angle = None
