"""Entry and resonance wire models shared by the store server and client."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Shape = Literal["smooth", "spiky", "jagged"]
Category = Literal["work", "relationships", "self"]


class Entry(BaseModel):
    """One submitted expression as the store returns it."""

    id: str
    user_id: str | None = None
    message: str
    color: str = "#888888"
    shape: Shape = "smooth"
    intensity: int | None = None
    category: str | None = None
    x: float = 0.0
    y: float = 0.0
    created_at: datetime
    # Only present on similarity-search results
    similarity: float | None = None


class SimilarMoment(BaseModel):
    """One of the owner's own past entries close to a selected entry."""

    id: str
    message: str
    created_at: datetime
    distance: float


class Resonance(BaseModel):
    id: str
    target_entry_id: str
    actor_entry_id: str
    created_at: datetime


class IncomingResonance(Entry):
    """A recent resonance joined with the (owned) entry it targeted."""

    target_entry_id: str = Field(..., description="Entry that received the resonance")
