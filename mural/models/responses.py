"""API response models."""

from __future__ import annotations

from pydantic import BaseModel

from mural.models.entry import Resonance


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    entries: int = 0


class CreateEntryResponse(BaseModel):
    id: str
    color: str
    shape: str
    x: float
    y: float
    intensity: int | None = None
    category: str | None = None


class ResonateResponse(BaseModel):
    success: bool = True
    resonance: Resonance


class DeleteResponse(BaseModel):
    success: bool = True
    id: str
