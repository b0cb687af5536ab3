"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from mural.models.entry import Category, Shape


class CreateEntryRequest(BaseModel):
    """An already-classified expression. Classification happens upstream."""

    text: str = Field(..., description="Message text (max 284 characters)")
    user_id: str | None = Field(default=None, description="Opaque local user token")
    color: str = Field(default="#888888", pattern=r"^#[0-9a-fA-F]{6}$")
    shape: Shape = "smooth"
    intensity: int | None = Field(default=None, ge=1, le=10)
    category: Category | None = None
    embedding: list[float] = Field(default_factory=list, description="Semantic embedding")


class ResonateRequest(BaseModel):
    target_id: str = Field(..., description="Entry being resonated with")
    actor_id: str = Field(..., description="User token of whoever resonated")
