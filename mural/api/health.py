"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from mural import __version__
from mural.dependencies import get_store
from mural.models.responses import HealthResponse
from mural.store.memory import EntryStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(store: EntryStore = Depends(get_store)) -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, entries=len(store))
