"""POST /api/resonate — record that someone resonated with an entry."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from mural.dependencies import get_store
from mural.models.requests import ResonateRequest
from mural.models.responses import ResonateResponse
from mural.store.memory import EntryNotFoundError, EntryStore, StoreValidationError

router = APIRouter()


@router.post("/resonate", response_model=ResonateResponse, status_code=201)
async def resonate(
    req: ResonateRequest,
    store: EntryStore = Depends(get_store),
) -> ResonateResponse:
    try:
        resonance = store.resonate(req.target_id, req.actor_id)
    except StoreValidationError as e:
        raise HTTPException(400, detail=str(e)) from e
    except EntryNotFoundError as e:
        raise HTTPException(404, detail="target entry not found") from e
    return ResonateResponse(success=True, resonance=resonance)
