"""Per-user endpoints: own similar moments and incoming resonances."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from mural.dependencies import get_store
from mural.models.entry import IncomingResonance, SimilarMoment
from mural.store.memory import EntryStore, StoreValidationError

router = APIRouter(prefix="/me")


@router.get("/similar", response_model=list[SimilarMoment])
async def similar_own(
    entry_id: str | None = Query(None, alias="entryId"),
    user_id: str | None = Query(None, alias="userId"),
    store: EntryStore = Depends(get_store),
) -> list[SimilarMoment]:
    """Up to five of the user's other entries close to the selected one."""
    try:
        return store.similar_own(entry_id or "", user_id or "")
    except StoreValidationError as e:
        raise HTTPException(400, detail=str(e)) from e


@router.get("/resonances", response_model=list[IncomingResonance])
async def incoming_resonances(
    user_id: str | None = Query(None, alias="userId"),
    store: EntryStore = Depends(get_store),
) -> list[IncomingResonance]:
    """Resonances the user's entries received in the last ten seconds."""
    try:
        return store.incoming_resonances(user_id or "")
    except StoreValidationError as e:
        raise HTTPException(400, detail=str(e)) from e
