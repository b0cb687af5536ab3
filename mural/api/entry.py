"""POST /api/entry and DELETE /api/entry/{entry_id} — create and remove entries."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from mural.dependencies import get_store
from mural.models.requests import CreateEntryRequest
from mural.models.responses import CreateEntryResponse, DeleteResponse
from mural.store.memory import (
    EntryNotFoundError,
    EntryStore,
    OwnershipError,
    StoreValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/entry", response_model=CreateEntryResponse)
async def create_entry(
    req: CreateEntryRequest,
    store: EntryStore = Depends(get_store),
) -> CreateEntryResponse:
    """Store an already-classified expression at a random position."""
    try:
        entry = store.create_entry(
            text=req.text,
            user_id=req.user_id,
            color=req.color,
            shape=req.shape,
            intensity=req.intensity,
            category=req.category,
            embedding=req.embedding,
        )
    except StoreValidationError as e:
        raise HTTPException(400, detail=str(e)) from e

    return CreateEntryResponse(
        id=entry.id,
        color=entry.color,
        shape=entry.shape,
        x=entry.x,
        y=entry.y,
        intensity=entry.intensity,
        category=entry.category,
    )


@router.delete("/entry/{entry_id}", response_model=DeleteResponse)
async def delete_entry(
    entry_id: str,
    user_id: str | None = Query(None, alias="userId"),
    store: EntryStore = Depends(get_store),
) -> DeleteResponse:
    try:
        store.delete_entry(entry_id, user_id)
    except StoreValidationError as e:
        raise HTTPException(400, detail=str(e)) from e
    except EntryNotFoundError as e:
        raise HTTPException(404, detail="entry not found") from e
    except OwnershipError as e:
        logger.info("Refused delete of %s: owner mismatch", entry_id)
        raise HTTPException(403, detail=str(e)) from e
    return DeleteResponse(success=True, id=entry_id)
