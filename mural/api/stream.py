"""GET /api/stream — recent entries, or entries similar to one entry."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from mural.dependencies import get_store
from mural.models.entry import Entry
from mural.store.memory import EntryStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stream", response_model=list[Entry])
async def stream(
    entry_id: str | None = Query(None, description="Return entries similar to this one"),
    store: EntryStore = Depends(get_store),
) -> list[Entry]:
    if entry_id:
        similar = store.similar(entry_id)
        logger.debug("Similarity for %s: %d results", entry_id, len(similar))
        return similar
    return store.stream()
