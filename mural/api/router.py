"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from mural.api import entry, health, me, resonate, stream

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(stream.router)
api_router.include_router(entry.router)
api_router.include_router(resonate.router)
api_router.include_router(me.router)
