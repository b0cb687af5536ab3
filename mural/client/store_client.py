"""Async HTTP client for the entry store — the mural's only outbound boundary."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from mural.models.entry import Entry, IncomingResonance, SimilarMoment

logger = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(list[Entry])
_MOMENTS = TypeAdapter(list[SimilarMoment])
_INCOMING = TypeAdapter(list[IncomingResonance])


class StoreError(Exception):
    """Any failed store call: transport error, non-2xx status, or bad payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EntryStoreAPI(Protocol):
    """What the mural controller needs from the store."""

    async def fetch_entries(self) -> list[Entry]: ...

    async def fetch_similar(self, entry_id: str) -> list[Entry]: ...

    async def fetch_similar_own(self, entry_id: str, user_id: str) -> list[SimilarMoment]: ...

    async def record_resonance(self, target_id: str, actor_id: str) -> None: ...

    async def delete_entry(self, entry_id: str, user_id: str) -> None: ...

    async def fetch_incoming_resonances(self, user_id: str) -> list[IncomingResonance]: ...


class MuralStoreClient:
    """httpx implementation of EntryStoreAPI."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": "echo-mural/0.1"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> MuralStoreClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    # ── Contracts ──

    async def fetch_entries(self) -> list[Entry]:
        """Recent entries, newest first."""
        data = await self._request("GET", "/api/stream")
        return self._parse(_ENTRIES, data)

    async def fetch_similar(self, entry_id: str) -> list[Entry]:
        """Up to 8 other entries scored by similarity, most similar first."""
        data = await self._request("GET", "/api/stream", params={"entry_id": entry_id})
        return self._parse(_ENTRIES, data)

    async def fetch_similar_own(self, entry_id: str, user_id: str) -> list[SimilarMoment]:
        data = await self._request(
            "GET", "/api/me/similar", params={"entryId": entry_id, "userId": user_id}
        )
        return self._parse(_MOMENTS, data)

    async def record_resonance(self, target_id: str, actor_id: str) -> None:
        await self._request(
            "POST", "/api/resonate", json={"target_id": target_id, "actor_id": actor_id}
        )

    async def delete_entry(self, entry_id: str, user_id: str) -> None:
        await self._request("DELETE", f"/api/entry/{entry_id}", params={"userId": user_id})

    async def fetch_incoming_resonances(self, user_id: str) -> list[IncomingResonance]:
        data = await self._request("GET", "/api/me/resonances", params={"userId": user_id})
        return self._parse(_INCOMING, data)

    # ── Plumbing ──

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {path}: {e}") from e

        if response.status_code >= 400:
            raise StoreError(
                f"{method} {path}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"{method} {path}: invalid JSON") from e

    @staticmethod
    def _parse(adapter: TypeAdapter, data: Any) -> Any:
        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            raise StoreError(f"unexpected payload: {e.error_count()} validation errors") from e
