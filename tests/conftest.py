"""Shared test fixtures."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from mural.client.store_client import StoreError
from mural.engine.config import MuralConfig
from mural.models.entry import Entry, IncomingResonance, SimilarMoment

# 2023-11-14T22:13:20Z in epoch ms
T0_MS = 1_700_000_000_000.0
T0 = datetime.fromtimestamp(T0_MS / 1000, tz=timezone.utc)

USER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_ID = "22222222-2222-4222-8222-222222222222"


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: float = T0_MS) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


class FakeStore:
    """In-memory EntryStoreAPI with switchable failures and a call log."""

    def __init__(self) -> None:
        self.entries: list[Entry] = []
        self.similar: dict[str, list[Entry]] = {}
        self.moments: dict[str, list[SimilarMoment]] = {}
        self.incoming: list[IncomingResonance] = []
        self.failing: set[str] = set()
        self.calls: list[tuple] = []

    def _check(self, name: str, *args: object) -> None:
        self.calls.append((name, *args))
        if name in self.failing or "*" in self.failing:
            raise StoreError(f"{name} unavailable", status_code=503)

    def called(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def fetch_entries(self) -> list[Entry]:
        self._check("fetch_entries")
        return list(self.entries)

    async def fetch_similar(self, entry_id: str) -> list[Entry]:
        self._check("fetch_similar", entry_id)
        return list(self.similar.get(entry_id, []))

    async def fetch_similar_own(self, entry_id: str, user_id: str) -> list[SimilarMoment]:
        self._check("fetch_similar_own", entry_id, user_id)
        return list(self.moments.get(entry_id, []))

    async def record_resonance(self, target_id: str, actor_id: str) -> None:
        self._check("record_resonance", target_id, actor_id)

    async def delete_entry(self, entry_id: str, user_id: str) -> None:
        self._check("delete_entry", entry_id, user_id)

    async def fetch_incoming_resonances(self, user_id: str) -> list[IncomingResonance]:
        self._check("fetch_incoming_resonances", user_id)
        return list(self.incoming)


def _make_entry(
    user_id: str | None = OTHER_ID,
    message: str = "I can't stop overthinking",
    created_at: datetime | None = None,
    similarity: float | None = None,
    entry_id: str | None = None,
    shape: str = "smooth",
    color: str = "#4444FF",
) -> Entry:
    return Entry(
        id=entry_id or str(uuid.uuid4()),
        user_id=user_id,
        message=message,
        color=color,
        shape=shape,
        created_at=created_at or (T0 - timedelta(days=3)),
        similarity=similarity,
    )


@pytest.fixture
def config() -> MuralConfig:
    return MuralConfig()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def make_entry():
    return _make_entry


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def other_id() -> str:
    return OTHER_ID
