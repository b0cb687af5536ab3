"""FastAPI dependency injection."""

from __future__ import annotations

from mural.store.memory import EntryStore, get_entry_store


def get_store() -> EntryStore:
    return get_entry_store()
