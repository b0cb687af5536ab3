"""In-memory entry store."""

from mural.store.memory import EntryStore, get_entry_store, seed_store

__all__ = ["EntryStore", "get_entry_store", "seed_store"]
