"""Store client and local identity."""

from mural.client.identity import load_or_create_user_id
from mural.client.store_client import EntryStoreAPI, MuralStoreClient, StoreError

__all__ = [
    "load_or_create_user_id",
    "EntryStoreAPI",
    "MuralStoreClient",
    "StoreError",
]
