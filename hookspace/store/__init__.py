"""Store implementations for fetched hook repositories."""

from hookspace.store.base import Store, StoreError
from hookspace.store.git import GitStore

__all__ = ["GitStore", "Store", "StoreError"]
