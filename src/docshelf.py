"""Public SDK surface for docshelf.

This module provides a stable import path for collection users.
It re-exports the collection facade, store capabilities, and errors.
"""

from __future__ import annotations

from collection.clone import clone_value
from collection.collection import Collection
from collection.record import Record
from collection.view import UNGROUPED, GroupKey
from core.config import ShelfConfig
from core.errors import (
    HookContractError,
    ShelfCodecError,
    ShelfConfigError,
    ShelfError,
    ShelfStoreError,
    StaleIdentityError,
    StorageQuotaError,
    StorageUnavailableError,
)
from core.types import CollectionMetadata
from store.codec import Codec, JsonCodec
from store.key_value import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    ensure_store_available,
    open_store,
)

__all__ = [
    "Codec",
    "Collection",
    "CollectionMetadata",
    "GroupKey",
    "HookContractError",
    "JsonCodec",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "Record",
    "ShelfCodecError",
    "ShelfConfig",
    "ShelfConfigError",
    "ShelfError",
    "ShelfStoreError",
    "StaleIdentityError",
    "StorageQuotaError",
    "StorageUnavailableError",
    "UNGROUPED",
    "clone_value",
    "ensure_store_available",
    "open_store",
]
