"""Docshelf exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each layer raises a specific error type for debuggability.
"""

from __future__ import annotations


class ShelfError(Exception):
    """Base exception for all docshelf failures."""


class ShelfConfigError(ShelfError):
    """Raised for invalid runtime configuration or call arguments."""


class ShelfStoreError(ShelfError):
    """Raised for missing or corrupt persisted collection state."""


class StorageUnavailableError(ShelfStoreError):
    """Raised when the key-value store cannot be used at all."""


class StorageQuotaError(ShelfStoreError):
    """Raised when a write would exceed the key-value store capacity."""


class ShelfCodecError(ShelfError):
    """Raised when a value cannot be encoded or decoded."""


class HookContractError(ShelfError):
    """Raised when a reader or writer hook returns neither a mapping nor False."""


class StaleIdentityError(ShelfError):
    """Raised when saving a record whose identity the collection does not track."""
