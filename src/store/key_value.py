"""String-keyed key-value stores.

This module defines the store capability collections are built on and
two implementations: an in-memory store and a JSON-file store that
keeps a whole namespace in one file, like browser local storage.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Protocol

from core.config import ShelfConfig
from core.constants import PROBE_KEY, PROBE_VALUE, STORE_FILE_NAME
from core.errors import ShelfStoreError, StorageQuotaError, StorageUnavailableError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class KeyValueStore(Protocol):
    """Synchronous get/set/remove over a flat string namespace."""

    def get_item(self, key: str) -> str | None:
        """Return the value stored under key, or None when absent."""

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    def remove_item(self, key: str) -> None:
        """Remove key; removing an absent key is a no-op."""

    def keys(self) -> list[str]:
        """Return all keys currently stored."""


class MemoryKeyValueStore:
    """Dictionary-backed store with an optional byte quota."""

    def __init__(
        self,
        quota_bytes: int | None = None,
        items: dict[str, str] | None = None,
    ) -> None:
        """Create an in-memory store.

        Args:
            quota_bytes: Capacity over UTF-8 sizes of keys plus values.
            items: Optional initial key/value pairs.
        """
        self._quota_bytes = quota_bytes
        self._items: dict[str, str] = dict(items or {})
        self._used_bytes = sum(_entry_size(key, value) for key, value in self._items.items())

    @property
    def used_bytes(self) -> int:
        """Bytes currently consumed by keys and values."""
        return self._used_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store a string value.

        Args:
            key: Store key.
            value: String value.

        Raises:
            ShelfStoreError: If value is not a string.
            StorageQuotaError: If the write would exceed the quota.
        """
        if not isinstance(value, str):
            raise ShelfStoreError(
                f"Store values must be strings, got {type(value).__name__} for key '{key}'. "
                "Encode values with a codec before storing them."
            )
        previous = self._items.get(key)
        used_bytes = self._used_bytes + _entry_size(key, value)
        if previous is not None:
            used_bytes -= _entry_size(key, previous)
        if self._quota_bytes is not None and used_bytes > self._quota_bytes:
            _LOGGER.warning(
                "store_quota_exceeded",
                key=key,
                used_bytes=used_bytes,
                quota_bytes=self._quota_bytes,
            )
            raise StorageQuotaError(
                f"Writing key '{key}' needs {used_bytes} bytes, "
                f"over the store quota of {self._quota_bytes} bytes. "
                "Remove records or raise DOCSHELF_QUOTA_BYTES."
            )
        self._items[key] = value
        previous_used = self._used_bytes
        self._used_bytes = used_bytes
        try:
            self._commit()
        except ShelfStoreError:
            self._restore(key, previous, previous_used)
            raise

    def remove_item(self, key: str) -> None:
        previous = self._items.pop(key, None)
        if previous is None:
            return
        previous_used = self._used_bytes
        self._used_bytes -= _entry_size(key, previous)
        try:
            self._commit()
        except ShelfStoreError:
            self._restore(key, previous, previous_used)
            raise

    def keys(self) -> list[str]:
        return list(self._items)

    def _commit(self) -> None:
        """Persist the namespace after a mutation; memory needs nothing."""

    def _restore(self, key: str, previous: str | None, previous_used: int) -> None:
        if previous is None:
            self._items.pop(key, None)
        else:
            self._items[key] = previous
        self._used_bytes = previous_used


class JsonFileKeyValueStore(MemoryKeyValueStore):
    """Store persisted as one JSON object file, rewritten on each mutation."""

    def __init__(self, store_path: Path, quota_bytes: int | None = None) -> None:
        """Open or create a file-backed store.

        Args:
            store_path: JSON file holding the whole namespace.
            quota_bytes: Optional capacity in bytes.

        Raises:
            ShelfStoreError: If an existing store file is unreadable.
        """
        self._store_path = store_path
        super().__init__(quota_bytes=quota_bytes, items=_read_store_file(store_path))

    @property
    def path(self) -> Path:
        return self._store_path

    def _commit(self) -> None:
        """Write the namespace atomically through a temporary file.

        Raises:
            ShelfStoreError: If the store file cannot be written.
        """
        temp_path = self._store_path.with_name(self._store_path.name + ".tmp")
        try:
            self._store_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(
                json.dumps(self._items, ensure_ascii=False, indent=2) + "\n",
                encoding="utf-8",
            )
            os.replace(temp_path, self._store_path)
        except OSError as error:
            raise ShelfStoreError(
                f"Failed to write key-value store at {self._store_path}: {error}. "
                "Check directory permissions and free disk space."
            ) from error


def ensure_store_available(store: KeyValueStore) -> None:
    """Verify a store accepts writes and removals.

    Args:
        store: Store to probe.

    Raises:
        StorageUnavailableError: If the probe write or removal fails.
    """
    try:
        store.set_item(PROBE_KEY, PROBE_VALUE)
        store.remove_item(PROBE_KEY)
    except StorageQuotaError:
        # A full store still serves reads and removals.
        return
    except Exception as error:
        _LOGGER.error("store_unavailable", error=str(error))
        raise StorageUnavailableError(
            f"Key-value store is not usable: {error}. "
            "Provide a writable store or fix DOCSHELF_DATA_ROOT."
        ) from error


def open_store(config: ShelfConfig) -> JsonFileKeyValueStore:
    """Open the file-backed store described by config.

    Args:
        config: Runtime configuration.

    Returns:
        File-backed key-value store.
    """
    return JsonFileKeyValueStore(
        config.data_root / STORE_FILE_NAME,
        quota_bytes=config.quota_bytes,
    )


def _read_store_file(store_path: Path) -> dict[str, str]:
    """Read and validate a store file.

    Args:
        store_path: Store JSON path.

    Returns:
        Stored key/value pairs, empty when the file does not exist.

    Raises:
        ShelfStoreError: If the file is unreadable or malformed.
    """
    if not store_path.exists():
        return {}
    try:
        payload = json.loads(store_path.read_text(encoding="utf-8"))
    except OSError as error:
        raise ShelfStoreError(
            f"Failed to read key-value store at {store_path}: {error}. "
            "Check file permissions."
        ) from error
    except json.JSONDecodeError as error:
        raise ShelfStoreError(
            f"Failed to parse key-value store at {store_path}: {error.msg}. "
            "Restore the store file from a backup or delete it."
        ) from error
    if not isinstance(payload, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in payload.items()
    ):
        raise ShelfStoreError(
            f"Failed to parse key-value store at {store_path}: "
            "expected a JSON object of string values. Restore the store file."
        )
    return payload


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))
