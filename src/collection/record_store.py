"""Id-indexed record store backed by per-record keys.

This module loads records through the reader hook, persists them
through the writer hook, and keeps collection metadata in lockstep
with the set of stored records.
"""

from __future__ import annotations

from collections.abc import Mapping, ValuesView
from typing import Any, Literal

from collection.clone import clone_value
from collection.metadata import MetadataManager, allocate_id
from collection.record import Record, bind_identity
from core.constants import KEY_SEPARATOR
from core.errors import HookContractError, ShelfCodecError, ShelfStoreError, StaleIdentityError
from core.logging_config import get_logger
from core.types import CollectionMetadata, ReaderHook, WriterHook
from store.codec import Codec
from store.key_value import KeyValueStore

_LOGGER = get_logger(__name__)


class RecordStore:
    """Maps ids to records, one store key per live id."""

    def __init__(
        self,
        store: KeyValueStore,
        codec: Codec,
        name: str,
        reader: ReaderHook | None = None,
        writer: WriterHook | None = None,
    ) -> None:
        """Create a record store for one collection.

        Args:
            store: Key-value store capability.
            codec: Codec for stored values.
            name: Collection name, used as key prefix.
            reader: Optional load-time transform hook.
            writer: Optional save-time transform hook.
        """
        self._store = store
        self._codec = codec
        self._name = name
        self._reader = reader
        self._writer = writer
        self._metadata_manager = MetadataManager(store, codec, name)
        self._metadata = CollectionMetadata(name=name)
        self._records: dict[int, Record] = {}

    @property
    def metadata(self) -> CollectionMetadata:
        return self._metadata

    @property
    def reader(self) -> ReaderHook | None:
        return self._reader

    @reader.setter
    def reader(self, reader: ReaderHook | None) -> None:
        self._reader = reader

    def get(self, record_id: int) -> Record | None:
        return self._records.get(record_id)

    def ids(self) -> list[int]:
        return list(self._records)

    def values(self) -> ValuesView[Record]:
        return self._records.values()

    def load(self) -> None:
        """Rebuild metadata and records from the key-value store.

        Records the reader hook rejects stay persisted and tracked in
        metadata but are left out of memory.

        Raises:
            HookContractError: If the reader returns neither a mapping nor False.
            ShelfStoreError: If a tracked record is missing or malformed.
        """
        metadata = self._metadata_manager.load()
        records: dict[int, Record] = {}
        skipped_count = 0
        for record_id in metadata.id_map:
            value = self._read_value(record_id)
            if self._reader is not None:
                value = self._reader(value)
                if value is False:
                    skipped_count += 1
                    continue
                if not isinstance(value, Mapping):
                    raise HookContractError(
                        f"Reader hook returned {type(value).__name__} for record {record_id} "
                        f"in collection '{self._name}'. Return a mapping or False."
                    )
            elif not isinstance(value, Mapping):
                raise ShelfStoreError(
                    f"Stored record {record_id} in collection '{self._name}' is a "
                    f"{type(value).__name__}, expected an object. "
                    "Install a reader hook that converts it, or drop the collection."
                )
            record = Record(value)
            bind_identity(record, record_id)
            records[record_id] = record
        self._metadata = metadata
        self._records = records
        _LOGGER.info(
            "collection_loaded",
            collection=self._name,
            record_count=len(records),
            skipped_count=skipped_count,
        )

    def save(self, record: Record) -> int | Literal[False]:
        """Insert a new record or update a tracked one.

        Args:
            record: Record to persist.

        Returns:
            Record id, or False when the writer hook rejected the record.

        Raises:
            StaleIdentityError: If the record's id is not tracked here.
            HookContractError: If the writer returns neither a mapping nor False.
        """
        if record.id is None:
            return self._insert(record)
        if record.id not in self._records:
            raise StaleIdentityError(
                f"Could not find record with id {record.id} in collection '{self._name}'. "
                "Reload the collection or save a new Record."
            )
        encoded = self._encode_for_store(record)
        if encoded is False:
            return False
        self._store.set_item(self._record_key(record.id), encoded)
        self._records[record.id] = record
        return record.id

    def remove(self, record_id: int) -> Record | None:
        """Delete a record and its store key.

        Args:
            record_id: Id of the record to delete.

        Returns:
            Removed record, or None when the id is not loaded.
        """
        record = self._records.get(record_id)
        if record is None:
            return None
        self._store.remove_item(self._record_key(record_id))
        del self._records[record_id]
        self._metadata.id_map.remove(record_id)
        self._metadata.length -= 1
        self._metadata_manager.persist(self._metadata)
        return record

    def drop(self) -> None:
        """Delete every tracked record key and the metadata key."""
        dropped_ids = list(self._metadata.id_map)
        for record_id in dropped_ids:
            self._store.remove_item(self._record_key(record_id))
        self._metadata_manager.remove()
        self._records = {}
        self._metadata = self._metadata_manager.load()
        _LOGGER.info("collection_dropped", collection=self._name, record_count=len(dropped_ids))

    def _insert(self, record: Record) -> int | Literal[False]:
        encoded = self._encode_for_store(record)
        if encoded is False:
            return False
        previous = self._metadata.copy()
        record_key = self._record_key(previous.last_id + 1)
        self._store.set_item(record_key, encoded)
        record_id = allocate_id(self._metadata)
        self._metadata.id_map.append(record_id)
        self._metadata.length += 1
        try:
            self._metadata_manager.persist(self._metadata)
        except ShelfStoreError:
            self._metadata = previous
            self._store.remove_item(record_key)
            raise
        bind_identity(record, record_id)
        self._records[record_id] = record
        return record_id

    def _encode_for_store(self, record: Record) -> str | Literal[False]:
        """Clone record, apply the writer hook, and encode the result."""
        payload = clone_value(record)
        if self._writer is None:
            return self._codec.encode(payload)
        stored = self._writer(payload)
        if stored is False:
            _LOGGER.info("record_save_rejected", collection=self._name, record_id=record.id)
            return False
        if not isinstance(stored, Mapping):
            raise HookContractError(
                f"Writer hook returned {type(stored).__name__} in collection '{self._name}'. "
                "Return a mapping or False."
            )
        return self._codec.encode(clone_value(stored))

    def _read_value(self, record_id: int) -> Any:
        stored = self._store.get_item(self._record_key(record_id))
        if stored is None:
            raise ShelfStoreError(
                f"Record {record_id} is tracked by collection '{self._name}' "
                "but missing from the store. Drop the collection or restore the store."
            )
        try:
            return self._codec.decode(stored)
        except ShelfCodecError as error:
            raise ShelfStoreError(
                f"Failed to decode record {record_id} in collection '{self._name}': {error}"
            ) from error

    def _record_key(self, record_id: int) -> str:
        return f"{self._name}{KEY_SEPARATOR}{record_id}"
