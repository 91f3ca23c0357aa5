"""Collection metadata persistence and id allocation.

This module keeps per-collection bookkeeping in the key-value store
under the collection's metadata key and hands out record ids.
"""

from __future__ import annotations

from typing import Any

from core.constants import KEY_SEPARATOR, META_KEY_SUFFIX
from core.errors import ShelfCodecError, ShelfStoreError
from core.types import CollectionMetadata
from store.codec import Codec
from store.key_value import KeyValueStore


class MetadataManager:
    """Loads and persists metadata for one collection."""

    def __init__(self, store: KeyValueStore, codec: Codec, name: str) -> None:
        self._store = store
        self._codec = codec
        self._name = name

    @property
    def key(self) -> str:
        return f"{self._name}{KEY_SEPARATOR}{META_KEY_SUFFIX}"

    def load(self) -> CollectionMetadata:
        """Read stored metadata, or initialize it when absent.

        Returns:
            Stored or freshly initialized metadata.

        Raises:
            ShelfStoreError: If the stored metadata is malformed.
        """
        stored = self._store.get_item(self.key)
        if stored is None:
            return CollectionMetadata(name=self._name)
        try:
            payload = self._codec.decode(stored)
        except ShelfCodecError as error:
            raise ShelfStoreError(
                f"Failed to decode metadata for collection '{self._name}': {error}. "
                "Drop the collection to reset its metadata."
            ) from error
        return metadata_from_payload(self._name, payload)

    def persist(self, metadata: CollectionMetadata) -> None:
        """Write metadata back to the store.

        Args:
            metadata: Current collection metadata.
        """
        self._store.set_item(self.key, self._codec.encode(metadata_to_payload(metadata)))

    def remove(self) -> None:
        """Delete the stored metadata key."""
        self._store.remove_item(self.key)


def allocate_id(metadata: CollectionMetadata) -> int:
    """Allocate the next record id.

    Ids are strictly increasing and never reused, even after removals.
    The caller persists the updated metadata.

    Args:
        metadata: Metadata to advance.

    Returns:
        Newly allocated id.
    """
    metadata.last_id += 1
    return metadata.last_id


def metadata_to_payload(metadata: CollectionMetadata) -> dict[str, object]:
    """Serialize metadata into its stored payload."""
    return {
        "name": metadata.name,
        "length": metadata.length,
        "lastId": metadata.last_id,
        "map": list(metadata.id_map),
    }


def metadata_from_payload(name: str, payload: Any) -> CollectionMetadata:
    """Deserialize and validate a stored metadata payload.

    Args:
        name: Collection the payload belongs to.
        payload: Decoded metadata payload.

    Returns:
        Typed metadata.

    Raises:
        ShelfStoreError: If fields are missing or inconsistent.
    """
    try:
        length = int(payload["length"])
        last_id = int(payload["lastId"])
        id_map = [int(record_id) for record_id in payload["map"]]
    except (KeyError, TypeError, ValueError) as error:
        raise ShelfStoreError(
            f"Invalid metadata for collection '{name}': {error!r}. "
            "Drop the collection to reset its metadata."
        ) from error
    if length != len(id_map):
        raise ShelfStoreError(
            f"Invalid metadata for collection '{name}': length {length} "
            f"does not match {len(id_map)} tracked ids. "
            "Drop the collection to reset its metadata."
        )
    if id_map and max(id_map) > last_id:
        raise ShelfStoreError(
            f"Invalid metadata for collection '{name}': tracked id {max(id_map)} "
            f"exceeds last allocated id {last_id}. "
            "Drop the collection to reset its metadata."
        )
    return CollectionMetadata(name=name, length=length, last_id=last_id, id_map=id_map)
