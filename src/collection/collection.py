"""Document collection facade.

This module composes metadata, record store, and view behind the
public collection API. A collection is also a read-only sequence over
its current view.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Literal, overload

from collection.record import Record, identity_of
from collection.record_store import RecordStore
from collection.view import GroupKey, View
from core.config import ShelfConfig
from core.errors import ShelfConfigError
from core.types import CollectionMetadata, Comparator, Predicate, ReaderHook, WriterHook
from store.codec import Codec, JsonCodec
from store.key_value import KeyValueStore, ensure_store_available, open_store


class Collection(Sequence[Record]):
    """Named collection of identified records over a key-value store.

    Records live under ``{name}_{id}`` keys and bookkeeping under
    ``{name}_meta``. Construction probes the store and loads the
    collection immediately.
    """

    def __init__(
        self,
        name: str,
        reader: ReaderHook | None = None,
        writer: WriterHook | None = None,
        *,
        store: KeyValueStore | None = None,
        codec: Codec | None = None,
        config: ShelfConfig | None = None,
    ) -> None:
        """Open a collection and load it from the store.

        Args:
            name: Collection identifier and key prefix.
            reader: Optional hook applied to each stored value on load.
            writer: Optional hook applied to a clone of each record on save.
            store: Key-value store; the configured file store when omitted.
            codec: Value codec; JSON when omitted.
            config: Runtime config used to open the default store.

        Raises:
            ShelfConfigError: If name or hooks are invalid.
            StorageUnavailableError: If the store cannot be used.
        """
        if not isinstance(name, str) or not name:
            raise ShelfConfigError(
                f"Collection name must be a non-empty string, got {name!r}."
            )
        _require_callable("reader hook", reader)
        _require_callable("writer hook", writer)
        self._name = name
        self._store = store if store is not None else open_store(config or ShelfConfig.from_env())
        ensure_store_available(self._store)
        self._records = RecordStore(
            self._store,
            codec or JsonCodec(),
            name,
            reader=reader,
            writer=writer,
        )
        self._view = View()
        self.read()

    @property
    def name(self) -> str:
        return self._name

    @property
    def metadata(self) -> CollectionMetadata:
        """Copy of the current collection metadata."""
        return self._records.metadata.copy()

    @property
    def ids(self) -> list[int]:
        """Ids of loaded records in natural order."""
        return self._records.ids()

    @property
    def records(self) -> tuple[Record, ...]:
        """Snapshot of the current view."""
        return tuple(self._view.items)

    @property
    def is_filtered(self) -> bool:
        return self._view.is_filtered

    def read(self, reader: ReaderHook | None = None) -> "Collection":
        """Reload the collection from the store.

        Clears any active predicate so the view shows every loaded record.

        Args:
            reader: Optional reader hook to install before loading.

        Returns:
            This collection.
        """
        if reader is not None:
            _require_callable("reader hook", reader)
            self._records.reader = reader
        self._records.load()
        self._view.reset(self._records.values())
        return self

    def id(self, record_id: int) -> Record | None:
        """Return the loaded record with this id, or None."""
        if not _is_record_id(record_id):
            return None
        return self._records.get(record_id)

    def save(self, record: Mapping[str, Any]) -> int | Literal[False]:
        """Create or update a record.

        A plain mapping is wrapped in a new Record. New records receive
        an id and join the view when the active predicate accepts them.
        Updated records keep their position in the view.

        Args:
            record: Record or field mapping to persist.

        Returns:
            Record id, or False when the writer hook rejected it.

        Raises:
            ShelfConfigError: If record is not a mapping.
            StaleIdentityError: If the record's id is not in this collection.
            HookContractError: If the writer hook breaks its contract.
        """
        if not isinstance(record, Mapping):
            raise ShelfConfigError(
                f"Collection '{self._name}' can only save mappings, got {type(record).__name__}."
            )
        target = record if isinstance(record, Record) else Record(record)
        created = target.id is None
        record_id = self._records.save(target)
        if record_id is False:
            return False
        if created:
            self._view.include(target)
        else:
            self._view.replace(target)
        return record_id

    def remove(self, id_or_record: int | Mapping[str, Any]) -> bool:
        """Remove a record by id or by a record carrying an id.

        Args:
            id_or_record: Record id or record.

        Returns:
            True when a record was removed, False when none matched or
            the argument is neither an integer id nor a record.
        """
        if isinstance(id_or_record, Mapping):
            record_id = identity_of(id_or_record)
            if record_id is None:
                return False
        elif _is_record_id(id_or_record):
            record_id = id_or_record
        else:
            return False
        removed = self._records.remove(record_id)
        if removed is None:
            return False
        self._view.discard(removed)
        return True

    def find(
        self,
        predicate: Predicate | None = None,
        comparator: Comparator | None = None,
    ) -> "Collection":
        """Filter and optionally order the view.

        ``find(predicate)`` installs the predicate, ``find()`` clears it,
        and a comparator orders the resulting view once. With only a
        comparator, an active predicate stays installed and just its
        matches are sorted; call ``find()`` first to sort everything.
        A predicate or comparator that raises leaves the view unchanged.

        Args:
            predicate: Filter callable; a truthy result keeps the record.
            comparator: Three-way ordering callable.

        Returns:
            This collection.

        Raises:
            ShelfConfigError: If predicate or comparator is not callable.
        """
        _require_callable("predicate", predicate)
        _require_callable("comparator", comparator)
        self._view.find(self._records.values(), predicate, comparator)
        return self

    def sort(self, comparator: Comparator) -> "Collection":
        """Reorder the current view with a three-way comparator."""
        if comparator is None:
            raise ShelfConfigError(f"Collection '{self._name}' sort needs a comparator.")
        _require_callable("comparator", comparator)
        self._view.sort(comparator)
        return self

    def group(self, property_name: str) -> dict[str | GroupKey, list[Record]]:
        """Group the current view by a string property.

        Records without a string value for the property are collected
        under ``UNGROUPED``.
        """
        return self._view.group(property_name)

    def drop(self) -> None:
        """Delete every persisted key of the collection and reset it."""
        self._records.drop()
        self._view.reset(())

    def __len__(self) -> int:
        return len(self._view.items)

    @overload
    def __getitem__(self, index: int) -> Record: ...

    @overload
    def __getitem__(self, index: slice) -> list[Record]: ...

    def __getitem__(self, index: int | slice) -> Record | list[Record]:
        return self._view.items[index]

    def __iter__(self) -> Iterator[Record]:
        return iter(list(self._view.items))

    def __contains__(self, value: object) -> bool:
        record_id = identity_of(value)
        if record_id is None:
            return False
        return any(item.id == record_id for item in self._view.items)

    def __repr__(self) -> str:
        return f"Collection(name={self._name!r}, length={len(self)}, filtered={self.is_filtered})"


def _require_callable(role: str, value: object) -> None:
    if value is not None and not callable(value):
        raise ShelfConfigError(
            f"Collection {role} must be callable, got {type(value).__name__}."
        )


def _is_record_id(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
