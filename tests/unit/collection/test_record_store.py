"""Unit tests for the id-indexed record store and transform hooks."""

from __future__ import annotations

from typing import Any

import pytest

from collection.record import Record
from collection.record_store import RecordStore
from core.errors import HookContractError, ShelfStoreError, StaleIdentityError, StorageQuotaError
from store.codec import JsonCodec
from store.key_value import MemoryKeyValueStore


def _record_store(store: MemoryKeyValueStore, **hooks: Any) -> RecordStore:
    record_store = RecordStore(store, JsonCodec(), "notes", **hooks)
    record_store.load()
    return record_store


def test_save_new_record_persists_key_and_metadata() -> None:
    """Inserting should write the record key and update metadata."""
    store = MemoryKeyValueStore()
    record_store = _record_store(store)

    record_id = record_store.save(Record(title="a"))

    assert record_id == 1
    assert store.get_item("notes_1") == '{"title": "a"}'
    assert record_store.metadata.id_map == [1] and record_store.metadata.length == 1


def test_writer_rejection_allocates_no_id() -> None:
    """A writer returning False should leave store and metadata untouched."""
    store = MemoryKeyValueStore()
    record_store = _record_store(store, writer=lambda value: False)

    result = record_store.save(Record(title="a"))

    assert result is False
    assert record_store.metadata.last_id == 0 and store.keys() == []


def test_writer_receives_clone() -> None:
    """Writer changes should not leak into the caller's record."""
    store = MemoryKeyValueStore()

    def _strip_secret(value: dict[str, Any]) -> dict[str, Any]:
        value.pop("secret")
        value["tags"].append("stored")
        return value

    record = Record(title="a", secret="s", tags=[])
    _record_store(store, writer=_strip_secret).save(record)

    assert record == {"title": "a", "secret": "s", "tags": []}
    assert store.get_item("notes_1") == '{"title": "a", "tags": ["stored"]}'


@pytest.mark.parametrize("bad_result", [None, 0, "text", ["list"]])
def test_writer_contract_violation_raises(bad_result: object) -> None:
    """Writers must return a mapping or False."""
    record_store = _record_store(MemoryKeyValueStore(), writer=lambda value: bad_result)

    with pytest.raises(HookContractError):
        record_store.save(Record(title="a"))

    assert record_store.metadata.last_id == 0


def test_save_update_keeps_id_and_rewrites_key() -> None:
    """Updating a tracked record should reuse its key."""
    store = MemoryKeyValueStore()
    record_store = _record_store(store)
    record = Record(title="a")
    record_store.save(record)
    record["title"] = "b"

    record_id = record_store.save(record)

    assert record_id == 1 and store.get_item("notes_1") == '{"title": "b"}'
    assert record_store.metadata.last_id == 1


def test_save_stale_identity_raises_without_mutation() -> None:
    """Saving a record whose id is not tracked should fail cleanly."""
    store = MemoryKeyValueStore()
    other = _record_store(MemoryKeyValueStore())
    foreign = Record(title="x")
    other.save(foreign)
    calls: list[object] = []
    record_store = _record_store(store, writer=lambda value: calls.append(value) or value)

    with pytest.raises(StaleIdentityError):
        record_store.save(foreign)

    assert calls == [] and store.keys() == []


def test_load_applies_reader_and_skips_false() -> None:
    """Reader False should exclude records but keep their bytes."""
    store = MemoryKeyValueStore()
    writer_side = _record_store(store)
    writer_side.save(Record(title="keep"))
    writer_side.save(Record(title="skip"))

    reader_side = _record_store(
        store,
        reader=lambda value: False if value["title"] == "skip" else {**value, "loaded": True},
    )

    assert reader_side.ids() == [1]
    assert reader_side.get(1) == {"title": "keep", "loaded": True}
    assert reader_side.metadata.id_map == [1, 2] and store.get_item("notes_2") is not None


def test_load_reader_contract_violation_raises() -> None:
    """Readers must return a mapping or False."""
    store = MemoryKeyValueStore()
    _record_store(store).save(Record(title="a"))

    with pytest.raises(HookContractError):
        _record_store(store, reader=lambda value: None)


def test_load_raises_for_missing_record_key() -> None:
    """A tracked id without a stored value should surface as corruption."""
    store = MemoryKeyValueStore()
    _record_store(store).save(Record(title="a"))
    store.remove_item("notes_1")

    with pytest.raises(ShelfStoreError):
        _record_store(store)


def test_remove_updates_metadata_and_store() -> None:
    """Removal should delete the key and persist metadata."""
    store = MemoryKeyValueStore()
    record_store = _record_store(store)
    record_store.save(Record(title="a"))
    record_store.save(Record(title="b"))

    removed = record_store.remove(1)

    assert removed == {"title": "a"} and store.get_item("notes_1") is None
    assert JsonCodec().decode(store.get_item("notes_meta") or "")["map"] == [2]


def test_remove_unknown_id_returns_none() -> None:
    """Removing an unknown id should be a no-op."""
    assert _record_store(MemoryKeyValueStore()).remove(9) is None


def test_insert_rolls_back_when_metadata_write_fails() -> None:
    """A failed metadata write should not leave a record key behind."""
    store = MemoryKeyValueStore(quota_bytes=40)
    record_store = _record_store(store)

    with pytest.raises(StorageQuotaError):
        record_store.save(Record(title="a"))

    assert store.keys() == [] and record_store.metadata.last_id == 0


def test_drop_removes_every_key_including_skipped() -> None:
    """Drop should delete reader-skipped keys too."""
    store = MemoryKeyValueStore()
    writer_side = _record_store(store)
    writer_side.save(Record(title="a"))
    writer_side.save(Record(title="b"))
    record_store = _record_store(store, reader=lambda value: False)

    record_store.drop()

    assert store.keys() == [] and record_store.metadata.last_id == 0
