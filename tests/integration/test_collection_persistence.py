"""Integration tests for collections persisted in a file-backed store."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any

from collection.collection import Collection
from core.config import ShelfConfig
from core.constants import STORE_FILE_NAME
from store.key_value import JsonFileKeyValueStore


def _config(tmp_path: Path) -> ShelfConfig:
    return replace(ShelfConfig.from_env(), data_root=tmp_path)


def _strip_draft(value: dict[str, Any]) -> dict[str, Any]:
    value.pop("draft", None)
    return value


def test_records_survive_reopening(tmp_path: Path) -> None:
    """A fresh collection should load the same fields and ids."""
    config = _config(tmp_path)
    collection = Collection("notes", config=config)
    collection.save({"title": "a", "tags": ["x"], "meta": {"views": 1}})
    collection.save({"title": "b"})
    collection.remove(1)
    collection.save({"title": "c"})

    reopened = Collection("notes", config=config)

    assert [(record.id, dict(record)) for record in reopened] == [
        (2, {"title": "b"}),
        (3, {"title": "c"}),
    ]
    assert reopened.metadata.last_id == 3


def test_writer_transform_is_persisted_not_applied_in_memory(tmp_path: Path) -> None:
    """Writer output is what gets stored; the caller's record is unchanged."""
    config = _config(tmp_path)
    collection = Collection("notes", writer=_strip_draft, config=config)
    fields = {"title": "a", "draft": "wip"}
    record_id = collection.save(fields)
    fields["title"] = "changed"

    reopened = Collection("notes", config=config)

    assert dict(collection.id(record_id) or {}) == {"title": "a", "draft": "wip"}
    assert dict(reopened.id(record_id) or {}) == {"title": "a"}


def test_key_layout_in_store_file(tmp_path: Path) -> None:
    """Records and metadata should use the documented key layout."""
    config = _config(tmp_path)
    Collection("notes", config=config).save({"title": "a"})

    payload = json.loads((tmp_path / STORE_FILE_NAME).read_text(encoding="utf-8"))

    assert json.loads(payload["notes_1"]) == {"title": "a"}
    assert json.loads(payload["notes_meta"]) == {
        "name": "notes",
        "length": 1,
        "lastId": 1,
        "map": [1],
    }


def test_collections_share_store_without_interference(tmp_path: Path) -> None:
    """Two collections in one store should keep separate ids and keys."""
    store = JsonFileKeyValueStore(tmp_path / STORE_FILE_NAME)
    notes = Collection("notes", store=store)
    tasks = Collection("tasks", store=store)
    notes.save({"title": "a"})
    tasks.save({"title": "b"})

    notes.drop()

    assert sorted(store.keys()) == ["tasks_1", "tasks_meta"]
    assert len(Collection("tasks", store=store)) == 1
