"""Record type with a protected identity.

A record is a mutable mapping of fields. Its identity travels with it
but is not one of its fields, so it never appears in iteration or in
the persisted payload, and callers cannot reassign it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

from core.errors import StaleIdentityError


class Record(MutableMapping[str, Any]):
    """Mutable field mapping plus a read-only collection identity."""

    __slots__ = ("_fields", "_id")

    def __init__(self, fields: Mapping[str, Any] | None = None, **extra: Any) -> None:
        self._fields: dict[str, Any] = dict(fields or {})
        self._fields.update(extra)
        self._id: int | None = None

    @property
    def id(self) -> int | None:
        """Identity assigned by a collection, or None before the first save."""
        return self._id

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._fields[key] = value

    def __delitem__(self, key: str) -> None:
        del self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Record(id={self._id!r}, fields={self._fields!r})"


def bind_identity(record: Record, record_id: int) -> None:
    """Attach a collection identity to a record exactly once.

    Args:
        record: Record to bind.
        record_id: Identity allocated by the collection.

    Raises:
        StaleIdentityError: If the record already carries another identity.
    """
    if record._id is not None and record._id != record_id:
        raise StaleIdentityError(
            f"Record already has id {record._id} and cannot be rebound to {record_id}. "
            "Save a new Record instead of reusing one from another collection."
        )
    record._id = record_id


def identity_of(value: object) -> int | None:
    """Return the identity a record carries, or None for other values."""
    if isinstance(value, Record):
        return value.id
    return None
