"""Materialized collection view and query state.

This module keeps the ordered, indexable projection callers see. The
view is derived state: it is rebuilt from the record store, the active
predicate, and an optional one-shot comparator.
"""

from __future__ import annotations

from enum import Enum
from functools import cmp_to_key
from typing import Iterable

from collection.record import Record
from core.constants import UNGROUPED_BUCKET_NAME
from core.types import Comparator, Predicate


class GroupKey(Enum):
    """Reserved group bucket keys that never equal a property value."""

    UNGROUPED = UNGROUPED_BUCKET_NAME


UNGROUPED = GroupKey.UNGROUPED


class View:
    """Ordered records plus the active predicate.

    The view is Unfiltered while no predicate is active and Filtered
    otherwise. Only find() moves between the two states.
    """

    def __init__(self) -> None:
        self._items: list[Record] = []
        self._predicate: Predicate | None = None

    @property
    def items(self) -> list[Record]:
        return self._items

    @property
    def predicate(self) -> Predicate | None:
        return self._predicate

    @property
    def is_filtered(self) -> bool:
        return self._predicate is not None

    def reset(self, records: Iterable[Record]) -> None:
        """Clear the predicate and show every record."""
        self._predicate = None
        self._items = list(records)

    def find(
        self,
        records: Iterable[Record],
        predicate: Predicate | None = None,
        comparator: Comparator | None = None,
    ) -> None:
        """Apply a query transition and rebuild the view.

        State changes only after the predicate and comparator have run
        over every record, so a raising callable leaves the view intact.

        Args:
            records: All loaded records in natural order.
            predicate: New active predicate; None clears the active one
                unless a comparator is given.
            comparator: One-shot three-way ordering for this rebuild.
        """
        if predicate is None:
            if comparator is not None:
                self._items = order_records(select_records(records, self._predicate), comparator)
            elif self._predicate is not None:
                self.reset(records)
            return
        selected = select_records(records, predicate)
        if comparator is not None:
            selected = order_records(selected, comparator)
        self._predicate = predicate
        self._items = selected

    def sort(self, comparator: Comparator) -> None:
        """Reorder the current view without changing membership."""
        self._items = order_records(self._items, comparator)

    def include(self, record: Record) -> None:
        """Append a newly saved record when the active predicate accepts it."""
        if self._predicate is None or self._predicate(record):
            self._items.append(record)

    def replace(self, record: Record) -> None:
        """Swap in an updated record at its current position, if shown."""
        for index, item in enumerate(self._items):
            if item.id == record.id:
                self._items[index] = record
                return

    def discard(self, record: Record) -> None:
        """Drop a removed record from the view, if shown."""
        self._items = [item for item in self._items if item.id != record.id]

    def group(self, property_name: str) -> dict[str | GroupKey, list[Record]]:
        return group_records(self._items, property_name)


def select_records(records: Iterable[Record], predicate: Predicate | None) -> list[Record]:
    """Return records accepted by predicate, all of them when it is None."""
    if predicate is None:
        return list(records)
    return [record for record in records if predicate(record)]


def order_records(records: Iterable[Record], comparator: Comparator) -> list[Record]:
    """Return records sorted by a three-way comparator."""
    return sorted(records, key=cmp_to_key(comparator))


def group_records(
    records: Iterable[Record],
    property_name: str,
) -> dict[str | GroupKey, list[Record]]:
    """Partition records by the string value of one property.

    Records whose property is absent or not a string go under UNGROUPED.

    Args:
        records: Records to partition, in order.
        property_name: Field to group by.

    Returns:
        Mapping of property value to the records sharing it.
    """
    grouped: dict[str | GroupKey, list[Record]] = {}
    for record in records:
        value = record.get(property_name)
        bucket: str | GroupKey = value if isinstance(value, str) else UNGROUPED
        grouped.setdefault(bucket, []).append(record)
    return grouped
