"""Shared typed models.

This module defines the collection bookkeeping model and the callable
signatures used by hooks, queries, and ordering across layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Mapping

ReaderHook = Callable[[Any], "Mapping[str, Any] | Literal[False]"]
WriterHook = Callable[[dict[str, Any]], "Mapping[str, Any] | Literal[False]"]
Predicate = Callable[[Any], object]
Comparator = Callable[[Any, Any], int]


@dataclass
class CollectionMetadata:
    """Per-collection bookkeeping persisted beside the records.

    Attributes:
        name: Collection identifier.
        length: Count of currently live ids.
        last_id: Highest id ever allocated; never decreases.
        id_map: Live ids in insertion order.
    """

    name: str
    length: int = 0
    last_id: int = 0
    id_map: list[int] = field(default_factory=list)

    def copy(self) -> "CollectionMetadata":
        """Return an independent copy of this metadata."""
        return CollectionMetadata(
            name=self.name,
            length=self.length,
            last_id=self.last_id,
            id_map=list(self.id_map),
        )
