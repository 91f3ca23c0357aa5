"""Record value codecs.

This module converts record values to and from the string form held by
the key-value store. JSON is the default wire format.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from core.errors import ShelfCodecError


class Codec(Protocol):
    """Encode/decode pair between record values and stored strings."""

    def encode(self, value: Any) -> str:
        """Encode a value into its stored string form."""

    def decode(self, text: str) -> Any:
        """Decode a stored string back into a value."""


class JsonCodec:
    """JSON codec for objects, arrays, and primitives."""

    def encode(self, value: Any) -> str:
        """Encode value as a JSON document.

        Args:
            value: JSON-compatible value.

        Returns:
            JSON text.

        Raises:
            ShelfCodecError: If value holds non-JSON data.
        """
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as error:
            raise ShelfCodecError(
                f"Failed to encode value as JSON: {error}. "
                "Convert non-JSON fields in a writer hook before saving."
            ) from error

    def decode(self, text: str) -> Any:
        """Decode JSON text.

        Args:
            text: Stored JSON text.

        Returns:
            Decoded value.

        Raises:
            ShelfCodecError: If text is not valid JSON.
        """
        try:
            return json.loads(text)
        except json.JSONDecodeError as error:
            raise ShelfCodecError(
                f"Failed to decode stored JSON: {error.msg} at position {error.pos}. "
                "Drop the collection or restore the store from a backup."
            ) from error
