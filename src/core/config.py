"""Runtime configuration model for docshelf.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_DATA_ROOT, DEFAULT_QUOTA_BYTES
from core.errors import ShelfConfigError


@dataclass(frozen=True)
class ShelfConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local directory holding the key-value store file.
        quota_bytes: Store capacity in bytes, or None when unlimited.
    """

    data_root: Path
    quota_bytes: int | None

    @classmethod
    def from_env(cls) -> "ShelfConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ShelfConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("DOCSHELF_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        quota_value = os.getenv("DOCSHELF_QUOTA_BYTES", str(DEFAULT_QUOTA_BYTES))
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            quota_bytes=_parse_quota_bytes(quota_value),
        )


def _parse_quota_bytes(raw_value: str) -> int | None:
    """Parse the store quota environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Quota in bytes, or None when the quota is disabled with 0.

    Raises:
        ShelfConfigError: If value is not a non-negative integer.
    """
    try:
        quota_bytes = int(raw_value)
    except ValueError as error:
        raise ShelfConfigError(
            "Invalid DOCSHELF_QUOTA_BYTES value: "
            f"expected integer, got '{raw_value}'. "
            "Set DOCSHELF_QUOTA_BYTES to a byte count, or 0 for no limit."
        ) from error
    if quota_bytes < 0:
        raise ShelfConfigError(
            f"Invalid DOCSHELF_QUOTA_BYTES value: {quota_bytes} is negative. "
            "Set DOCSHELF_QUOTA_BYTES to a byte count, or 0 for no limit."
        )
    return quota_bytes or None
