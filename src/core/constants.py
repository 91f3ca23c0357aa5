"""Core constants used across docshelf modules.

This module centralizes key layout and default values.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".docshelf")
STORE_FILE_NAME = "localstore.json"
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024
KEY_SEPARATOR = "_"
META_KEY_SUFFIX = "meta"
PROBE_KEY = "docshelf.probe"
PROBE_VALUE = "1"
UNGROUPED_BUCKET_NAME = "_ungrouped"
