"""Timed map - a key -> value map resolved "as of" a point in time."""

from .core.config import TimedMapConfig
from .core.errors import (
    TimedMapError,
    InvalidArgumentError,
    ConcurrentModificationError,
    StaleEntryError,
    IllegalStateError,
)
from .core.timed_hash_map import TimedHashMap
from .core.types import ABSENT, Lookup, LookupState, TimedKey, is_usable
from .components.version_store import SortedVersionStore
from .components.views import (
    TimedEntry,
    TimedItemsView,
    TimedKeysView,
    TimedMapIterator,
    TimedValuesView,
)
from .interfaces.timed_map import TimedMap
from .interfaces.version_store import VersionStore

__all__ = [
    "ABSENT",
    "TimedMapConfig",
    "TimedMapError",
    "InvalidArgumentError",
    "ConcurrentModificationError",
    "StaleEntryError",
    "IllegalStateError",
    "TimedMap",
    "TimedHashMap",
    "VersionStore",
    "SortedVersionStore",
    "TimedEntry",
    "TimedKeysView",
    "TimedValuesView",
    "TimedItemsView",
    "TimedMapIterator",
    "TimedKey",
    "Lookup",
    "LookupState",
    "is_usable",
]
