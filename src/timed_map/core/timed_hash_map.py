"""TimedHashMap implementation - main public API.

Maps each key to its own VersionStore of time-ordered slots.
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Any

from ..components.version_store import SortedVersionStore
from ..components.views import TimedItemsView, TimedKeysView, TimedValuesView
from ..interfaces.timed_map import TimedMap
from .config import TimedMapConfig
from .errors import InvalidArgumentError
from .types import ABSENT, K, T, V

if TYPE_CHECKING:
    from ..interfaces.version_store import VersionStore
    from .types import Comparator

logger = logging.getLogger(__name__)


class TimedHashMap(TimedMap[K, T, V]):
    """Hash-keyed timed map with sorted per-key version stores.

    Args:
        comparator: Three-way comparator for times; None uses natural ordering
        config: Full configuration; its comparator is used when none is given

    Public API:
        - put(key, time, value): Record value from time onward
        - get(key, time): Value at the latest time <= time, or ABSENT
        - get(key): Snapshot of every time recorded for key
        - remove(key[, time[, value]]): Drop a key, a slot, or a matching slot
        - keys() / values() / items(): Live fail-fast views

    Invariants:
        - size() equals the sum of all version store sizes
        - No key maps to an empty version store
        - _mod_count changes on every slot insert or delete, never on overwrite
    """

    def __init__(self, comparator: Comparator | None = None, *, config: TimedMapConfig | None = None):
        if config is None:
            config = TimedMapConfig(comparator=comparator)
        elif comparator is not None and comparator is not config.comparator:
            raise InvalidArgumentError("comparator conflicts with config.comparator")

        if config.comparator is not None and not callable(config.comparator):
            raise InvalidArgumentError(f"comparator must be callable, got {config.comparator!r}")

        self.config = config
        self._cmp = config.comparator
        self._store_factory = config.store_factory or SortedVersionStore
        self._stores: dict[K, VersionStore] = {}
        self._size = 0
        self._mod_count = 0

        # Views are cached weakly so they never keep a cycle with the map
        self._keys_view: weakref.ref | None = None
        self._values_view: weakref.ref | None = None
        self._items_view: weakref.ref | None = None

    def comparator(self) -> Comparator | None:
        return self._cmp

    def size(self) -> int:
        return self._size

    def _has_key(self, key: K) -> bool:
        return key in self._stores

    def _has_time(self, key: K, time: T) -> bool:
        store = self._stores.get(key)
        return store is not None and store.get(time) is not ABSENT

    def contains_lower_key(self, key: K, time: T) -> bool:
        store = self._stores.get(key)
        return store is not None and store.lower(time)

    def contains_floor_key(self, key: K, time: T) -> bool:
        store = self._stores.get(key)
        return store is not None and store.floor(time) is not ABSENT

    def contains_value(self, value: V) -> bool:
        for store in self._stores.values():
            for _time, stored in store.items():
                if stored == value:
                    return True
        return False

    def _versions(self, key: K) -> dict[T, V]:
        store = self._stores.get(key)
        if store is None:
            return {}
        return dict(store.items())

    def _floor_value(self, key: K, time: T) -> V | Any:
        store = self._stores.get(key)
        if store is None:
            return ABSENT
        return store.floor(time)

    def put(self, key: K, time: T, value: V) -> V | Any:
        """Record value for key from time onward; return old value or ABSENT."""
        if value is ABSENT:
            raise InvalidArgumentError("ABSENT cannot be stored as a value")

        store = self._stores.get(key)
        if store is None:
            store = self._store_factory(self._cmp)
            store.put(time, value)
            self._stores[key] = store
            logger.debug(f"Created version store for key {key!r}")
            old = ABSENT
        else:
            old = store.put(time, value)

        if old is ABSENT:
            self._size += 1
            self._mod_count += 1
        return old

    def _remove_key(self, key: K) -> dict[T, V] | Any:
        store = self._stores.pop(key, None)
        if store is None:
            return ABSENT
        removed = dict(store.items())
        self._size -= len(removed)
        self._mod_count += 1
        logger.debug(f"Dropped version store for key {key!r} ({len(removed)} versions)")
        return removed

    def _remove_time(self, key: K, time: T) -> V | Any:
        store = self._stores.get(key)
        if store is None:
            return ABSENT
        old = store.remove(time)
        if old is ABSENT:
            return ABSENT

        self._size -= 1
        self._mod_count += 1
        if store.is_empty():
            del self._stores[key]
            logger.debug(f"Dropped empty version store for key {key!r}")
        return old

    def clear(self) -> None:
        logger.debug(f"Clearing {len(self._stores)} keys, {self._size} versions")
        self._stores.clear()
        self._size = 0
        self._mod_count += 1

    def keys(self) -> TimedKeysView:
        view = self._keys_view() if self._keys_view is not None else None
        if view is None:
            view = TimedKeysView(self)
            self._keys_view = weakref.ref(view)
        return view

    def values(self) -> TimedValuesView:
        view = self._values_view() if self._values_view is not None else None
        if view is None:
            view = TimedValuesView(self)
            self._values_view = weakref.ref(view)
        return view

    def items(self) -> TimedItemsView:
        view = self._items_view() if self._items_view is not None else None
        if view is None:
            view = TimedItemsView(self)
            self._items_view = weakref.ref(view)
        return view

    def __repr__(self) -> str:
        parts = []
        for key, store in self._stores.items():
            for time, value in store.items():
                parts.append(f"{key!r} @ {time!r}: {value!r}")
        return f"{type(self).__name__}({{{', '.join(parts)}}})"
