"""Live key, value and entry views over a TimedHashMap.

Views hold a reference to the map and read its storage directly. Every
removal made through a view goes back through the map's own ``remove`` so
size and modification bookkeeping stay in one place.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Collection, Iterator, Set
from operator import attrgetter
from typing import TYPE_CHECKING, Any

from ..core.errors import ConcurrentModificationError, IllegalStateError, StaleEntryError
from ..core.types import ABSENT, TimedKey

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..core.timed_hash_map import TimedHashMap
    from ..interfaces.version_store import VersionStore

logger = logging.getLogger(__name__)


class TimedEntry:
    """A (key, time, value) triple handed out by entry iteration.

    The entry stays valid until the map's structure changes. Overwriting
    values, including through ``set_value``, does not invalidate it.
    """

    __slots__ = ("_map", "_store", "_key", "_time", "_mod_count")

    def __init__(self, timed_map: TimedHashMap, store: VersionStore, key: Any, time: Any):
        self._map = timed_map
        self._store = store
        self._key = key
        self._time = time
        self._mod_count = timed_map._mod_count

    def _check(self) -> None:
        if self._map._mod_count != self._mod_count:
            raise StaleEntryError(f"Entry {self._key} @ {self._time} is no longer current")

    @property
    def key(self) -> Any:
        self._check()
        return self._key

    @property
    def time(self) -> Any:
        self._check()
        return self._time

    @property
    def value(self) -> Any:
        self._check()
        return self._store.get(self._time)

    @property
    def timed_key(self) -> TimedKey:
        self._check()
        return TimedKey(self._key, self._time)

    def set_value(self, value: Any) -> Any:
        """Write value at this entry's (key, time); return the old value."""
        self._check()
        return self._map.put(self._key, self._time, value)

    @staticmethod
    def by_key() -> Callable[[TimedEntry], Any]:
        return attrgetter("key")

    @staticmethod
    def by_time() -> Callable[[TimedEntry], Any]:
        return attrgetter("time")

    @staticmethod
    def by_value() -> Callable[[TimedEntry], Any]:
        return attrgetter("value")

    def __iter__(self) -> Iterator[Any]:
        yield self.key
        yield self.time
        yield self.value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TimedEntry):
            other = tuple(other)
        if not isinstance(other, tuple):
            return NotImplemented
        return tuple(self) == other

    def __hash__(self) -> int:
        return hash(tuple(self))

    def __repr__(self) -> str:
        return f"{self._key} @ {self._time} = {self._store.get(self._time)!r}"


class TimedMapIterator(Iterator):
    """Fail-fast iterator over every slot of a map.

    Walks keys in the map's key order and, within each key, times in
    ascending order. Any structural change not made through this
    iterator's own ``remove`` raises ConcurrentModificationError on the
    next step.
    """

    def __init__(self, timed_map: TimedHashMap, project: Callable[[TimedEntry], Any]):
        self._map = timed_map
        self._project = project
        self._expected_mod_count = timed_map._mod_count
        self._keys = list(timed_map._stores)
        self._key_index = -1
        self._store: VersionStore | None = None
        self._slot_index = 0
        self._last: TimedEntry | None = None

    def _check_for_comodification(self) -> None:
        if self._map._mod_count != self._expected_mod_count:
            logger.debug(
                f"Structural change detected during iteration "
                f"(expected mod_count={self._expected_mod_count}, "
                f"actual={self._map._mod_count})"
            )
            raise ConcurrentModificationError("Map was structurally modified during iteration")

    def __next__(self) -> Any:
        self._check_for_comodification()
        while self._store is None or self._slot_index >= len(self._store):
            self._key_index += 1
            if self._key_index >= len(self._keys):
                self._last = None
                raise StopIteration
            self._store = self._map._stores[self._keys[self._key_index]]
            self._slot_index = 0

        time, _value = self._store.item_at(self._slot_index)
        self._slot_index += 1
        self._last = TimedEntry(self._map, self._store, self._keys[self._key_index], time)
        return self._project(self._last)

    def remove(self) -> None:
        """Remove the slot most recently returned by ``next``."""
        if self._last is None:
            raise IllegalStateError("remove() requires a preceding next()")
        self._check_for_comodification()
        self._map.remove(self._last._key, self._last._time)
        self._slot_index -= 1
        self._expected_mod_count = self._map._mod_count
        self._last = None


class _TimedView(ABC):
    """Shared plumbing for the three views."""

    def __init__(self, timed_map: TimedHashMap):
        self._map = timed_map

    @classmethod
    def _from_iterable(cls, it):
        # Set operators build plain sets, not views
        return set(it)

    def __len__(self) -> int:
        return self._map.size()

    def clear(self) -> None:
        self._map.clear()

    @abstractmethod
    def _iterator(self) -> TimedMapIterator: ...

    def __iter__(self) -> TimedMapIterator:
        return self._iterator()

    def _remove_first(self, match: Callable[[Any], bool]) -> bool:
        it = self._iterator()
        for element in it:
            if match(element):
                it.remove()
                return True
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}([{', '.join(str(e) for e in self)}])"


class TimedKeysView(_TimedView, Set):
    """Set of every (key, time) pair recorded in the map."""

    def _iterator(self) -> TimedMapIterator:
        return TimedMapIterator(self._map, attrgetter("timed_key"))

    def __contains__(self, item: Any) -> bool:
        try:
            key, time = item
        except (TypeError, ValueError):
            return False
        return self._map.contains_key(key, time)

    def discard(self, item: Any) -> None:
        if item in self:
            key, time = item
            self._map.remove(key, time)

    def remove(self, item: Any) -> None:
        if item not in self:
            raise KeyError(item)
        self.discard(item)


class TimedValuesView(_TimedView, Collection):
    """Every stored value, one per (key, time) slot."""

    def _iterator(self) -> TimedMapIterator:
        return TimedMapIterator(self._map, attrgetter("value"))

    def __contains__(self, value: Any) -> bool:
        return self._map.contains_value(value)

    def discard(self, value: Any) -> None:
        self._remove_first(lambda v: v == value)

    def remove(self, value: Any) -> None:
        """Remove the first slot holding value; raise ValueError if none does."""
        if not self._remove_first(lambda v: v == value):
            raise ValueError(f"{value!r} not in map values")


class TimedItemsView(_TimedView, Set):
    """Set of every (key, time, value) entry in the map."""

    def _iterator(self) -> TimedMapIterator:
        return TimedMapIterator(self._map, lambda entry: entry)

    def __contains__(self, item: Any) -> bool:
        try:
            key, time, value = item
        except (TypeError, ValueError):
            return False
        if not self._map.contains_key(key, time):
            return False
        current = self._map.get(key, time)
        return current is not ABSENT and current == value

    def discard(self, item: Any) -> None:
        if item in self:
            key, time, value = item
            self._map.remove(key, time, value)

    def remove(self, item: Any) -> None:
        if item not in self:
            raise KeyError(item)
        self.discard(item)
