"""Abstract base for timed maps.

Concrete maps supply the primitive contract (lookups, put, the removal
hooks, size and views). Every compound operation here is written against
that contract only, so each backing implementation inherits identical
conditional put, compute and merge behavior.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic

from ..core.errors import (
    ConcurrentModificationError,
    InvalidArgumentError,
    StaleEntryError,
)
from ..core.types import ABSENT, UNSET, K, Lookup, T, TimedKey, V, is_usable

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ..components.views import TimedItemsView, TimedKeysView, TimedValuesView
    from ..core.types import Comparator


def _require_callable(fn: Any, name: str) -> None:
    if fn is None or not callable(fn):
        raise InvalidArgumentError(f"{name} must be callable, got {fn!r}")


class TimedMap(ABC, Generic[K, T, V]):
    """Map from key to value that records when each association took effect.

    Lookups resolve "as of" a time: ``get(key, time)`` returns the value
    written at the latest time at or before ``time``.

    Presence vs association:
        - present at (key, time): a write happened at exactly that time
        - associated at (key, time): a floor lookup resolves to a value

    Named operations never raise for a missing key or time; they return
    ``ABSENT``. The mapping dunders (``m[TimedKey(k, t)]``) follow Python
    conventions and raise ``KeyError`` instead.
    """

    # ------------------------------------------------------------------
    # Primitive contract
    # ------------------------------------------------------------------

    @abstractmethod
    def comparator(self) -> Comparator | None:
        """Return the time comparator, or None for natural ordering."""
        ...

    @abstractmethod
    def size(self) -> int:
        """Return total number of recorded (key, time) slots."""
        ...

    @abstractmethod
    def contains_lower_key(self, key: K, time: T) -> bool:
        """Return whether key has a recorded time strictly before time."""
        ...

    @abstractmethod
    def contains_floor_key(self, key: K, time: T) -> bool:
        """Return whether key has a recorded time at or before time."""
        ...

    @abstractmethod
    def contains_value(self, value: V) -> bool:
        """Return whether any slot holds value."""
        ...

    @abstractmethod
    def put(self, key: K, time: T, value: V) -> V | Any:
        """Record value for key from time onward; return old value or ABSENT."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
        ...

    @abstractmethod
    def keys(self) -> TimedKeysView:
        """Return a live view of all (key, time) pairs."""
        ...

    @abstractmethod
    def values(self) -> TimedValuesView:
        """Return a live view of all stored values."""
        ...

    @abstractmethod
    def items(self) -> TimedItemsView:
        """Return a live view of all (key, time, value) entries."""
        ...

    @abstractmethod
    def _has_key(self, key: K) -> bool: ...

    @abstractmethod
    def _has_time(self, key: K, time: T) -> bool: ...

    @abstractmethod
    def _versions(self, key: K) -> dict[T, V]: ...

    @abstractmethod
    def _floor_value(self, key: K, time: T) -> V | Any: ...

    @abstractmethod
    def _remove_key(self, key: K) -> dict[T, V] | Any: ...

    @abstractmethod
    def _remove_time(self, key: K, time: T) -> V | Any: ...

    # ------------------------------------------------------------------
    # Dispatchers over the primitive hooks
    # ------------------------------------------------------------------

    def contains_key(self, key: K, time: T = UNSET) -> bool:
        """Return whether key is known at all, or present at exactly time."""
        if time is UNSET:
            return self._has_key(key)
        return self._has_time(key, time)

    def get(self, key: K, time: T = UNSET) -> Any:
        """Resolve an association.

        With only a key, returns a snapshot dict of every recorded time to
        its value in ascending time order (empty when the key is unknown).
        With a time, returns the value at the latest time <= time, or ABSENT.
        """
        if time is UNSET:
            return self._versions(key)
        return self._floor_value(key, time)

    def remove(self, key: K, time: T = UNSET, value: V = UNSET) -> Any:
        """Remove a whole key, one slot, or one slot holding an expected value.

        - ``remove(key)`` drops every time recorded for key and returns the
          removed snapshot dict, or ABSENT when key was unknown
        - ``remove(key, time)`` drops the slot at exactly time and returns
          its value, or ABSENT when not present
        - ``remove(key, time, value)`` drops the slot only when its current
          value equals value; returns whether it did
        """
        if time is UNSET:
            return self._remove_key(key)
        if value is UNSET:
            return self._remove_time(key, time)
        return self._remove_if_equal(key, time, value)

    def is_empty(self) -> bool:
        return self.size() == 0

    def lookup(self, key: K, time: T) -> Lookup[V]:
        """Classify the association at (key, time) as found, empty or missing."""
        return Lookup.of(self.get(key, time))

    # ------------------------------------------------------------------
    # Derived operations
    # ------------------------------------------------------------------

    def get_or_default(self, key: K, time: T, default: Any) -> Any:
        """Return the association at (key, time), or default when there is none."""
        return self.get(key, time) if self.contains_floor_key(key, time) else default

    def put_if_absent(self, key: K, time: T, value: V) -> V | None:
        """Put value unless a usable value is already associated.

        Unlike presence tests, an associated None counts as absent here and
        is overwritten. Returns None when the put happened, else the
        existing value.
        """
        current = self.get(key, time)
        if not is_usable(current):
            self.put(key, time, value)
            return None
        return current

    def _remove_if_equal(self, key: K, time: T, value: V) -> bool:
        if not self.contains_key(key, time):
            return False
        if self.get(key, time) != value:
            return False
        self.remove(key, time)
        return True

    def replace(self, key: K, time: T, value: V, new_value: V = UNSET) -> Any:
        """Overwrite a value written at exactly time.

        - ``replace(key, time, value)`` writes value when (key, time) is
          present and returns the old value, else ABSENT
        - ``replace(key, time, old, new)`` writes new only when the value
          present at (key, time) equals old; returns whether it did

        A value written at an earlier time is never replaced, so no new
        slot is ever added.
        """
        if new_value is UNSET:
            if not self.contains_key(key, time):
                return ABSENT
            return self.put(key, time, value)

        if not self.contains_key(key, time) or self.get(key, time) != value:
            return False
        self.put(key, time, new_value)
        return True

    def compute(self, key: K, time: T, fn: Callable[[K, T, Any], V | None]) -> V | None:
        """Store fn(key, time, current); a None or ABSENT result removes the slot.

        ``current`` is the raw association: ABSENT when there is none.
        """
        _require_callable(fn, "fn")
        current = self.get(key, time)
        new_value = fn(key, time, current)
        if not is_usable(new_value):
            self.remove(key, time)
            return None
        self.put(key, time, new_value)
        return new_value

    def compute_if_absent(self, key: K, time: T, fn: Callable[[K, T], V | None]) -> V | None:
        """Store fn(key, time) when no usable value is associated.

        Returns the existing usable value, the newly stored value, or None.
        """
        _require_callable(fn, "fn")
        current = self.get(key, time)
        if is_usable(current):
            return current
        new_value = fn(key, time)
        if not is_usable(new_value):
            return None
        self.put(key, time, new_value)
        return new_value

    def _present_value(self, key: K, time: T) -> V | Any:
        """Return the usable value written at exactly time, or ABSENT."""
        if not self.contains_key(key, time):
            return ABSENT
        current = self.get(key, time)
        return current if is_usable(current) else ABSENT

    def compute_if_present(self, key: K, time: T, fn: Callable[[K, T, V], V | None]) -> V | None:
        """Store fn(key, time, current) when a usable value was written at time.

        A None or ABSENT result removes that slot. Returns the new value,
        or None.
        """
        _require_callable(fn, "fn")
        current = self._present_value(key, time)
        if current is ABSENT:
            return None
        new_value = fn(key, time, current)
        if not is_usable(new_value):
            self.remove(key, time)
            return None
        self.put(key, time, new_value)
        return new_value

    def merge(self, key: K, time: T, value: V, fn: Callable[[V, V], V | None]) -> V | None:
        """Store value, or fn(current, value) when a usable value was written at time.

        A None or ABSENT combined result removes that slot.
        """
        _require_callable(fn, "fn")
        if not is_usable(value):
            raise InvalidArgumentError(f"merge value must not be {value!r}")
        current = self._present_value(key, time)
        new_value = value if current is ABSENT else fn(current, value)
        if not is_usable(new_value):
            self.remove(key, time)
            return None
        self.put(key, time, new_value)
        return new_value

    def for_each(self, action: Callable[[K, T, V], Any]) -> None:
        """Call action(key, time, value) for every entry in view order."""
        _require_callable(action, "action")
        for entry in self.items():
            try:
                k, t, v = entry.key, entry.time, entry.value
            except StaleEntryError as e:
                raise ConcurrentModificationError(str(e)) from e
            action(k, t, v)

    def replace_all(self, fn: Callable[[K, T, V], V]) -> None:
        """Overwrite every entry's value with fn(key, time, value)."""
        _require_callable(fn, "fn")
        for entry in self.items():
            try:
                k, t, v = entry.key, entry.time, entry.value
            except StaleEntryError as e:
                raise ConcurrentModificationError(str(e)) from e
            new_value = fn(k, t, v)
            try:
                entry.set_value(new_value)
            except StaleEntryError as e:
                raise ConcurrentModificationError(str(e)) from e

    def put_all(self, other: TimedMap[K, T, V]) -> None:
        """Copy every entry of other into this map."""
        for k, t, v in list(other.items()):
            self.put(k, t, v)

    # ------------------------------------------------------------------
    # Python mapping protocol over TimedKey
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[TimedKey]:
        return iter(self.keys())

    def __contains__(self, item: Any) -> bool:
        try:
            key, time = item
        except (TypeError, ValueError):
            return False
        return self.contains_key(key, time)

    def __getitem__(self, item: tuple[K, T]) -> V:
        try:
            key, time = item
        except (TypeError, ValueError):
            raise KeyError(item) from None
        value = self.get(key, time)
        if value is ABSENT:
            raise KeyError(TimedKey(key, time))
        return value

    def __setitem__(self, item: tuple[K, T], value: V) -> None:
        key, time = item
        self.put(key, time, value)

    def __delitem__(self, item: tuple[K, T]) -> None:
        try:
            key, time = item
        except (TypeError, ValueError):
            raise KeyError(item) from None
        if self.remove(key, time) is ABSENT:
            raise KeyError(TimedKey(key, time))

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, TimedMap):
            return NotImplemented
        if self.size() != other.size():
            return False
        for k, t, v in self.items():
            if not other.contains_key(k, t) or other.get(k, t) != v:
                return False
        return True

    __hash__ = None  # type: ignore[assignment]
