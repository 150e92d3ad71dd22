"""Sorted per-key version store.

Uses sortedcontainers.SortedKeyList so that times are ordered, and
collapsed, by the owning map's comparator rather than by hashing.
"""

from __future__ import annotations

from functools import cmp_to_key
from operator import attrgetter
from typing import TYPE_CHECKING, Any

from sortedcontainers import SortedKeyList

from ..core.types import ABSENT

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ..core.types import Comparator


def _identity(time: Any) -> Any:
    return time


class _Slot:
    """One recorded (time, value) pair plus its precomputed sort key."""

    __slots__ = ("time", "value", "sort_key")

    def __init__(self, time: Any, value: Any, sort_key: Any):
        self.time = time
        self.value = value
        self.sort_key = sort_key

    def __repr__(self) -> str:
        return f"_Slot({self.time!r}, {self.value!r})"


class SortedVersionStore:
    """Time-ordered slots for one key.

    Args:
        comparator: Three-way comparator for times, or None for natural ordering

    Invariants:
        - Times are distinct under the comparator and sorted ascending
        - Two times the comparator deems equal share one slot; the first
          time written is kept, later writes replace only the value
    """

    def __init__(self, comparator: Comparator | None = None):
        self._comparator = comparator
        self._sort_key: Callable[[Any], Any] = (
            _identity if comparator is None else cmp_to_key(comparator)
        )
        self._slots: SortedKeyList = SortedKeyList(key=attrgetter("sort_key"))

    def _index(self, sort_key: Any) -> int | None:
        """Return position of the slot matching sort_key exactly, if any."""
        i = self._slots.bisect_key_left(sort_key)
        if i < len(self._slots) and self._slots[i].sort_key == sort_key:
            return i
        return None

    def put(self, time: Any, value: Any) -> Any:
        """Insert or overwrite the slot at time; return old value or ABSENT."""
        sort_key = self._sort_key(time)
        i = self._index(sort_key)
        if i is not None:
            slot = self._slots[i]
            old = slot.value
            slot.value = value
            return old

        self._slots.add(_Slot(time, value, sort_key))
        return ABSENT

    def get(self, time: Any) -> Any:
        i = self._index(self._sort_key(time))
        if i is None:
            return ABSENT
        return self._slots[i].value

    def floor(self, time: Any) -> Any:
        """Return the value at the latest time <= time, or ABSENT."""
        i = self._slots.bisect_key_right(self._sort_key(time)) - 1
        if i < 0:
            return ABSENT
        return self._slots[i].value

    def lower(self, time: Any) -> bool:
        """Return whether some recorded time lies strictly before time."""
        return self._slots.bisect_key_left(self._sort_key(time)) > 0

    def remove(self, time: Any) -> Any:
        """Delete the slot at exactly time; return old value or ABSENT.

        The owner is expected to drop the store once it reports empty.
        """
        i = self._index(self._sort_key(time))
        if i is None:
            return ABSENT
        slot = self._slots.pop(i)
        return slot.value

    def item_at(self, index: int) -> tuple[Any, Any]:
        slot = self._slots[index]
        return (slot.time, slot.value)

    def items(self) -> Iterator[tuple[Any, Any]]:
        for slot in self._slots:
            yield (slot.time, slot.value)

    def size(self) -> int:
        return len(self._slots)

    def is_empty(self) -> bool:
        return not self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{t!r}: {v!r}" for t, v in self.items())
        return f"SortedVersionStore({{{pairs}}})"
