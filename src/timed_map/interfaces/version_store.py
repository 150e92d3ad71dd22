"""Protocol definition for VersionStore."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterator


class VersionStore(Protocol):
    """Ordered time -> value slots recorded for a single key.

    Missing times are reported with the ``ABSENT`` sentinel, never raised.
    """

    def put(self, time: Any, value: Any) -> Any:
        """Insert or overwrite the slot at time; return old value or ABSENT."""
        ...

    def get(self, time: Any) -> Any:
        """Return the value stored at exactly time, or ABSENT."""
        ...

    def floor(self, time: Any) -> Any:
        """Return the value at the latest time <= time, or ABSENT."""
        ...

    def lower(self, time: Any) -> bool:
        """Return whether some recorded time lies strictly before time."""
        ...

    def remove(self, time: Any) -> Any:
        """Delete the slot at exactly time; return old value or ABSENT."""
        ...

    def item_at(self, index: int) -> tuple[Any, Any]:
        """Return the (time, value) pair at a position in time order."""
        ...

    def items(self) -> Iterator[tuple[Any, Any]]:
        """Iterate (time, value) pairs in ascending time order."""
        ...

    def size(self) -> int:
        """Return number of recorded times."""
        ...

    def is_empty(self) -> bool:
        """Return whether no time is recorded."""
        ...

    def __len__(self) -> int:
        ...
