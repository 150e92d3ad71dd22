"""Common type definitions for the timed map.

Defines the absence sentinel, the (key, time) pair and the tri-state
lookup result shared by all components.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, NamedTuple, TypeVar

K = TypeVar("K")
T = TypeVar("T")
V = TypeVar("V")

# Three-way comparison: negative, zero or positive
Comparator = Callable[[Any, Any], int]


class _AbsentType:
    """Type of the ``ABSENT`` sentinel.

    ``ABSENT`` is what lookups return when nothing is recorded. It is
    distinct from ``None``, which is an ordinary value a caller may store.
    """

    _instance: _AbsentType | None = None

    def __new__(cls) -> _AbsentType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self):
        return (_AbsentType, ())


ABSENT = _AbsentType()

# Marks an optional positional argument that was not supplied
UNSET: Any = object()


def is_usable(value: Any) -> bool:
    """True when value is neither the absence sentinel nor None."""
    return value is not ABSENT and value is not None


class TimedKey(NamedTuple):
    """Immutable (key, time) pair, the element type of the key view."""

    key: Any
    time: Any

    def __str__(self) -> str:
        return f"{self.key} @ {self.time}"


class LookupState(Enum):
    """Outcome of a floor lookup."""

    FOUND = "found"  # a value other than None
    EMPTY = "empty"  # an explicitly stored None
    MISSING = "missing"  # nothing recorded at or before the time


@dataclass(frozen=True)
class Lookup(Generic[V]):
    """Tri-state result of resolving a (key, time) association.

    Attributes:
        state: Which of the three outcomes occurred
        value: The resolved value; None unless state is FOUND
    """

    state: LookupState
    value: V | None = None

    @classmethod
    def of(cls, raw: Any) -> Lookup[V]:
        """Classify a raw ``get`` result."""
        if raw is ABSENT:
            return cls(LookupState.MISSING)
        if raw is None:
            return cls(LookupState.EMPTY)
        return cls(LookupState.FOUND, raw)

    @property
    def usable(self) -> bool:
        return self.state is LookupState.FOUND
