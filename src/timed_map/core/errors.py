"""Exception hierarchy for the timed map.

Absence is never an error; lookups return ``ABSENT`` instead. These
exceptions cover misuse and fail-fast iteration only.
"""

from __future__ import annotations


class TimedMapError(Exception):
    """Base exception for all timed map errors."""
    pass


class InvalidArgumentError(TimedMapError, TypeError):
    """Raised when a required argument is missing or unusable."""
    pass


class ConcurrentModificationError(TimedMapError, RuntimeError):
    """Raised when a view iteration observes an outside structural change."""
    pass


class StaleEntryError(ConcurrentModificationError):
    """Raised when an entry is used after the structure it came from changed."""
    pass


class IllegalStateError(TimedMapError, RuntimeError):
    """Raised when an iterator removal has no element to remove."""
    pass
