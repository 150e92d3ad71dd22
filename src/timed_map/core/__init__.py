"""Timed map core."""

from .timed_hash_map import TimedHashMap

__all__ = ["TimedHashMap"]
