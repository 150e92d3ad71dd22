"""Configuration for the timed map.

Defines the construction-time parameters of a TimedHashMap.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..interfaces.version_store import VersionStore
    from .types import Comparator


@dataclass(frozen=True)
class TimedMapConfig:
    """Configuration parameters for a timed map.

    Attributes:
        comparator: Three-way comparator for times, or None for natural ordering
        store_factory: Builds the per-key VersionStore from the comparator;
            None selects SortedVersionStore
    """

    comparator: Comparator | None = None
    store_factory: Callable[[Comparator | None], VersionStore] | None = None
