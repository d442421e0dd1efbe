from __future__ import annotations

import random
from typing import Protocol, Sequence

from dps_allocation.errors import IndexSourceError


class IndexSource(Protocol):
    """Anything with `randrange(stop)`, e.g. `random.Random` or a test stub."""

    def randrange(self, stop: int) -> int:
        ...


# SystemRandom keeps no state of its own, so one instance is safe across threads.
_system_random = random.SystemRandom()


def default_index_source() -> IndexSource:
    return _system_random


def random_index(maximum: int, source: IndexSource) -> int:
    index = source.randrange(maximum)
    if not 0 <= index < maximum:
        raise IndexSourceError(f"index {index} outside [0, {maximum})")
    return index


def select_target(targets: Sequence[str], source: IndexSource) -> str:
    """Uniform pick over `targets`; "" when there is nothing to pick."""
    if not targets:
        return ""
    return targets[random_index(len(targets), source)]
