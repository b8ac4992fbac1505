"""Small randomness helpers shared by the catalog client."""

import math
import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def random_index(length: int) -> int:
    """Return a random integer in ``[0, length)``."""
    return math.floor(random.random() * length)


def random_int_inclusive(low: float, high: float) -> int:
    """Return a random integer in ``[low, high]``.

    Fractional bounds are rounded inward (ceil for low, floor for high).
    """
    lo = math.ceil(low)
    hi = math.floor(high)
    return random.randint(lo, hi)


def pick(items: Sequence[T]) -> T | None:
    """Return a random element, or None for an empty sequence."""
    if not items:
        return None
    return items[random_index(len(items))]
