"""Reelguess: a trailer rating guessing game backend.

The core is :class:`reelguess.prefetch.PrefetchBuffer`, which keeps playable
rounds warm so the game loop never waits on the movie catalog.
"""

from reelguess.prefetch import PrefetchBuffer, PrefetchFilters, PrefetchStats

__version__ = "0.1.0"

__all__ = [
    "PrefetchBuffer",
    "PrefetchFilters",
    "PrefetchStats",
    "__version__",
]
