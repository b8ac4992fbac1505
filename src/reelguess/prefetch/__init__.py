"""Background prefetching of game rounds.

The buffer hides catalog latency from the game loop: it keeps a few
validated items ready, refills in the background and degrades to
"nothing available" instead of raising.
"""

from reelguess.prefetch.backoff import (
    DEFAULT_BACKOFF,
    BackoffPolicy,
    compute_backoff,
    compute_backoff_sequence,
    sleep_with_backoff,
)
from reelguess.prefetch.buffer import PrefetchBuffer
from reelguess.prefetch.types import ErrorObserver, PrefetchFilters, PrefetchStats, Supplier

__all__ = [
    # Buffer
    "PrefetchBuffer",
    "PrefetchFilters",
    "PrefetchStats",
    "Supplier",
    "ErrorObserver",
    # Backoff
    "BackoffPolicy",
    "DEFAULT_BACKOFF",
    "compute_backoff",
    "compute_backoff_sequence",
    "sleep_with_backoff",
]
