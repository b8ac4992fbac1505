"""Background prefetch buffer.

Keeps a small FIFO of ready items so the game loop can serve the next
round without waiting on the catalog. Fetches run as asyncio tasks in the
background, bounded by a concurrency ceiling, deduplicated by item id and
retried with exponential backoff when the supplier comes back empty.

All state is mutated from the event loop thread only. Mutations happen
between suspension points, so no lock is needed.

Example:
    >>> async with PrefetchBuffer(supplier, capacity=3, concurrency=2) as buffer:
    ...     buffer.set_filters(PrefetchFilters(start_year=1990, end_year=1999))
    ...     movie = await buffer.next(timeout=5.0)
    ...     if movie is None:
    ...         print("Nothing available yet")
"""

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Hashable
from operator import attrgetter
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from reelguess.prefetch.backoff import (
    DEFAULT_BACKOFF,
    BackoffPolicy,
    compute_backoff,
    sleep_with_backoff,
)
from reelguess.prefetch.types import ErrorObserver, PrefetchFilters, PrefetchStats, Supplier

if TYPE_CHECKING:
    from reelguess.config import PrefetchConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CAPACITY = 3
DEFAULT_CONCURRENCY = 2
DEFAULT_MAX_ATTEMPTS = 6
DEFAULT_TIMEOUT = 8.0
POLL_INTERVAL = 0.05
REFILL_DELAY = 0.01


class PrefetchBuffer(Generic[T]):
    """Bounded, deduplicating, concurrency-limited prefetch queue.

    Args:
        supplier: Async callable returning one candidate or None.
        capacity: Ready items to keep warm.
        concurrency: Maximum supplier calls outstanding at once.
        key: Extracts the dedup identifier from an item (default ``item.id``).
        max_attempts: Supplier calls per launched attempt.
        backoff: Delay policy after an empty supplier response.
        default_timeout: Seconds next() waits when no timeout is given.
        poll_interval: Seconds between queue checks inside next().
        refill_delay: Seconds before a successful attempt re-arms filling.
        on_error: Receives supplier exceptions after they are logged.
    """

    def __init__(
        self,
        supplier: Supplier[T],
        *,
        capacity: int = DEFAULT_CAPACITY,
        concurrency: int = DEFAULT_CONCURRENCY,
        key: Callable[[T], Hashable] | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff: BackoffPolicy = DEFAULT_BACKOFF,
        default_timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
        refill_delay: float = REFILL_DELAY,
        on_error: ErrorObserver | None = None,
    ) -> None:
        self._supplier = supplier
        self._capacity = capacity if capacity > 0 else DEFAULT_CAPACITY
        self._concurrency = max(1, concurrency)
        self._key: Callable[[T], Hashable] = key or attrgetter("id")
        self._max_attempts = max(1, max_attempts)
        self._backoff = backoff
        self._default_timeout = default_timeout
        self._poll_interval = poll_interval
        self._refill_delay = refill_delay
        self._on_error = on_error

        self._queue: deque[T] = deque()
        self._seen: set[Hashable] = set()
        self._in_flight: set[asyncio.Task[None]] = set()
        self._fill_task: asyncio.Task[None] | None = None
        self._filters = PrefetchFilters()
        self._epoch = 0
        self._stats = PrefetchStats()
        self._closed = False
        self._waiters = 0

    @classmethod
    def from_config(
        cls,
        supplier: Supplier[T],
        config: "PrefetchConfig",
        **kwargs: Any,
    ) -> "PrefetchBuffer[T]":
        """Build a buffer from the ``prefetch`` config section."""
        backoff = BackoffPolicy(
            initial_ms=config.backoff.initial_ms,
            factor=config.backoff.factor,
            jitter_ms=config.backoff.jitter_ms,
            max_ms=config.backoff.max_ms,
        )
        return cls(
            supplier,
            capacity=config.capacity,
            concurrency=config.concurrency,
            max_attempts=config.max_attempts,
            backoff=backoff,
            default_timeout=config.timeout,
            poll_interval=config.poll_interval,
            refill_delay=config.refill_delay,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def in_flight(self) -> int:
        """Number of supplier calls currently outstanding."""
        return len(self._in_flight)

    @property
    def filters(self) -> PrefetchFilters:
        return self._filters

    @property
    def closed(self) -> bool:
        return self._closed

    def stats(self) -> PrefetchStats:
        """Return a snapshot of the counters."""
        return self._stats.snapshot()

    def reset_stats(self) -> None:
        self._stats = PrefetchStats()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(self, capacity: int | None = None, concurrency: int | None = None) -> None:
        """Update capacity and/or concurrency, then trigger a fill.

        Non-positive or missing values keep the current setting.
        """
        if capacity is not None and capacity > 0:
            self._capacity = capacity
        if concurrency is not None and concurrency > 0:
            self._concurrency = concurrency
        logger.debug("configure capacity=%d concurrency=%d", self._capacity, self._concurrency)
        self.fill()

    def set_filters(self, filters: PrefetchFilters | None) -> None:
        """Replace the filters applied to new supplier calls.

        An equal value is a no-op. A new value starts a new filter epoch:
        dedup history is cleared, in-flight calls are cancelled and queued
        items fetched under the old filters are purged.
        """
        filters = filters or PrefetchFilters()
        if filters == self._filters:
            return
        self._filters = filters
        self._epoch += 1
        self._seen.clear()
        self.cancel(clear_queue=True)
        logger.debug("set_filters %s (epoch %d)", filters, self._epoch)
        self.fill()

    # ------------------------------------------------------------------
    # Filling
    # ------------------------------------------------------------------

    def fill(self) -> None:
        """Start a fill cycle unless one is already active.

        Outside a running event loop the fill is deferred until the next
        call to next().
        """
        self._schedule_fill(0.0)

    def _schedule_fill(self, delay: float, *, only_if_waiting: bool = False) -> None:
        if self._closed:
            return
        if self._fill_task is not None and not self._fill_task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("fill deferred: no running event loop")
            return
        self._fill_task = loop.create_task(
            self._fill_cycle(delay, only_if_waiting), name="prefetch-fill"
        )

    def _has_room(self) -> bool:
        return len(self._queue) < self._capacity and len(self._in_flight) < self._concurrency

    async def _fill_cycle(self, delay: float, only_if_waiting: bool = False) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        if only_if_waiting and not self._waiters:
            return
        while not self._closed and self._has_room():
            self._launch_attempt()
            self._stats.in_flight_max = max(self._stats.in_flight_max, len(self._in_flight))

    def _launch_attempt(self) -> None:
        task = asyncio.get_running_loop().create_task(
            self._attempt(self._epoch, self._filters),
            name="prefetch-attempt",
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _attempt(self, epoch: int, filters: PrefetchFilters) -> None:
        """Call the supplier until one novel item is queued or attempts run out."""
        attempt = 0
        try:
            while (
                attempt < self._max_attempts
                and epoch == self._epoch
                and len(self._queue) < self._capacity
            ):
                attempt += 1
                candidate = await self._supplier(filters)
                if epoch != self._epoch:
                    return

                if candidate is None:
                    if attempt < self._max_attempts:
                        await sleep_with_backoff(self._backoff, attempt)
                    continue

                ident = self._key(candidate)
                if ident in self._seen:
                    logger.debug("skip duplicate id=%s", ident)
                    continue

                if len(self._queue) >= self._capacity:
                    logger.debug("discard id=%s: buffer already full", ident)
                    return

                self._seen.add(ident)
                self._queue.append(candidate)
                self._stats.queued += 1
                logger.debug("queued id=%s q=%d", ident, len(self._queue))
                self._schedule_fill(self._refill_delay)
                return

            if attempt >= self._max_attempts and epoch == self._epoch:
                logger.debug("attempt gave up after %d supplier calls", attempt)
                self._retry_for_waiters(self._refill_delay)
        except Exception as e:
            self._report_error(e)
            if epoch == self._epoch:
                self._retry_for_waiters(compute_backoff(self._backoff, 1) / 1000)

    def _retry_for_waiters(self, delay: float) -> None:
        """Start another fill after ``delay`` if a next() call is still waiting."""
        # The finishing attempt no longer counts against the concurrency ceiling.
        current = asyncio.current_task()
        if current is not None:
            self._in_flight.discard(current)
        self._schedule_fill(delay, only_if_waiting=True)

    def _report_error(self, exc: Exception) -> None:
        logger.warning(
            "Supplier call failed: %s",
            exc,
            exc_info=logger.isEnabledFor(logging.DEBUG),
        )
        if self._on_error is None:
            return
        try:
            self._on_error(exc)
        except Exception:
            logger.exception("Prefetch error observer raised")

    # ------------------------------------------------------------------
    # Consumption
    # ------------------------------------------------------------------

    def _pop(self, *, waited: bool) -> T:
        item = self._queue.popleft()
        if waited:
            self._stats.served_after_wait += 1
        else:
            self._stats.served_immediate += 1
        logger.debug(
            "serve %s id=%s q=%d",
            "after wait" if waited else "immediate",
            self._key(item),
            len(self._queue),
        )
        self.fill()
        return item

    async def next(self, timeout: float | None = None) -> T | None:
        """Return the next item, waiting up to ``timeout`` seconds.

        Never raises for supplier problems: returns None when nothing
        arrived before the deadline. While a call waits, attempts that give
        up or fail are restarted. A timeout does not cancel background
        fetches, so a late result serves the following call.
        """
        if self._closed:
            return None
        if self._queue:
            return self._pop(waited=False)

        self.fill()
        loop = asyncio.get_running_loop()
        wait = self._default_timeout if timeout is None else timeout
        deadline = loop.time() + wait
        self._waiters += 1
        try:
            while True:
                if self._queue:
                    return self._pop(waited=True)
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                await asyncio.sleep(min(self._poll_interval, remaining))
        finally:
            self._waiters -= 1

        self._stats.timeouts += 1
        logger.debug("timeout waiting for item after %.2fs", wait)
        return None

    # ------------------------------------------------------------------
    # Cancellation and teardown
    # ------------------------------------------------------------------

    def cancel(self, clear_queue: bool = False) -> None:
        """Cancel every outstanding supplier call.

        Args:
            clear_queue: Also drop queued items that were not consumed.
        """
        for task in self._in_flight:
            task.cancel()
        self._in_flight.clear()
        if clear_queue:
            self._queue.clear()

    async def aclose(self) -> None:
        """Cancel the fill cycle and all attempts, and drop queued items."""
        if self._closed:
            return
        self._closed = True
        pending = list(self._in_flight)
        if self._fill_task is not None and not self._fill_task.done():
            self._fill_task.cancel()
            pending.append(self._fill_task)
        self.cancel(clear_queue=True)
        await asyncio.gather(*pending, return_exceptions=True)
        logger.debug("prefetch buffer closed")

    async def __aenter__(self) -> "PrefetchBuffer[T]":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
