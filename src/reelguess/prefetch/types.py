"""Types shared by the prefetch buffer and its suppliers."""

from collections.abc import Callable
from dataclasses import asdict, dataclass, replace
from typing import Any, Protocol, TypeVar

T_co = TypeVar("T_co", covariant=True)


@dataclass(frozen=True, slots=True)
class PrefetchFilters:
    """Query parameters applied to every supplier call.

    Equality is structural, so replacing filters with an equal value is a
    no-op for the buffer.
    """

    start_year: int | None = None
    end_year: int | None = None
    language: str | None = None


@dataclass(slots=True)
class PrefetchStats:
    """Monotonic counters describing buffer behaviour."""

    queued: int = 0
    served_immediate: int = 0
    served_after_wait: int = 0
    timeouts: int = 0
    in_flight_max: int = 0

    def snapshot(self) -> "PrefetchStats":
        return replace(self)

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class Supplier(Protocol[T_co]):
    """Async source returning one candidate item per call, or None.

    Implementations may raise on transport failure. The buffer cancels the
    task running the call to abort it, so suppliers should not shield their
    awaits from cancellation.
    """

    async def __call__(self, filters: PrefetchFilters) -> T_co | None: ...


ErrorObserver = Callable[[BaseException], Any]
"""Hook receiving supplier errors the buffer swallows."""
