"""Exponential backoff with additive jitter for empty supplier responses.

Prevents retry storms against the catalog when several attempts come back
empty at once.

Example:
    >>> policy = BackoffPolicy()
    >>> delay = compute_backoff(policy, attempt=2)  # 307.2ms + up to 80ms
    >>> await sleep_with_backoff(policy, attempt=2)

Formula: min(max_ms, initial_ms * factor^attempt + uniform(0, jitter_ms))
"""

import asyncio
import random
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    """Configuration for exponential backoff with jitter.

    Attributes:
        initial_ms: Base delay in milliseconds (default 120)
        factor: Multiplier per attempt (default 1.6)
        jitter_ms: Maximum additive jitter in milliseconds (default 80)
        max_ms: Delay cap in milliseconds (default 1500)
    """

    initial_ms: float = 120.0
    factor: float = 1.6
    jitter_ms: float = 80.0
    max_ms: float = 1500.0

    def __post_init__(self) -> None:
        """Validate policy parameters."""
        if self.initial_ms <= 0:
            raise ValueError("initial_ms must be positive")
        if self.max_ms < self.initial_ms:
            raise ValueError("max_ms must be >= initial_ms")
        if self.factor < 1.0:
            raise ValueError("factor must be >= 1.0")
        if self.jitter_ms < 0:
            raise ValueError("jitter_ms must be non-negative")


DEFAULT_BACKOFF = BackoffPolicy()
"""120ms * 1.6^n + jitter, capped at 1.5s."""


def compute_backoff(policy: BackoffPolicy, attempt: int) -> float:
    """Compute backoff delay in milliseconds.

    Args:
        policy: Backoff policy configuration
        attempt: Attempt number (1-indexed, first attempt = 1)

    Returns:
        Delay in milliseconds, capped at policy.max_ms
    """
    base = policy.initial_ms * (policy.factor ** max(attempt, 0))
    jitter = random.random() * policy.jitter_ms
    return min(policy.max_ms, base + jitter)


async def sleep_with_backoff(policy: BackoffPolicy, attempt: int) -> float:
    """Sleep for the backoff delay of ``attempt``.

    Returns:
        The delay slept, in milliseconds.
    """
    delay_ms = compute_backoff(policy, attempt)
    await asyncio.sleep(delay_ms / 1000)
    return delay_ms


def compute_backoff_sequence(policy: BackoffPolicy, max_attempts: int) -> list[float]:
    """Compute the jitter-free delays for attempts 1..max_attempts.

    Useful for logging the expected retry schedule.
    """
    return [
        min(policy.max_ms, policy.initial_ms * (policy.factor ** attempt))
        for attempt in range(1, max_attempts + 1)
    ]
