"""Bounded exponential retry policy for eventually consistent reads."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """`max_attempts` total tries, sleeping `base_delay * 2**(attempt - 1)` after each failure.

    The defaults (5 attempts, 1s base) wait at most 1 + 2 + 4 + 8 = 15 seconds.
    """

    max_attempts: int = 5
    base_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    def delay(self, attempt: int) -> float:
        """Delay to sleep after failed attempt number `attempt` (1-based)."""

        if attempt < 1:
            raise ValueError("attempt is 1-based")
        return self.base_delay * (1 << (attempt - 1))

    def exhausted(self, attempt: int) -> bool:
        return attempt >= self.max_attempts
