"""
Retry policy for detail-page fetches.

Attempts move through a small state machine:

    Attempting(n) -> Success
                  -> RetryableFailure(n + 1)   while n < tries
                  -> ExhaustedFailure          once n == tries

Backoff is a pure function of the attempt number, so retry delays can be
checked without real timers.
"""

from dataclasses import dataclass
from enum import Enum

from harvester.constants import (
    DEFAULT_FETCH_TRIES,
    INITIAL_BACKOFF_DELAY_SECONDS,
    MAX_BACKOFF_DELAY_SECONDS,
)


class AttemptOutcome(Enum):
    """Result of a single fetch attempt."""
    SUCCESS = "success"
    RETRYABLE = "retryable"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry budget with capped, attempt-proportional backoff."""

    tries: int = DEFAULT_FETCH_TRIES
    base_backoff: float = INITIAL_BACKOFF_DELAY_SECONDS
    cap_backoff: float = MAX_BACKOFF_DELAY_SECONDS

    def __post_init__(self):
        if self.tries < 1:
            raise ValueError("tries must be at least 1")
        if self.base_backoff < 0 or self.cap_backoff < 0:
            raise ValueError("backoff values must not be negative")

    def backoff(self, attempt: int) -> float:
        """Delay in seconds after failed attempt number ``attempt`` (1-indexed)."""
        return min(self.base_backoff * max(attempt, 1), self.cap_backoff)

    def after_failure(self, attempt: int) -> AttemptOutcome:
        """Classify a failed attempt: retry again or give up."""
        if attempt < self.tries:
            return AttemptOutcome.RETRYABLE
        return AttemptOutcome.EXHAUSTED
