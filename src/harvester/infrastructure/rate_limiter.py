"""
Delay-based pacing between detail fetches.

The crawler fetches one item at a time, so pacing is a fixed base delay plus
random jitter rather than a token bucket or concurrency cap.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from harvester.constants import DEFAULT_DELAY_MS, DEFAULT_JITTER_MS

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class PacingConfig:
    """Configuration for the pacer."""
    # Base delay between fetches (seconds)
    base_delay: float = DEFAULT_DELAY_MS / 1000

    # Upper bound of the uniform jitter added on top (seconds)
    jitter: float = DEFAULT_JITTER_MS / 1000


class Pacer:
    """
    Sleeps ``base_delay + uniform(0, jitter)`` between fetches.

    Sleep and randomness are injectable so tests can run without real timers.
    """

    def __init__(
        self,
        config: Optional[PacingConfig] = None,
        sleep: Optional[SleepFn] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the pacer.

        Args:
            config: Pacing configuration
            sleep: Coroutine function used to wait (default: asyncio.sleep)
            rng: Random source for jitter
        """
        self.config = config or PacingConfig()
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()

        # Statistics
        self._total_waits = 0
        self._total_wait_time = 0.0

    def next_delay(self) -> float:
        """Delay for the next wait, including jitter."""
        jitter = self._rng.uniform(0, self.config.jitter) if self.config.jitter > 0 else 0.0
        return max(0.0, self.config.base_delay + jitter)

    async def wait(self) -> float:
        """
        Wait between two fetches.

        Returns:
            Time waited (seconds)
        """
        delay = self.next_delay()
        await self._sleep(delay)
        self._total_waits += 1
        self._total_wait_time += delay
        return delay

    async def pause(self, seconds: float) -> None:
        """Wait a fixed time without jitter (used after listing anomalies)."""
        await self._sleep(max(0.0, seconds))
        self._total_wait_time += max(0.0, seconds)

    @property
    def total_waits(self) -> int:
        return self._total_waits

    @property
    def total_wait_time(self) -> float:
        return self._total_wait_time
