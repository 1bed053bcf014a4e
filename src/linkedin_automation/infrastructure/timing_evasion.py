"""
Human-behavior timing model.

Automated browsers often have predictable timing patterns that can be detected:
- Perfectly consistent delays between requests
- Uniform typing intervals
- No natural variation in behavior

This module provides the randomized waits consumed before and after every
externally observable action:
- random_delay(): a single uniform draw from [min, max] milliseconds
- Pacer: an injectable delay source carrying the pacing multiplier, so tests
  can run with zero delay and deterministic randomness
- Per-character keystroke delays with natural variation
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


async def random_delay(
    min_ms: float,
    max_ms: float,
    rng: Optional[random.Random] = None,
    sleep: Optional[SleepFunc] = None,
) -> float:
    """
    Sleep for a duration drawn uniformly from [min_ms, max_ms] milliseconds.

    Args:
        min_ms: Lower bound in milliseconds
        max_ms: Upper bound in milliseconds
        rng: Random source (module-level random if omitted)
        sleep: Sleep coroutine (asyncio.sleep if omitted)

    Returns:
        Actual delay in seconds
    """
    if min_ms > max_ms:
        min_ms, max_ms = max_ms, min_ms
    delay = (rng or random).uniform(min_ms, max_ms) / 1000.0
    await (sleep or asyncio.sleep)(delay)
    return delay


class TimingProfile(str, Enum):
    """Predefined pacing profiles."""
    FAST = "fast"  # Quick but still human-like
    NORMAL = "normal"  # Average user speed
    SLOW = "slow"  # Careful/slow user
    CAUTIOUS = "cautious"  # Very slow, careful navigation


PROFILE_MULTIPLIERS = {
    TimingProfile.FAST: 0.5,
    TimingProfile.NORMAL: 1.0,
    TimingProfile.SLOW: 1.8,
    TimingProfile.CAUTIOUS: 3.0,
}


@dataclass
class TimingConfig:
    """Keystroke timing configuration (milliseconds)."""
    min_type_delay: float = 80.0
    max_type_delay: float = 170.0
    jitter_factor: float = 0.2  # Max percentage variation


class Pacer:
    """
    Injectable source of randomized waits.

    Every delay is drawn uniformly from the requested bounds and scaled by
    the pacing multiplier. A multiplier of 0 disables waiting entirely.
    """

    def __init__(
        self,
        multiplier: float = 1.0,
        config: Optional[TimingConfig] = None,
        sleep: Optional[SleepFunc] = None,
        rng: Optional[random.Random] = None,
    ):
        if multiplier < 0:
            raise ValueError("multiplier must be >= 0")
        self.multiplier = multiplier
        self.config = config or TimingConfig()
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()

    @classmethod
    def instant(cls) -> "Pacer":
        """Pacer that never waits (for tests and dry runs)."""
        return cls(multiplier=0.0)

    @property
    def enabled(self) -> bool:
        return self.multiplier > 0

    async def delay(self, min_ms: float, max_ms: float, reason: str = "") -> float:
        """
        Wait a randomized duration.

        Args:
            min_ms: Lower bound in milliseconds
            max_ms: Upper bound in milliseconds
            reason: Label for debug logging

        Returns:
            Actual delay in seconds
        """
        if not self.enabled:
            return 0.0
        delay = await random_delay(
            min_ms * self.multiplier,
            max_ms * self.multiplier,
            rng=self._rng,
            sleep=self._sleep,
        )
        if reason:
            logger.debug(f"Paced ({reason}): {delay:.2f}s")
        return delay

    def _apply_jitter(self, value: float) -> float:
        std_dev = value * self.config.jitter_factor
        return max(0.0, self._rng.gauss(value, std_dev))

    def keystroke_delays(self, text: str) -> List[float]:
        """
        Get a list of delays (seconds) for typing a string.

        Creates natural typing pattern with variable speeds
        for different character types.

        Args:
            text: Text to type

        Returns:
            List of delays (one per character)
        """
        delays = []
        prev_char = None

        for char in text:
            base_delay = self._rng.uniform(
                self.config.min_type_delay,
                self.config.max_type_delay
            )

            if char == ' ':
                base_delay *= 1.3
            elif char in '.,!?@':
                base_delay *= 1.5
            elif char.isupper():
                # Shift key
                base_delay *= 1.2
            elif char.isdigit():
                base_delay *= 1.1

            # Repeated characters are faster
            if prev_char == char:
                base_delay *= 0.7

            delays.append(self._apply_jitter(base_delay) * self.multiplier / 1000.0)
            prev_char = char

        return delays

    async def sleep(self, seconds: float) -> None:
        """Sleep an already-drawn duration through the injected sleep."""
        if seconds > 0:
            await self._sleep(seconds)


def create_pacer(
    multiplier: float = 1.0,
    profile: Optional[Union[TimingProfile, str]] = None,
) -> Pacer:
    """
    Create a Pacer from a multiplier, optionally scaled by a preset profile.

    Args:
        multiplier: Base pacing multiplier (from configuration)
        profile: Optional timing profile (or its name) applied on top

    Returns:
        Configured Pacer instance
    """
    if profile is not None:
        multiplier *= PROFILE_MULTIPLIERS[TimingProfile(profile)]
    return Pacer(multiplier=multiplier)
