"""
Browser Utility Functions

Lightweight helpers for adding behavioral realism to scraping.
"""

import random
from typing import Optional

from jobsweep.core.clock import Clock


async def random_delay(
    clock: Clock,
    rng: random.Random,
    min_seconds: float = 0.5,
    max_seconds: float = 2.0,
    variance: Optional[float] = None,
) -> float:
    """
    Sleep for a uniformly drawn duration to avoid perfectly timed bot patterns.

    Args:
        clock: Time source to sleep on
        rng: Random source (seed it for reproducible runs)
        min_seconds: Minimum delay in seconds
        max_seconds: Maximum delay in seconds
        variance: Optional additional random variance to add

    Returns:
        The delay actually slept, in seconds.

    Example:
        await random_delay(clock, rng, 1.0, 3.0)  # Wait 1-3 seconds
    """
    delay = rng.uniform(min_seconds, max_seconds)

    if variance:
        delay += rng.uniform(-variance, variance)

    delay = max(0.0, delay)

    await clock.sleep(delay)
    return delay
