"""Tests for jittered exponential backoff."""
import random

import pytest

from jobsweep.core.clock import Clock, VirtualClock
from jobsweep.core.errors import NavigationError
from jobsweep.core.retry import backoff_delay, retry_async


def test_backoff_delay_grows_and_caps():
    rng = random.Random(0)
    assert 2.0 <= backoff_delay(0, 2.0, 10.0, rng) <= 3.0
    assert 4.0 <= backoff_delay(1, 2.0, 10.0, rng) <= 6.0
    assert 10.0 <= backoff_delay(5, 2.0, 10.0, rng) <= 15.0


async def test_retry_async_recovers():
    clock = VirtualClock()
    calls = []

    async def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise NavigationError("reset")
        return "ok"

    assert await retry_async(flaky, tries=3, retry_on=(NavigationError,), clock=clock, rng=random.Random(0)) == "ok"
    assert len(calls) == 3
    assert len(clock.sleeps) == 2


async def test_retry_async_reraises_last_error():
    clock = VirtualClock()

    async def broken():
        raise NavigationError("still down")

    with pytest.raises(NavigationError, match="still down"):
        await retry_async(broken, tries=2, retry_on=(NavigationError,), clock=clock)
    assert len(clock.sleeps) == 1


async def test_retry_async_does_not_retry_other_errors():
    clock = VirtualClock()

    async def bug():
        raise KeyError("oops")

    with pytest.raises(KeyError):
        await retry_async(bug, tries=3, retry_on=(NavigationError,), clock=clock)
    assert clock.sleeps == []


async def test_clock_interface_must_be_implemented():
    with pytest.raises(TypeError):
        Clock()

    clock = VirtualClock(start=5.0)
    await clock.sleep(-1)
    await clock.sleep(2.5)
    assert clock.sleeps == [0.0, 2.5]
    assert clock.monotonic() == 7.5
