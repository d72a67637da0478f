"""Tests for consent dismissal, evasion rounds and pointer paths."""
import random

from fakes import CONSENT, FakePage
from jobsweep.browser.human_input import clamp_region, random_cursor_path
from jobsweep.core.clock import VirtualClock
from jobsweep.core.consent import ConsentHandler
from jobsweep.core.errors import NavigationError
from jobsweep.core.evasion import DEFAULT_REGION, EvasionController


async def test_consent_is_dismissed_once():
    page = FakePage(consent=True)
    handler = ConsentHandler([CONSENT, "#not-there"], clock=VirtualClock(), rng=random.Random(1))

    assert await handler.dismiss(page) is True
    assert page.clicks == [CONSENT]
    assert page.keys == ["Escape"]
    assert await handler.dismiss(page) is False


async def test_consent_without_escape():
    page = FakePage()
    handler = ConsentHandler([CONSENT], press_escape=False, clock=VirtualClock())
    assert await handler.dismiss(page) is False
    assert page.keys == []


async def test_evasion_rounds_stay_in_bounds():
    page = FakePage()
    clock = VirtualClock()
    controller = EvasionController(rng=random.Random(7), clock=clock)

    await controller.attempt_evasion(page, round_budget=3)

    assert len(page.wheels) == 3
    assert all(300 <= dy <= 800 for dy in page.wheels)
    x0, y0, x1, y1 = DEFAULT_REGION
    x, y = page.pointer[-1]
    assert x0 <= x <= x1 and y0 <= y <= y1
    assert page.reloads == 1
    # first dwell is the long one
    assert 1.8 <= clock.sleeps[0] <= 4.0
    assert clock.slept > 0


async def test_evasion_without_reload():
    page = FakePage()
    await EvasionController(rng=random.Random(1), clock=VirtualClock()).attempt_evasion(page, 1, reload=False)
    assert page.reloads == 0


async def test_evasion_is_reproducible_with_a_seed():
    first, second = FakePage(), FakePage()
    await EvasionController(rng=random.Random(42), clock=VirtualClock()).attempt_evasion(first, 2)
    await EvasionController(rng=random.Random(42), clock=VirtualClock()).attempt_evasion(second, 2)
    assert first.pointer == second.pointer
    assert first.wheels == second.wheels


class _BrokenReloadPage(FakePage):
    async def reload(self, timeout=0):
        raise NavigationError("reload timed out")


async def test_evasion_swallows_reload_failure():
    page = _BrokenReloadPage()
    await EvasionController(rng=random.Random(3), clock=VirtualClock()).attempt_evasion(page, 1)
    assert len(page.wheels) == 1


def test_cursor_path_starts_and_ends_on_target():
    path = random_cursor_path((0, 0), (300, 200), random.Random(5), steps=12)
    assert len(path) == 13
    assert path[0] == (0, 0)
    assert path[-1] == (300, 200)


def test_clamp_region_fits_small_viewport():
    assert clamp_region((200, 220, 640, 480), 400, 300) == (200, 220, 380, 280)
