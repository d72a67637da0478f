"""
Gate evasion through randomized human-like interaction.

Nothing here solves a challenge. A round of pointer travel, dwell and wheel
scrolling gives passive behavioural checks something to score; the caller
re-runs gate detection to see whether it helped.
"""

import logging
import random
from typing import Optional, Tuple

from jobsweep.browser.human_input import clamp_region, glide_pointer, random_point_in
from jobsweep.browser.page import PageAccessor
from jobsweep.browser.utils import random_delay
from jobsweep.core.clock import Clock, SystemClock
from jobsweep.core.errors import NavigationError

logger = logging.getLogger(__name__)

# (x0, y0, x1, y1) the pointer wanders in, clamped to the viewport
DEFAULT_REGION: Tuple[float, float, float, float] = (200, 220, 640, 480)


class EvasionController:
    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
        region: Tuple[float, float, float, float] = DEFAULT_REGION,
        dwell: Tuple[float, float] = (0.4, 0.8),
        first_dwell: Tuple[float, float] = (1.8, 4.0),
        wheel: Tuple[float, float] = (300, 800),
    ):
        self.rng = rng or random.Random()
        self.clock = clock or SystemClock()
        self.region = region
        self.dwell = dwell
        self.first_dwell = first_dwell
        self.wheel = wheel
        self._pointer: Optional[Tuple[float, float]] = None

    async def attempt_evasion(
        self, page: PageAccessor, round_budget: int = 1, reload: bool = True
    ) -> None:
        width, height = page.viewport()
        region = clamp_region(self.region, width, height)
        logger.info(f"Running {round_budget} evasion round(s)")

        for round_index in range(round_budget):
            dwell = self.first_dwell if round_index == 0 else self.dwell
            await random_delay(self.clock, self.rng, *dwell)

            start = self._pointer or random_point_in(region, self.rng)
            end = random_point_in(region, self.rng)
            self._pointer = await glide_pointer(page, start, end, self.rng, self.clock)
            await random_delay(self.clock, self.rng, *self.dwell)

            await page.wheel(0, self.rng.uniform(*self.wheel))
            await random_delay(self.clock, self.rng, *self.dwell)

        if reload:
            try:
                await page.reload()
            except NavigationError as e:
                logger.warning(f"Reload after evasion failed: {e}")
