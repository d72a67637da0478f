"""
Result materialization.

Sites reveal their full result set in one of three ways: infinite scroll,
a "load more" control, or numbered result pages. The materializer drives the
first two in place and exposes advance() for the third; every loop is capped
so unattended runs cannot spin forever against a hostile page.
"""

import logging
import random
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

from jobsweep.browser.page import PageAccessor
from jobsweep.browser.utils import random_delay
from jobsweep.config.settings import settings
from jobsweep.core.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

# Consecutive rounds without height growth before scrolling stops
STABLE_ROUNDS = 3


class Strategy(Enum):
    SCROLL = "scroll"
    LOAD_MORE = "load_more"
    PAGINATED = "paginated"


class ResultMaterializer:
    def __init__(
        self,
        result_marker: str,
        container: Optional[str] = None,
        load_more_locator: Optional[str] = None,
        next_locator: Optional[str] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        wait_timeout: int = settings.SELECTOR_TIMEOUT,
        poll_interval: float = 0.5,
    ):
        self.result_marker = result_marker
        self.container = container
        self.load_more_locator = load_more_locator
        self.next_locator = next_locator
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()
        self.wait_timeout = wait_timeout
        self.poll_interval = poll_interval

    async def materialize(self, page: PageAccessor, strategy: Strategy, page_budget: int) -> int:
        """
        Load as much of the current result view as the strategy allows.
        Returns the number of rounds performed (0 for PAGINATED).
        """
        if strategy is Strategy.SCROLL:
            return await self._scroll_until_stable(page, page_budget)
        if strategy is Strategy.LOAD_MORE:
            return await self._load_more(page, page_budget)
        return 0

    async def advance(self, page: PageAccessor) -> bool:
        """
        Click the next-page control and wait for a different set of results.
        Returns False if there is no control or nothing changed in time.
        """
        if not self.next_locator:
            return False

        before = await self._signature(page)
        if not await page.click(self.next_locator):
            logger.info("No next-page control, last page reached")
            return False

        async def changed() -> bool:
            current = await self._signature(page)
            return current[1] > 0 and current != before

        if await self._wait_until(changed):
            logger.info(f"Advanced to next results page: {page.url}")
            return True
        logger.warning("Next-page click did not change the results")
        return False

    async def _scroll_until_stable(self, page: PageAccessor, budget: int) -> int:
        logger.info("Scrolling to load all results...")
        previous = await page.content_height(self.container)
        unchanged = 0
        rounds = 0

        while rounds < budget:
            rounds += 1
            await page.scroll(self.rng.randint(400, 900), self.container)
            await random_delay(self.clock, self.rng, 0.6, 1.4)

            height = await page.content_height(self.container)
            if height == previous:
                unchanged += 1
                if unchanged >= STABLE_ROUNDS:
                    logger.info(f"Content height stable after {rounds} scrolls")
                    break
            else:
                unchanged = 0
                previous = height
        else:
            logger.info(f"Scroll budget of {budget} rounds reached")

        return rounds

    async def _load_more(self, page: PageAccessor, budget: int) -> int:
        if not self.load_more_locator:
            return 0

        clicks = 0
        while clicks < budget:
            before = await page.count(self.result_marker)
            if not await page.click(self.load_more_locator):
                logger.info("Load-more control absent, all results loaded")
                break
            clicks += 1

            async def grew() -> bool:
                return await page.count(self.result_marker) > before

            if not await self._wait_until(grew):
                logger.info(f"No new results after load-more click {clicks}")
                break
            await random_delay(self.clock, self.rng, 0.5, 1.2)

        logger.info(f"Load-more finished after {clicks} clicks")
        return clicks

    async def _signature(self, page: PageAccessor) -> Tuple[str, int, str]:
        count = await page.count(self.result_marker)
        first = await page.read_text(self.result_marker) if count else None
        return (page.url, count, first or "")

    async def _wait_until(self, predicate: Callable[[], Awaitable[bool]]) -> bool:
        deadline = self.clock.monotonic() + self.wait_timeout / 1000
        while True:
            if await predicate():
                return True
            if self.clock.monotonic() >= deadline:
                return False
            await self.clock.sleep(self.poll_interval)
