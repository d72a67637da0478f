import logging
import re
from typing import Iterable, List, Optional, Pattern

from jobsweep.browser.page import PageAccessor
from jobsweep.core.models import GateState

logger = logging.getLogger(__name__)

# Phrases shown by the common challenge interstitials
DEFAULT_GATE_PHRASES: List[str] = [
    r"verify you are human",
    r"checking your browser",
    r"just a moment",
    r"additional verification required",
    r"are you a robot",
    r"unusual traffic",
]

DEFAULT_CHALLENGE_LOCATORS: List[str] = [
    'iframe[src*="captcha"]',
    'iframe[src*="challenge"]',
    'iframe[title*="Cloudflare"]',
    "#captcha-form",
    ".captcha-container",
    '[id*="captcha"]',
]


class GateDetector:
    """
    Classifies a page as CLEAR or GATED.

    A page is GATED only when a challenge signal is present (challenge markup
    or a gate phrase in the rendered text) AND the results landmark is absent.
    Challenge widgets that coexist with visible results do not count.
    """

    def __init__(
        self,
        results_landmark: str,
        challenge_locators: Optional[Iterable[str]] = None,
        phrases: Optional[Iterable[str]] = None,
    ):
        self.results_landmark = results_landmark
        self.challenge_locators = list(
            DEFAULT_CHALLENGE_LOCATORS if challenge_locators is None else challenge_locators
        )
        self.phrases: List[Pattern] = [
            re.compile(p, re.IGNORECASE)
            for p in (DEFAULT_GATE_PHRASES if phrases is None else phrases)
        ]
        self.last_state = GateState.CLEAR

    async def check(self, page: PageAccessor) -> GateState:
        try:
            state = await self._classify(page)
        except Exception as e:
            # Usually a navigation in flight destroyed the execution context
            logger.debug(f"Gate check inconclusive, assuming clear: {e}")
            state = GateState.CLEAR

        if state is GateState.GATED:
            logger.warning(f"Bot challenge detected at {page.url}")
        self.last_state = state
        return state

    async def _classify(self, page: PageAccessor) -> GateState:
        if not await self.has_challenge(page):
            return GateState.CLEAR
        if await page.count(self.results_landmark) > 0:
            logger.debug("Challenge markup present alongside results, ignoring")
            return GateState.CLEAR
        return GateState.GATED

    async def has_challenge(self, page: PageAccessor) -> bool:
        for locator in self.challenge_locators:
            if await page.count(locator) > 0:
                logger.debug(f"Challenge indicator found: {locator}")
                return True

        body = (await page.read_text("body") or "").lower()
        for phrase in self.phrases:
            if phrase.search(body):
                logger.debug(f"Gate phrase found: {phrase.pattern}")
                return True
        return False
