import logging
import random
from typing import Iterable, List, Optional

from jobsweep.browser.page import PageAccessor
from jobsweep.browser.utils import random_delay
from jobsweep.core.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

DEFAULT_CONSENT_LOCATORS: List[str] = [
    "#onetrust-accept-btn-handler",
    'button:has-text("Accept all")',
    'button:has-text("I agree")',
]


class ConsentHandler:
    """
    Dismisses cookie banners and consent overlays.

    Locators are tried in order across every frame; each one that matches a
    visible control is clicked once. Escape is pressed first to close modal
    popups that do not need a click.
    """

    def __init__(
        self,
        locators: Optional[Iterable[str]] = None,
        press_escape: bool = True,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        timeout: int = 2500,
    ):
        self.locators = list(DEFAULT_CONSENT_LOCATORS if locators is None else locators)
        self.press_escape = press_escape
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()
        self.timeout = timeout

    async def dismiss(self, page: PageAccessor) -> bool:
        """Returns True if any consent control was clicked."""
        if self.press_escape:
            await page.press("Escape")

        clicked = False
        for locator in self.locators:
            if await page.click(locator, timeout=self.timeout):
                logger.info(f"Dismissed overlay via: {locator}")
                clicked = True
                await random_delay(self.clock, self.rng, 0.3, 0.8)

        if not clicked:
            logger.debug("No consent overlay found")
        return clicked
