"""
Browser Launch Module

Launches one browser per attempt. Routing is set at launch time so that every
context of the browser shares the attempt's sticky upstream exit.
"""

import logging
from typing import Optional

from playwright.async_api import Browser, Playwright

from jobsweep.config.settings import settings
from jobsweep.core.models import ProxyCredential

logger = logging.getLogger(__name__)


async def create_browser(
    playwright: Playwright,
    proxy: Optional[ProxyCredential] = None,
) -> Browser:
    """
    Launch a Chromium browser, optionally through a proxy.

    Args:
        playwright: Playwright instance
        proxy: Credential for this attempt, already carrying its sticky session

    Returns:
        Browser instance
    """
    launch_options = {
        "headless": settings.HEADLESS,
        "args": ["--disable-blink-features=AutomationControlled"],
    }
    if settings.BROWSER_CHANNEL:
        launch_options["channel"] = settings.BROWSER_CHANNEL
    if proxy:
        launch_options["proxy"] = proxy.to_playwright()

    browser = await playwright.chromium.launch(**launch_options)

    logger.info(
        f"Browser launched (channel={settings.BROWSER_CHANNEL or 'chromium'}, "
        f"headless={settings.HEADLESS}, proxy={proxy.username if proxy else None})"
    )
    return browser
