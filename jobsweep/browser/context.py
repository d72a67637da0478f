"""
Browser Context Factory

Every attempt gets a brand new, non-persistent context: no cookies, storage or
cache survive from one attempt to the next.
"""

import logging

from playwright.async_api import Browser, BrowserContext

from jobsweep.config.settings import settings
from jobsweep.browser.stealth import apply_stealth_scripts

logger = logging.getLogger(__name__)


async def create_context(browser: Browser, user_agent: str) -> BrowserContext:
    """
    Create an isolated browser context with locale, viewport and stealth scripts.

    Args:
        browser: Browser instance
        user_agent: User agent for this attempt

    Returns:
        BrowserContext instance
    """
    context_config = {
        "user_agent": user_agent,
        "locale": settings.LOCALE,
        "viewport": {
            "width": settings.VIEWPORT_WIDTH,
            "height": settings.VIEWPORT_HEIGHT,
        },
        "ignore_https_errors": settings.IGNORE_HTTPS_ERRORS,
        "extra_http_headers": {
            "Accept-Language": f"{settings.LOCALE},{settings.LOCALE.split('-')[0]};q=0.9",
        },
    }
    if settings.TIMEZONE_ID:
        context_config["timezone_id"] = settings.TIMEZONE_ID

    context = await browser.new_context(**context_config)
    context.set_default_navigation_timeout(settings.NAVIGATION_TIMEOUT)
    context.set_default_timeout(settings.SELECTOR_TIMEOUT)

    await apply_stealth_scripts(context, user_agent, settings.LOCALE)

    logger.info("Isolated browser context created")
    return context
