"""
Page Accessor

Narrow capability interface over a single browser page. Everything above the
browser layer (consent, gate detection, evasion, materialization, extraction)
talks to a PageAccessor instead of a Playwright Page, so it can be exercised
against an in-memory fake without launching a browser.

Locators are Playwright selector strings (CSS, or "xpath=..." / "text=...").
Read helpers never raise for a missing element: they return None, 0 or False.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from jobsweep.config.settings import settings
from jobsweep.core.errors import NavigationError

logger = logging.getLogger(__name__)

# Locator addressing the element itself rather than a descendant
SELF_LOCATOR = ":scope"

# Nearest scrollable ancestor of the container, falling back to the document
_SCROLL_TARGET_JS = """
(selector) => {
    const scrollable = (el) => {
        const style = getComputedStyle(el);
        return /(auto|scroll)/.test(style.overflowY + style.overflow)
            && el.scrollHeight > el.clientHeight;
    };
    let el = selector ? document.querySelector(selector) : null;
    while (el && el !== document.body && !scrollable(el)) {
        el = el.parentElement;
    }
    if (!el || el === document.body || !scrollable(el)) {
        el = document.scrollingElement || document.body;
    }
    return el;
}
"""

_SCROLL_JS = f"""
([selector, dy]) => {{
    const target = ({_SCROLL_TARGET_JS})(selector);
    target.scrollBy(0, dy);
}}
"""

_HEIGHT_JS = f"""
(selector) => ({_SCROLL_TARGET_JS})(selector).scrollHeight
"""


class ElementAccessor(ABC):
    """A single matched element, e.g. one result card."""

    @abstractmethod
    async def read_text(self, locator: Optional[str] = None) -> Optional[str]:
        """Text of the first descendant matching locator (or of the element itself)."""

    @abstractmethod
    async def read_attribute(
        self, name: str, locator: Optional[str] = None
    ) -> Optional[str]:
        """Attribute of the first descendant matching locator (or of the element itself)."""


class PageAccessor(ABC):
    """Capabilities the scrape pipeline needs from one browser page."""

    @property
    @abstractmethod
    def url(self) -> str:
        """Current page url."""

    @abstractmethod
    async def navigate(self, url: str, timeout: int = settings.NAVIGATION_TIMEOUT) -> None:
        """Load url until DOMContentLoaded. Raises NavigationError."""

    @abstractmethod
    async def reload(self, timeout: int = settings.NAVIGATION_TIMEOUT) -> None:
        """Reload the current page. Raises NavigationError."""

    @abstractmethod
    async def wait_for(self, locator: str, timeout: int = settings.SELECTOR_TIMEOUT) -> bool:
        """Wait until locator is visible. Returns False on timeout."""

    @abstractmethod
    async def count(self, locator: str) -> int:
        pass

    @abstractmethod
    async def is_visible(self, locator: str) -> bool:
        pass

    @abstractmethod
    async def read_text(self, locator: str) -> Optional[str]:
        """Rendered text of the first element matching locator."""

    @abstractmethod
    async def read_attribute(self, locator: str, name: str) -> Optional[str]:
        pass

    @abstractmethod
    async def query_all(self, locator: str) -> List[ElementAccessor]:
        pass

    @abstractmethod
    async def click(self, locator: str, timeout: int = settings.SELECTOR_TIMEOUT) -> bool:
        """Click the first visible match in any frame. Returns True if something was clicked."""

    @abstractmethod
    async def press(self, key: str) -> None:
        pass

    @abstractmethod
    async def move_pointer(self, x: float, y: float, steps: int = 1) -> None:
        pass

    @abstractmethod
    async def wheel(self, dx: float, dy: float) -> None:
        pass

    @abstractmethod
    async def scroll(self, dy: float, container: Optional[str] = None) -> None:
        """Scroll the container's scrollable ancestor, or the viewport."""

    @abstractmethod
    async def content_height(self, container: Optional[str] = None) -> int:
        pass

    @abstractmethod
    def viewport(self) -> Tuple[int, int]:
        pass

    @abstractmethod
    async def screenshot(self, path: str) -> None:
        pass

    @abstractmethod
    async def content(self) -> str:
        """Raw HTML of the page."""

    @abstractmethod
    async def title(self) -> str:
        pass


class PlaywrightElement(ElementAccessor):
    def __init__(self, locator: Locator):
        self._locator = locator

    def _target(self, locator: Optional[str]) -> Locator:
        if not locator or locator == SELF_LOCATOR:
            return self._locator
        return self._locator.locator(locator).first

    async def read_text(self, locator: Optional[str] = None) -> Optional[str]:
        try:
            target = self._target(locator)
            if await target.count() == 0:
                return None
            return await target.text_content(timeout=settings.SELECTOR_TIMEOUT)
        except PlaywrightError as e:
            logger.debug(f"Text read failed for '{locator}': {e}")
            return None

    async def read_attribute(
        self, name: str, locator: Optional[str] = None
    ) -> Optional[str]:
        try:
            target = self._target(locator)
            if await target.count() == 0:
                return None
            return await target.get_attribute(name, timeout=settings.SELECTOR_TIMEOUT)
        except PlaywrightError as e:
            logger.debug(f"Attribute read failed for '{locator}@{name}': {e}")
            return None


class PlaywrightPageAccessor(PageAccessor):
    """
    PageAccessor backed by a Playwright async Page.
    """

    def __init__(self, page: Page):
        self._page = page

    @property
    def page(self) -> Page:
        return self._page

    @property
    def url(self) -> str:
        return self._page.url

    async def navigate(self, url: str, timeout: int = settings.NAVIGATION_TIMEOUT) -> None:
        try:
            await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout)
        except PlaywrightError as e:
            raise NavigationError(f"Navigation to {url} failed: {e}") from e

    async def reload(self, timeout: int = settings.NAVIGATION_TIMEOUT) -> None:
        try:
            await self._page.reload(wait_until="domcontentloaded", timeout=timeout)
        except PlaywrightError as e:
            raise NavigationError(f"Reload of {self.url} failed: {e}") from e

    async def wait_for(self, locator: str, timeout: int = settings.SELECTOR_TIMEOUT) -> bool:
        try:
            await self._page.locator(locator).first.wait_for(
                state="visible", timeout=timeout
            )
            return True
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as e:
            logger.debug(f"Wait for '{locator}' failed: {e}")
            return False

    async def count(self, locator: str) -> int:
        try:
            return await self._page.locator(locator).count()
        except PlaywrightError as e:
            logger.debug(f"Count for '{locator}' failed: {e}")
            return 0

    async def is_visible(self, locator: str) -> bool:
        try:
            return await self._page.locator(locator).first.is_visible()
        except PlaywrightError as e:
            logger.debug(f"Visibility check for '{locator}' failed: {e}")
            return False

    async def read_text(self, locator: str) -> Optional[str]:
        try:
            loc = self._page.locator(locator).first
            if await loc.count() == 0:
                return None
            return await loc.inner_text(timeout=settings.SELECTOR_TIMEOUT)
        except PlaywrightError as e:
            logger.debug(f"Text read failed for '{locator}': {e}")
            return None

    async def read_attribute(self, locator: str, name: str) -> Optional[str]:
        try:
            loc = self._page.locator(locator).first
            if await loc.count() == 0:
                return None
            return await loc.get_attribute(name, timeout=settings.SELECTOR_TIMEOUT)
        except PlaywrightError as e:
            logger.debug(f"Attribute read failed for '{locator}@{name}': {e}")
            return None

    async def query_all(self, locator: str) -> List[ElementAccessor]:
        try:
            return [PlaywrightElement(loc) for loc in await self._page.locator(locator).all()]
        except PlaywrightError as e:
            logger.debug(f"Query for '{locator}' failed: {e}")
            return []

    async def click(self, locator: str, timeout: int = settings.SELECTOR_TIMEOUT) -> bool:
        # Consent dialogs are frequently rendered inside an iframe
        for frame in self._page.frames:
            try:
                loc = frame.locator(locator).first
                if not await loc.is_visible():
                    continue
                await loc.scroll_into_view_if_needed(timeout=timeout)
                await loc.click(timeout=timeout)
                return True
            except PlaywrightError as e:
                logger.debug(f"Click on '{locator}' failed in frame {frame.url}: {e}")
        return False

    async def press(self, key: str) -> None:
        try:
            await self._page.keyboard.press(key)
        except PlaywrightError as e:
            logger.debug(f"Key press '{key}' failed: {e}")

    async def move_pointer(self, x: float, y: float, steps: int = 1) -> None:
        await self._page.mouse.move(x, y, steps=steps)

    async def wheel(self, dx: float, dy: float) -> None:
        await self._page.mouse.wheel(dx, dy)

    async def scroll(self, dy: float, container: Optional[str] = None) -> None:
        try:
            await self._page.evaluate(_SCROLL_JS, [container, dy])
        except PlaywrightError as e:
            logger.debug(f"Scroll failed: {e}")

    async def content_height(self, container: Optional[str] = None) -> int:
        try:
            return int(await self._page.evaluate(_HEIGHT_JS, container))
        except PlaywrightError as e:
            logger.debug(f"Height measurement failed: {e}")
            return 0

    def viewport(self) -> Tuple[int, int]:
        size = self._page.viewport_size or {
            "width": settings.VIEWPORT_WIDTH,
            "height": settings.VIEWPORT_HEIGHT,
        }
        return size["width"], size["height"]

    async def screenshot(self, path: str) -> None:
        await self._page.screenshot(path=path, full_page=True)

    async def content(self) -> str:
        return await self._page.content()

    async def title(self) -> str:
        return await self._page.title()
