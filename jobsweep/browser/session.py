import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from jobsweep.browser.context import create_context
from jobsweep.browser.launch import create_browser
from jobsweep.browser.page import PageAccessor, PlaywrightPageAccessor
from jobsweep.browser.user_agent import UserAgentProvider
from jobsweep.core.errors import SessionError
from jobsweep.core.models import ProxyCredential

logger = logging.getLogger(__name__)


@dataclass
class ScopedSession:
    """
    One isolated browsing context for one attempt.
    `resources` holds whatever the provider must tear down, innermost first.
    """

    page: PageAccessor
    proxy: Optional[ProxyCredential] = None
    user_agent: Optional[str] = None
    resources: List[Any] = field(default_factory=list)


class SessionProvider(ABC):
    """
    Supplies isolated browsing sessions under scoped acquisition.
    """

    @abstractmethod
    async def open(self, proxy: Optional[ProxyCredential] = None) -> ScopedSession:
        """Provision a fresh session. Raises SessionError."""

    @abstractmethod
    async def close(self, session: ScopedSession) -> None:
        """Release everything open() provisioned. Must not raise."""

    @asynccontextmanager
    async def acquire(
        self, proxy: Optional[ProxyCredential] = None
    ) -> AsyncIterator[ScopedSession]:
        """
        Yield a session that is released on every exit path.
        """
        session = await self.open(proxy)
        try:
            yield session
        finally:
            await self.close(session)


class PlaywrightSessionProvider(SessionProvider):
    """
    Starts a dedicated Playwright driver, browser and context per session, so
    no process, cookie or cache state is shared between attempts.
    """

    async def open(self, proxy: Optional[ProxyCredential] = None) -> ScopedSession:
        user_agent = UserAgentProvider.get_random()
        logger.info(f"Using User Agent: {user_agent}")

        session = ScopedSession(page=None, proxy=proxy, user_agent=user_agent)  # type: ignore[arg-type]
        try:
            playwright = await async_playwright().start()
            session.resources.insert(0, playwright)

            browser = await create_browser(playwright, proxy)
            session.resources.insert(0, browser)

            context = await create_context(browser, user_agent)
            session.resources.insert(0, context)

            page = await context.new_page()
            session.page = PlaywrightPageAccessor(page)
        except PlaywrightError as e:
            await self.close(session)
            raise SessionError(f"Failed to provision browser session: {e}") from e
        except BaseException:
            await self.close(session)
            raise

        return session

    async def close(self, session: ScopedSession) -> None:
        # context, then browser, then the driver
        for resource in session.resources:
            try:
                if hasattr(resource, "stop"):
                    await resource.stop()
                else:
                    await resource.close()
            except Exception as e:
                logger.debug(f"Error releasing {type(resource).__name__}: {e}")
        session.resources.clear()
        logger.info("Browser session released.")
