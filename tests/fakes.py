"""
In-memory stand-ins for the browser layer.

FakePage understands a fixed set of locators (see the constants below) and
models just enough of a results site: a consent banner, a challenge that
clears after a number of reloads, result pages behind a "next" control and
lazily revealed cards behind scrolling or a "load more" button.
"""

from typing import Callable, Dict, List, Optional, Tuple

from jobsweep.adapters.base import SiteProfile
from jobsweep.browser.page import SELF_LOCATOR, ElementAccessor, PageAccessor
from jobsweep.browser.session import ScopedSession, SessionProvider
from jobsweep.core.canonical import CanonicalRules
from jobsweep.core.errors import NavigationError, SessionError
from jobsweep.core.extract import FieldMap
from jobsweep.core.materialize import Strategy
from jobsweep.core.models import ProxyCredential

LANDMARK = "#results"
MARKER = "a.job"
CARD = "div.card"
CHALLENGE = "iframe.challenge"
CONSENT = "#accept"
NEXT = "a.next"
LOAD_MORE = "button.more"

START_URL = "https://jobs.example.com/search?q=python"

# card field -> locator inside a card
CARD_FIELDS = {
    ".title": "title",
    ".company": "employer",
    ".location": "location",
    ".date": "date",
    ".salary": "salary",
}


def make_cards(prefix: str, count: int, start: int = 0) -> List[Dict[str, str]]:
    return [
        {
            "title": f"{prefix} job {i}",
            "employer": f"Employer {i}",
            "location": "Toronto, ON",
            "href": f"/jobs/view/{prefix}-{i}?trk=serp#top",
        }
        for i in range(start, start + count)
    ]


def make_profile(strategy: Strategy = Strategy.PAGINATED, **overrides) -> SiteProfile:
    fields = dict(
        name="example",
        search_url="https://jobs.example.com/search?q={query}&l={location}",
        field_map=FieldMap(
            cards=("li.missing", CARD),
            fields={
                "title": (".title",),
                "employer": (".company",),
                "location": (".location",),
                "date": (".date",),
                "salary": (".salary",),
            },
            url=("a.link@href",),
        ),
        results_landmark=LANDMARK,
        result_marker=MARKER,
        strategy=strategy,
        canonical_rules=CanonicalRules(tracking_params=frozenset({"trk"})),
        consent_locators=(CONSENT,),
        challenge_locators=(CHALLENGE,),
        gate_phrases=(r"verify you are human",),
        load_more_locator=LOAD_MORE,
        next_locator=NEXT,
        scroll_rounds=6,
        gate_rounds=3,
    )
    fields.update(overrides)
    return SiteProfile(**fields)


class FakeElement(ElementAccessor):
    def __init__(self, card: Dict[str, str]):
        self.card = card

    async def read_text(self, locator: Optional[str] = None) -> Optional[str]:
        if not locator or locator == SELF_LOCATOR:
            return self.card.get("title")
        key = CARD_FIELDS.get(locator)
        return self.card.get(key) if key else None

    async def read_attribute(self, name: str, locator: Optional[str] = None) -> Optional[str]:
        if name == "href" and locator == "a.link":
            return self.card.get("href")
        return None


class FakePage(PageAccessor):
    def __init__(
        self,
        pages: Optional[List[List[Dict[str, str]]]] = None,
        gated_reloads: Optional[int] = None,
        consent: bool = False,
        batch_size: Optional[int] = None,
        failing_navigations: int = 0,
        phrase_gate: bool = False,
        decorative_challenge: bool = False,
    ):
        self.pages = pages if pages is not None else [make_cards("a", 10)]
        # None: never gated; n: gated until the nth reload
        self.gated_reloads = gated_reloads
        self.consent = consent
        self.batch_size = batch_size
        self.failing_navigations = failing_navigations
        self.phrase_gate = phrase_gate
        self.decorative_challenge = decorative_challenge

        self.page_index = 0
        self.visible = self._initial_visible()
        self._url = "about:blank"
        self.navigations: List[str] = []
        self.reloads = 0
        self.clicks: List[str] = []
        self.keys: List[str] = []
        self.pointer: List[Tuple[float, float]] = []
        self.wheels: List[float] = []
        self.scrolls = 0
        self.screenshots: List[str] = []

    # --- state helpers ---

    @property
    def gated(self) -> bool:
        return self.gated_reloads is not None and self.reloads < self.gated_reloads

    @property
    def cards(self) -> List[Dict[str, str]]:
        if self.gated or not self.pages:
            return []
        return self.pages[self.page_index][: self.visible]

    def _initial_visible(self) -> int:
        total = len(self.pages[self.page_index]) if self.pages else 0
        return min(self.batch_size, total) if self.batch_size else total

    def _reveal(self) -> None:
        if self.batch_size and self.pages:
            self.visible = min(self.visible + self.batch_size, len(self.pages[self.page_index]))

    # --- PageAccessor ---

    @property
    def url(self) -> str:
        return self._url

    async def navigate(self, url: str, timeout: int = 0) -> None:
        self.navigations.append(url)
        if self.failing_navigations > 0:
            self.failing_navigations -= 1
            raise NavigationError(f"net::ERR_CONNECTION_RESET at {url}")
        self._url = url

    async def reload(self, timeout: int = 0) -> None:
        self.reloads += 1

    async def wait_for(self, locator: str, timeout: int = 0) -> bool:
        return await self.count(locator) > 0

    async def count(self, locator: str) -> int:
        if locator == CHALLENGE:
            return 1 if self.gated or self.decorative_challenge else 0
        if locator == LANDMARK:
            return 1 if self.cards else 0
        if locator in (MARKER, CARD):
            return len(self.cards)
        if locator == CONSENT:
            return 1 if self.consent else 0
        if locator == NEXT:
            return 1 if self.page_index + 1 < len(self.pages) else 0
        if locator == LOAD_MORE:
            return 1 if self.pages and self.visible < len(self.pages[self.page_index]) else 0
        return 0

    async def is_visible(self, locator: str) -> bool:
        return await self.count(locator) > 0

    async def read_text(self, locator: str) -> Optional[str]:
        if locator == "body":
            if self.gated and self.phrase_gate:
                return "Additional check.\n Please verify you are HUMAN to continue."
            return "Job search results"
        if locator == MARKER and self.cards:
            return self.cards[0]["title"]
        return None

    async def read_attribute(self, locator: str, name: str) -> Optional[str]:
        return None

    async def query_all(self, locator: str) -> List[ElementAccessor]:
        if locator == CARD:
            return [FakeElement(card) for card in self.cards]
        return []

    async def click(self, locator: str, timeout: int = 0) -> bool:
        if not await self.count(locator):
            return False
        self.clicks.append(locator)
        if locator == CONSENT:
            self.consent = False
        elif locator == NEXT:
            self.page_index += 1
            self.visible = self._initial_visible()
            self._url = f"{START_URL}&start={self.page_index * 10}"
        elif locator == LOAD_MORE:
            self._reveal()
        return True

    async def press(self, key: str) -> None:
        self.keys.append(key)

    async def move_pointer(self, x: float, y: float, steps: int = 1) -> None:
        self.pointer.append((x, y))

    async def wheel(self, dx: float, dy: float) -> None:
        self.wheels.append(dy)

    async def scroll(self, dy: float, container: Optional[str] = None) -> None:
        self.scrolls += 1
        self._reveal()

    async def content_height(self, container: Optional[str] = None) -> int:
        return 600 + 120 * len(self.cards)

    def viewport(self) -> Tuple[int, int]:
        return (1290, 900)

    async def screenshot(self, path: str) -> None:
        with open(path, "wb") as f:
            f.write(b"\x89PNG fake")
        self.screenshots.append(path)

    async def content(self) -> str:
        return "<html><body>" + "".join(f"<div>{c['title']}</div>" for c in self.cards) + "</body></html>"

    async def title(self) -> str:
        return "Jobs"


class FakeSessionProvider(SessionProvider):
    """
    Hands out a fresh page per session from page_factory(session_number).
    """

    def __init__(
        self,
        page_factory: Callable[[int], FakePage],
        failing_opens: int = 0,
    ):
        self.page_factory = page_factory
        self.failing_opens = failing_opens
        self.opened = 0
        self.closed = 0
        self.proxies: List[Optional[ProxyCredential]] = []
        self.pages: List[FakePage] = []

    async def open(self, proxy: Optional[ProxyCredential] = None) -> ScopedSession:
        self.proxies.append(proxy)
        if self.failing_opens > 0:
            self.failing_opens -= 1
            raise SessionError("browser failed to launch")
        page = self.page_factory(self.opened)
        self.opened += 1
        self.pages.append(page)
        return ScopedSession(page=page, proxy=proxy, user_agent="test-agent")

    async def close(self, session: ScopedSession) -> None:
        self.closed += 1
