"""
Google Jobs (udm=8 search vertical).

Listing links go through google.com/url redirects, which are unwrapped to the
employer's own posting before deduplication. More results load on scroll and
through the "More results" control.
"""

from jobsweep.adapters.base import SiteProfile
from jobsweep.core.canonical import CanonicalRules, RedirectWrapper
from jobsweep.core.extract import FieldMap
from jobsweep.core.materialize import Strategy

SEARCH_URL = "https://www.google.com/search?q={query}+{location}&jbr=sep:0&udm=8"

CARD_SELECTORS = ('div[jscontroller="Q7Rsec"]', "div.BjJfJf")
RESULTS_SELECTOR = 'div[jscontroller="Q7Rsec"], div.BjJfJf'

CONSENT_SELECTORS = (
    "button#L2AGLb",
    "#W0wltc",
    'button:has-text("I agree")',
    'button:has-text("Accept all")',
)

CHALLENGE_SELECTORS = (
    'iframe[title*="challenge"]',
    'iframe[src*="recaptcha"]',
    "#captcha-form",
)

BLOCKING_PHRASES = (r"unusual traffic", r"are you a robot", r"detected unusual")

LOAD_MORE_SELECTOR = '#pnnext, text="More results"'

PROFILE = SiteProfile(
    name="google",
    search_url=SEARCH_URL,
    field_map=FieldMap(
        cards=CARD_SELECTORS,
        fields={
            "title": ('[role="heading"]', ".pMhGee", ".FSrVnb"),
            "employer": (".vNEEBe", ".Qk80Jf"),
            "location": (".Q8LRLc", ".r0Qyq"),
            "date": (".wwUB2c", "time"),
            "salary": (".LL4CDc", ".P2Tf5c", ".gv4No", ".jlKIjf"),
        },
        url=(
            'a[href^="https://www.google.com/url"]@href',
            'a[href^="https://www.google.com/aclk"]@href',
            "a[href]@href",
        ),
    ),
    results_landmark=RESULTS_SELECTOR,
    result_marker=RESULTS_SELECTOR,
    strategy=Strategy.LOAD_MORE,
    canonical_rules=CanonicalRules(
        tracking_params=frozenset({"sa", "ved", "usg", "opi", "source"}),
        redirect_wrappers=(
            RedirectWrapper(host_suffix="google.com", params=("url", "q", "adurl")),
        ),
    ),
    consent_locators=CONSENT_SELECTORS,
    press_escape=False,
    challenge_locators=CHALLENGE_SELECTORS,
    gate_phrases=BLOCKING_PHRASES,
    load_more_locator=LOAD_MORE_SELECTOR,
    scroll_each_page=True,
    scroll_rounds=20,
    gate_rounds=5,
)
