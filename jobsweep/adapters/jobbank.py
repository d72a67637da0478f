"""
Job Bank Canada (jobbank.gc.ca).

Job Bank rate-limits aggressively by exit IP, so it is normally run through a
residential proxy pool pinned to Canadian exits. The search url takes a
free-text query; results load progressively on scroll.
"""

from jobsweep.adapters.base import SiteProfile
from jobsweep.core.canonical import CanonicalRules
from jobsweep.core.extract import FieldMap
from jobsweep.core.materialize import Strategy

SEARCH_URL = "https://www.jobbank.gc.ca/jobsearch/jobsearch?searchstring={query}&locationstring={location}&sort=M"

JOB_LINK_SELECTOR = 'a[href*="/jobsearch/jobposting/"]'

CONSENT_SELECTORS = (
    "#onetrust-accept-btn-handler",
    'button:has-text("Accept all")',
    'button:has-text("I agree")',
    'button:has-text("Got it")',
)

CHALLENGE_SELECTORS = (
    'iframe[title*="challenge"]',
    'iframe[title*="captcha"]',
    'iframe[src*="recaptcha"]',
)

BLOCKING_PHRASES = (
    r"captcha",
    r"verify you",
    r"are you a robot",
    r"unusual traffic",
    r"access denied",
    r"additional verification required",
)

PROFILE = SiteProfile(
    name="jobbank",
    search_url=SEARCH_URL,
    field_map=FieldMap(
        cards=("article.action-buttons", "article", JOB_LINK_SELECTOR),
        fields={
            "title": (".noctitle", "span.job-title", ":scope"),
            "employer": ("li.business", ".business"),
            "location": ("li.location", ".location"),
            "date": ("li.date", ".date"),
            "salary": ("li.salary", ".salary"),
        },
        url=(JOB_LINK_SELECTOR + "@href", ":scope@href"),
    ),
    results_landmark=JOB_LINK_SELECTOR,
    result_marker=JOB_LINK_SELECTOR,
    strategy=Strategy.LOAD_MORE,
    canonical_rules=CanonicalRules(
        tracking_params=frozenset({"source", "searchstring", "page", "sort", "fprov"}),
        id_path_pattern=r"/jobsearch/jobposting/(\d+)",
        id_template="https://www.jobbank.gc.ca/jobsearch/jobposting/{id}",
    ),
    consent_locators=CONSENT_SELECTORS,
    challenge_locators=CHALLENGE_SELECTORS,
    gate_phrases=BLOCKING_PHRASES,
    load_more_locator="#moreresultbutton",
    scroll_each_page=True,
    scroll_rounds=12,
    proxy_country="ca",
)
