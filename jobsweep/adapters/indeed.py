"""
Indeed (ca.indeed.com) search results.

Indeed fronts its SERP with Cloudflare, so the session first lands on the home
page and interacts a little before opening the search url. Results are
paginated with a "Next" control.
"""

from jobsweep.adapters.base import SiteProfile
from jobsweep.core.canonical import CanonicalRules
from jobsweep.core.extract import FieldMap
from jobsweep.core.materialize import Strategy

BASE_URL = "https://ca.indeed.com/"
SEARCH_URL = "https://ca.indeed.com/jobs?q={query}&l={location}&radius=25"

# Job cards - tried in order during extraction
SERP_CARD_SELECTORS = (
    "div.job_seen_beacon",
    "li.job_seen_beacon",
    "div.cardOutline",
    "a.tapItem",
)

TITLE_SELECTORS = ('[data-testid="jobTitle"]', "h2.jobTitle", "h2 a")
COMPANY_SELECTORS = ('[data-testid="company-name"]', "span.companyName")
LOCATION_SELECTORS = ('[data-testid="text-location"]', "div.companyLocation")
DATE_SELECTORS = ('[data-testid="myJobsStateDate"]', "span.date")
SALARY_SELECTORS = ('[data-testid="attribute_snippet_testId"]', ".salary-snippet")
JOB_LINK_SELECTORS = ("a.tapItem@href", 'a[id^="job_"]@href', "a[data-jk]@href", ":scope@href")

# Present once the SERP has rendered
JOB_CARDS_CONTAINER_SELECTOR = "#mosaic-provider-jobcards, a.tapItem"
RESULT_MARKER = "a.tapItem, a[data-jk], .jobsearch-ResultsList"

CAPTCHA_SELECTORS = (
    'iframe[title*="cf"]',
    'iframe[title*="Cloudflare"]',
    'iframe[src*="challenge"]',
    'iframe[title*="Turnstile"]',
    "#px-captcha",
)

BLOCKING_PHRASES = (
    r"verify you are human",
    r"checking your browser",
    r"just a moment",
    r"additional verification required",
    r"robot check",
)

CONSENT_SELECTORS = (
    'button[aria-label="Close"]',
    'button[title="Close"]',
    'button:has-text("No thanks")',
    "#onetrust-accept-btn-handler",
    'button:has-text("Accept All Cookies")',
)

NEXT_PAGE_SELECTOR = 'a[aria-label="Next"], button[aria-label="Next"], a[data-testid="pagination-page-next"]'

PROFILE = SiteProfile(
    name="indeed",
    search_url=SEARCH_URL,
    home_url=BASE_URL,
    field_map=FieldMap(
        cards=SERP_CARD_SELECTORS,
        fields={
            "title": TITLE_SELECTORS,
            "employer": COMPANY_SELECTORS,
            "location": LOCATION_SELECTORS,
            "date": DATE_SELECTORS,
            "salary": SALARY_SELECTORS,
        },
        url=JOB_LINK_SELECTORS,
    ),
    results_landmark=JOB_CARDS_CONTAINER_SELECTOR,
    result_marker=RESULT_MARKER,
    strategy=Strategy.PAGINATED,
    canonical_rules=CanonicalRules(
        tracking_params=frozenset({"from", "vjk", "advn", "adid", "tk", "xkcb"}),
        id_query_param="jk",
        id_template="https://ca.indeed.com/viewjob?jk={id}",
    ),
    consent_locators=CONSENT_SELECTORS,
    challenge_locators=CAPTCHA_SELECTORS,
    gate_phrases=BLOCKING_PHRASES,
    next_locator=NEXT_PAGE_SELECTOR,
    scroll_each_page=True,
    scroll_rounds=8,
    gate_rounds=6,
)
