"""
LinkedIn public job search (no login).

The results list lives in its own scrollable pane; scrolling that pane loads
more cards. Listing urls carry a numeric id and are collapsed to
/jobs/view/<id>.
"""

from jobsweep.adapters.base import SiteProfile
from jobsweep.core.canonical import CanonicalRules
from jobsweep.core.extract import FieldMap
from jobsweep.core.materialize import Strategy

SEARCH_URL = "https://www.linkedin.com/jobs/search?keywords={query}&location={location}"

RESULTS_LIST_SELECTOR = "ul.jobs-search__results-list, ul.scaffold-layout__list-container"
JOB_LINK_SELECTOR = (
    'a.base-card__full-link[href*="/jobs/view/"], '
    'a[data-tracking-control-name*="jserp-result_search-card"]'
)

CARD_SELECTORS = (
    "ul.jobs-search__results-list > li",
    "ul.scaffold-layout__list-container > li",
    "div.base-card",
)

DISMISS_SELECTORS = (
    'button:has-text("Accept cookies")',
    'button:has-text("Accept")',
    'button[aria-label="Close"]',
    'button[aria-label="Dismiss"]',
)

NEXT_PAGE_SELECTOR = 'button.jobs-search-pagination__indicator[aria-label*="next" i]'

PROFILE = SiteProfile(
    name="linkedin",
    search_url=SEARCH_URL,
    field_map=FieldMap(
        cards=CARD_SELECTORS,
        fields={
            "title": (".job-title", "h3.base-search-card__title", "h3"),
            "employer": (".company-name", "h4.base-search-card__subtitle", "h4"),
            "location": (".job-search-card__location",),
            "date": ("time@datetime", "time"),
            "summary": (".job-description", ".job-search-card__snippet"),
        },
        url=(
            'a.base-card__full-link@href',
            'a[href*="/jobs/view/"]@href',
            'a[data-tracking-control-name*="jserp-result_search-card"]@href',
        ),
    ),
    results_landmark=RESULTS_LIST_SELECTOR,
    result_marker=JOB_LINK_SELECTOR,
    strategy=Strategy.PAGINATED,
    canonical_rules=CanonicalRules(
        tracking_params=frozenset({"refid", "trackingid", "position", "pagenum", "trk"}),
        id_path_pattern=r"/jobs/view/(?:[^/]*-)?(\d+)",
        id_template="https://www.linkedin.com/jobs/view/{id}",
    ),
    consent_locators=DISMISS_SELECTORS,
    results_container=RESULTS_LIST_SELECTOR,
    next_locator=NEXT_PAGE_SELECTOR,
    scroll_each_page=True,
    scroll_rounds=24,
)
