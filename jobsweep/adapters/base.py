from dataclasses import dataclass, field
from typing import Optional, Tuple
from urllib.parse import quote_plus

from jobsweep.core.canonical import CanonicalRules
from jobsweep.core.extract import FieldMap
from jobsweep.core.materialize import Strategy


@dataclass(frozen=True)
class SiteProfile:
    """
    Everything site-specific the scrape pipeline needs: where to start, which
    overlays to dismiss, how to recognise a gate and a results view, how to
    reveal more results and how to read and canonicalize a listing.
    """

    name: str
    search_url: str
    field_map: FieldMap
    # Present only when a results view has rendered
    results_landmark: str
    # One element per listing, used to watch load-more and next-page progress
    result_marker: str
    strategy: Strategy = Strategy.SCROLL
    canonical_rules: CanonicalRules = field(default_factory=CanonicalRules)

    # Visited before the start url so the session looks organic
    home_url: Optional[str] = None
    consent_locators: Tuple[str, ...] = ()
    press_escape: bool = True
    # None means the detector's generic defaults
    challenge_locators: Optional[Tuple[str, ...]] = None
    gate_phrases: Optional[Tuple[str, ...]] = None

    results_container: Optional[str] = None
    load_more_locator: Optional[str] = None
    next_locator: Optional[str] = None
    # Scroll each results page before extraction even when paginating
    scroll_each_page: bool = False
    scroll_rounds: Optional[int] = None
    gate_rounds: Optional[int] = None
    proxy_country: Optional[str] = None

    def build_start_url(self, query: str, location: str = "") -> str:
        return self.search_url.format(
            query=quote_plus(query.strip()), location=quote_plus(location.strip())
        )
