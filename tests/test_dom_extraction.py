"""Test DOM extraction with realistic Indeed HTML in a real Chromium page"""

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from jobsweep.adapters import indeed
from jobsweep.browser.page import PlaywrightPageAccessor
from jobsweep.core.canonical import Canonicalizer
from jobsweep.core.dedupe import dedupe
from jobsweep.core.extract import Extractor
from jobsweep.core.gate import GateDetector
from jobsweep.core.models import GateState

SERP_URL = "https://ca.indeed.com/jobs?q=python&l=toronto"

# Sample Indeed HTML with actual structure
SAMPLE_HTML = """
<!DOCTYPE html>
<html>
<body>
<div id="mosaic-provider-jobcards">
  <ul>
    <li>
      <div class="job_seen_beacon">
        <h2 class="jobTitle">
          <a id="job_9b6b90751b656a90" data-jk="9b6b90751b656a90"
             href="/rc/clk?jk=9b6b90751b656a90&amp;bb=iZ5_Jkkl&amp;from=serp&amp;vjs=3">
            <span title="Sales Advisor-Part Time">Sales Advisor-Part Time</span>
          </a>
        </h2>
        <span data-testid="company-name">H&amp;M</span>
        <div data-testid="text-location">Toronto,
            ON</div>
        <div data-testid="attribute_snippet_testId">$17.50 an hour</div>
      </div>
    </li>
    <li>
      <div class="job_seen_beacon">
        <h2 class="jobTitle">
          <a id="job_abc123def456" data-jk="abc123def456" href="/viewjob?jk=abc123def456&amp;from=serp">
            <span title="Software Engineer">Software Engineer</span>
          </a>
        </h2>
        <span data-testid="company-name">Tech Corp</span>
      </div>
    </li>
    <li>
      <div class="job_seen_beacon">
        <h2 class="jobTitle"><a id="job_repeat" href="/rc/clk?jk=9b6b90751b656a90&amp;advn=42">
          <span>Sales Advisor (sponsored)</span></a></h2>
      </div>
    </li>
    <li>
      <div class="job_seen_beacon"><span data-testid="company-name">No title here</span></div>
    </li>
  </ul>
</div>
</body>
</html>
"""


@pytest.fixture
async def page():
    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(headless=True)
        except PlaywrightError as e:
            pytest.skip(f"Chromium is not installed: {e}")

        page = await browser.new_page()

        async def serve(route):
            await route.fulfill(status=200, content_type="text/html", body=SAMPLE_HTML)

        await page.route("https://ca.indeed.com/**", serve)
        await page.goto(SERP_URL)
        try:
            yield PlaywrightPageAccessor(page)
        finally:
            await browser.close()


async def test_dom_extraction(page):
    """The Indeed field map parses job cards from rendered HTML"""
    records = await Extractor().extract(page, indeed.PROFILE.field_map)

    assert len(records) == 3

    job1 = records[0]
    assert job1.title == "Sales Advisor-Part Time"
    assert job1.employer == "H&M"
    assert job1.location == "Toronto, ON"
    assert job1.salary == "$17.50 an hour"
    assert job1.url.startswith("https://ca.indeed.com/rc/clk?jk=9b6b90751b656a90")

    job2 = records[1]
    assert job2.title == "Software Engineer"
    assert job2.employer == "Tech Corp"
    assert job2.location is None

    results = dedupe(records, Canonicalizer(indeed.PROFILE.canonical_rules))
    assert results.keys == [
        "https://ca.indeed.com/viewjob?jk=9b6b90751b656a90",
        "https://ca.indeed.com/viewjob?jk=abc123def456",
    ]


async def test_results_page_is_not_gated(page):
    profile = indeed.PROFILE
    detector = GateDetector(profile.results_landmark, profile.challenge_locators, profile.gate_phrases)
    assert await detector.check(page) is GateState.CLEAR
