"""Sanity checks on the built-in site profiles."""
import pytest

from jobsweep.adapters import google, indeed, jobbank, linkedin
from jobsweep.core.extract import split_locator
from jobsweep.core.materialize import Strategy

PROFILES = [indeed.PROFILE, google.PROFILE, linkedin.PROFILE, jobbank.PROFILE]


@pytest.mark.parametrize("profile", PROFILES, ids=lambda p: p.name)
def test_profile_is_complete(profile):
    assert profile.field_map.cards
    assert profile.field_map.fields["title"]
    assert profile.field_map.url
    assert profile.results_landmark
    assert profile.result_marker
    if profile.strategy is Strategy.PAGINATED:
        assert profile.next_locator
    if profile.strategy is Strategy.LOAD_MORE:
        assert profile.load_more_locator


@pytest.mark.parametrize("profile", PROFILES, ids=lambda p: p.name)
def test_url_locators_read_an_attribute(profile):
    for locator in profile.field_map.url:
        _, attr = split_locator(locator, default_attr="href")
        assert attr == "href"


def test_search_urls_are_encoded():
    assert (
        linkedin.PROFILE.build_start_url("python developer", "Toronto, ON")
        == "https://www.linkedin.com/jobs/search?keywords=python+developer&location=Toronto%2C+ON"
    )
    assert indeed.PROFILE.build_start_url("ece", "toronto, on") == (
        "https://ca.indeed.com/jobs?q=ece&l=toronto%2C+on&radius=25"
    )
    assert google.PROFILE.build_start_url("c++ jobs", "").startswith(
        "https://www.google.com/search?q=c%2B%2B+jobs+&"
    )


def test_indeed_warms_up_on_home_page():
    assert indeed.PROFILE.home_url == "https://ca.indeed.com/"
    assert indeed.PROFILE.gate_rounds == 6


def test_jobbank_pins_canadian_exits():
    assert jobbank.PROFILE.proxy_country == "ca"
