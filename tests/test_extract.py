"""Tests for field-map driven card extraction."""
import pytest

from fakes import START_URL, FakePage, make_profile
from jobsweep.core.extract import Extractor, normalize_text, page_origin, resolve_url, split_locator


@pytest.fixture
def field_map():
    return make_profile().field_map


async def test_extract_normalizes_and_resolves(field_map):
    page = FakePage(
        pages=[
            [
                {"title": "  Senior\n   Python  Dev ", "employer": " Acme   Corp", "href": "/jobs/1", "salary": "$90k\t- $110k"},
                {"title": "Remote Engineer", "href": "https://other.example.org/x?id=2"},
            ]
        ]
    )
    await page.navigate(START_URL)

    records = await Extractor().extract(page, field_map)

    assert len(records) == 2
    first, second = records
    assert first.title == "Senior Python Dev"
    assert first.employer == "Acme Corp"
    assert first.salary == "$90k - $110k"
    assert first.url == "https://jobs.example.com/jobs/1"
    assert first.location is None
    assert second.employer == ""
    assert second.url == "https://other.example.org/x?id=2"


async def test_incomplete_cards_are_dropped(field_map):
    page = FakePage(
        pages=[
            [
                {"title": "", "href": "/jobs/1"},
                {"title": "   ", "href": "/jobs/2"},
                {"title": "No link"},
                {"title": "Script link", "href": "javascript:void(0)"},
                {"title": "Mail link", "href": "mailto:jobs@example.com"},
                {"title": "Kept", "href": "/jobs/6"},
            ]
        ]
    )
    await page.navigate(START_URL)

    records = await Extractor().extract(page, field_map)

    assert [r.title for r in records] == ["Kept"]


async def test_no_cards_found(field_map):
    page = FakePage(pages=[[]])
    await page.navigate(START_URL)
    assert await Extractor().extract(page, field_map) == []


def test_split_locator():
    assert split_locator("time@datetime") == ("time", "datetime")
    assert split_locator("a.base-card__full-link@href") == ("a.base-card__full-link", "href")
    assert split_locator(":scope@href") == (":scope", "href")
    assert split_locator("@href") == (":scope", "href")
    assert split_locator("h3") == ("h3", None)
    assert split_locator("h3", default_attr="href") == ("h3", "href")
    assert split_locator('a[href*="x@y"]') == ('a[href*="x@y"]', None)


def test_normalize_text():
    assert normalize_text("  a \n\t b  ") == "a b"
    assert normalize_text(" \n ") is None
    assert normalize_text(None) is None


def test_resolve_url():
    assert resolve_url("/a?b=1", "https://x.com/search") == "https://x.com/a?b=1"
    assert resolve_url("//cdn.x.com/a", "https://x.com/") == "https://cdn.x.com/a"
    assert resolve_url("javascript:void(0)", "https://x.com/") is None
    assert resolve_url("/a", "") is None
    assert resolve_url("", "https://x.com/") is None


def test_page_origin():
    assert page_origin("https://x.com/a/b?c=1#d") == "https://x.com/"
    assert page_origin("http://x.com:8080/a") == "http://x.com:8080/"
    assert page_origin("about:blank") == ""
    assert page_origin("") == ""


async def test_path_relative_href_resolves_against_origin(field_map):
    page = FakePage(pages=[[{"title": "Nested", "href": "jobs/7"}]])
    await page.navigate("https://jobs.example.com/search/results?q=python")

    records = await Extractor().extract(page, field_map)

    assert [r.url for r in records] == ["https://jobs.example.com/jobs/7"]
