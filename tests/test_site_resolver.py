"""Tests for outlet website resolution."""

import pytest

from byline_scout.discovery.search.base import SearchResult
from byline_scout.discovery.search_engine import SearchEngine
from byline_scout.discovery.site_resolver import (
    SiteResolver,
    normalize_outlet_name,
    priority_score,
)
from byline_scout.exceptions import ResolutionFailure
from byline_scout.models.site import DetectionMethod
from tests.fakes import FakeCrawler, FakeProvider, HOME, homepage

LOCAL_HOME = "https://www.exampletimes.in"


class TestHelpers:
    """Tests for name normalization and result scoring."""

    @pytest.mark.parametrize("outlet, label", [
        ("The Hindu", "hindu"),
        ("Times of India", "timesofindia"),
        ("Example Times!", "exampletimes"),
    ])
    def test_normalize_outlet_name(self, outlet, label):
        assert normalize_outlet_name(outlet) == label

    def test_local_tld_beats_com_beats_foreign(self):
        local = priority_score(f"{LOCAL_HOME}/", "Example Times")
        generic = priority_score(f"{HOME}/", "Example Times")
        foreign = priority_score("https://www.exampletimes.co.uk/", "Example Times")

        assert local > generic > foreign

    def test_locale_keyword_lifts_com(self):
        assert priority_score(f"{HOME}/", "Example Times - India news") > priority_score(f"{HOME}/", "Example Times")


class TestResolveViaSearch:
    """Tests for search-based resolution."""

    def test_best_ranked_result_wins(self):
        provider = FakeProvider(results=[
            SearchResult(url="https://en.wikipedia.org/wiki/Example_Times", title="Example Times - Wikipedia"),
            SearchResult(url="https://www.exampletimes.co.uk/news", title="Example Times"),
            SearchResult(url=f"{HOME}/news", title="Example Times"),
            SearchResult(url=f"{LOCAL_HOME}/latest", title="Example Times"),
            SearchResult(url="https://www.unrelated.in/", title="Something else"),
        ])
        crawler = FakeCrawler({
            HOME: homepage([]),
            LOCAL_HOME: homepage([]),
            "https://www.exampletimes.co.uk": homepage([]),
            "https://www.unrelated.in": homepage([]),
        })

        site = SiteResolver(crawler, SearchEngine(providers=[provider])).resolve("Example Times")

        assert site.base_url == LOCAL_HOME
        assert site.method == DetectionMethod.SEARCH_ENGINE
        assert site.provider == "fake"
        assert provider.queries == ["Example Times newspaper india"]

    def test_unresponsive_result_is_skipped(self):
        provider = FakeProvider(results=[
            SearchResult(url=f"{LOCAL_HOME}/", title="Example Times"),
            SearchResult(url=f"{HOME}/", title="Example Times"),
        ])
        crawler = FakeCrawler({HOME: homepage([])})

        site = SiteResolver(crawler, SearchEngine(providers=[provider])).resolve("Example Times")

        assert site.base_url == HOME

    def test_search_calls_are_capped(self):
        provider = FakeProvider()
        crawler = FakeCrawler({HOME: homepage([])})

        SiteResolver(crawler, SearchEngine(providers=[provider]), max_search_calls=2).resolve("Example Times")

        assert len(provider.queries) == 2


class TestResolveViaPatterns:
    """Tests for constructed-domain resolution."""

    def test_constructed_urls_prefer_local_tlds(self):
        urls = SiteResolver(FakeCrawler(), SearchEngine(providers=[])).constructed_urls("The Example Times")

        assert urls[:4] == [
            "https://www.exampletimes.in",
            "https://exampletimes.in",
            "https://www.exampletimes.co.in",
            "https://www.exampletimesonline.in",
        ]
        assert "https://www.exampletimes.com" in urls
        assert "https://www.exampletimesonline.com" in urls

    def test_falls_back_when_search_fails(self):
        crawler = FakeCrawler({
            LOCAL_HOME: "<html><body><p>This domain is for sale</p></body></html>",
            HOME: homepage([]),
        })
        engine = SearchEngine(providers=[FakeProvider(error=True)])

        site = SiteResolver(crawler, engine).resolve("Example Times")

        assert site.base_url == HOME
        assert site.method == DetectionMethod.CONSTRUCTED_PATTERN

    def test_failure(self):
        engine = SearchEngine(providers=[FakeProvider(error=True)])

        with pytest.raises(ResolutionFailure, match="Website detection failed for 'Example Times'"):
            SiteResolver(FakeCrawler(), engine).resolve("Example Times")

    def test_empty_outlet(self):
        with pytest.raises(ResolutionFailure):
            SiteResolver(FakeCrawler(), SearchEngine(providers=[])).resolve("   ")
