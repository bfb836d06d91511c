"""Tests for search providers and the search engine wrapper."""

from unittest.mock import patch, Mock

import pytest
import requests

from byline_scout.discovery.search.base import SearchResult, SearchProviderError
from byline_scout.discovery.search.bing_search import BingSearchClient
from byline_scout.discovery.search.duckduckgo_search import DuckDuckGoSearchClient
from byline_scout.discovery.search.google_search import GoogleSearchClient
from byline_scout.discovery.search_engine import SearchEngine, SearchBudget
from byline_scout.discovery.site_resolver import SiteResolver
from byline_scout.models.site import DetectionMethod
from tests.fakes import FakeCrawler, FakeProvider, HOME, homepage

DDG_HTML = """
<div class="result">
  <a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fwww.exampletimes.com%2F&amp;rut=abc">Example Times</a>
  <a class="result__snippet">Latest news from the state</a>
</div>
<div class="result">
  <a class="result__a" href="https://www.exampletimes.com/politics">Politics</a>
</div>
<div class="result"><a class="result__a" href="/y.js?ad=1">Ad</a></div>
"""

BING_HTML = """
<ol>
  <li class="b_algo"><h2><a href="https://www.exampletimes.com/">Example Times</a></h2>
    <div class="b_caption"><p>Latest news</p></div></li>
  <li class="b_algo"><h2><a href="/relative">Skipped</a></h2></li>
</ol>
"""

GOOGLE_HTML = """
<a href="/url?q=https://www.exampletimes.com/&amp;sa=U"><h3>Example Times</h3></a>
<a href="/url?q=https://maps.google.com/place&amp;sa=U"><h3>Map</h3></a>
<a href="/url?q=https://www.exampletimes.com/&amp;sa=U"><h3>Duplicate</h3></a>
"""


def _html_response(body, status=200):
    response = requests.Response()
    response.status_code = status
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


class TestParsers:
    """Tests for the HTML result parsers."""

    def test_duckduckgo_unwraps_redirects(self):
        results = DuckDuckGoSearchClient().parse_results(DDG_HTML)

        assert [r.url for r in results] == ["https://www.exampletimes.com/", "https://www.exampletimes.com/politics"]
        assert results[0].title == "Example Times"
        assert results[0].snippet == "Latest news from the state"
        assert results[0].provider == "duckduckgo"

    def test_bing(self):
        results = BingSearchClient().parse_results(BING_HTML)

        assert len(results) == 1
        assert results[0].url == "https://www.exampletimes.com/"
        assert results[0].snippet == "Latest news"

    def test_google_html(self):
        results = GoogleSearchClient(api_key=None, cse_id=None).parse_results(GOOGLE_HTML)

        assert [r.url for r in results] == ["https://www.exampletimes.com/"]
        assert results[0].title == "Example Times"


class TestProviderErrors:
    """Tests for provider failure reporting."""

    @patch("byline_scout.discovery.search.duckduckgo_search.requests.get")
    def test_http_error_raises(self, mock_get):
        mock_get.return_value = Mock(status_code=503, text="")

        with pytest.raises(SearchProviderError):
            DuckDuckGoSearchClient().search("example times")

    @patch("byline_scout.discovery.search.bing_search.requests.get")
    def test_network_error_raises(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(SearchProviderError):
            BingSearchClient().search("example times")

    @patch("byline_scout.discovery.search.google_search.requests.get")
    def test_google_api_mode(self, mock_get):
        mock_get.return_value = Mock(status_code=200)
        mock_get.return_value.json.return_value = {
            "items": [{"link": "https://www.exampletimes.com/", "title": "Example Times", "snippet": "News"}],
        }

        client = GoogleSearchClient(api_key="key", cse_id="cse")
        results = client.search("example times")

        assert client.uses_api is True
        assert results == [SearchResult(url="https://www.exampletimes.com/", title="Example Times",
                                        snippet="News", provider="google")]

    @patch("byline_scout.discovery.search.google_search.requests.get")
    def test_google_api_non_json_body_raises(self, mock_get):
        mock_get.return_value = _html_response("<html>quota page</html>")

        with pytest.raises(SearchProviderError):
            GoogleSearchClient(api_key="key", cse_id="cse").search("example times")

    @patch("byline_scout.discovery.search.google_search.requests.get")
    def test_resolution_continues_after_non_json_body(self, mock_get):
        mock_get.return_value = _html_response("<html>quota page</html>")
        engine = SearchEngine(providers=[GoogleSearchClient(api_key="key", cse_id="cse")])

        site = SiteResolver(FakeCrawler({HOME: homepage([])}), engine).resolve("Example Times")

        assert site.base_url == HOME
        assert site.method == DetectionMethod.CONSTRUCTED_PATTERN


class TestSearchEngine:
    """Tests for SearchEngine."""

    def test_returns_first_non_empty_result(self):
        empty = FakeProvider("empty")
        full = FakeProvider("full", results=[SearchResult(url="https://www.exampletimes.com/")])

        results = SearchEngine(providers=[empty, full]).search("example times")

        assert [r.url for r in results] == ["https://www.exampletimes.com/"]
        assert empty.queries == full.queries == ["example times"]

    def test_failing_provider_is_skipped_after_threshold(self):
        broken = FakeProvider("broken", error=True)
        engine = SearchEngine(providers=[broken], failure_threshold=2)

        for _ in range(3):
            assert engine.search("example times") == []

        assert len(broken.queries) == 2
        assert engine.failures["broken"] == 2

    def test_success_resets_failures(self):
        flaky = FakeProvider("flaky", error=True)
        engine = SearchEngine(providers=[flaky], failure_threshold=3)
        engine.search("example times")

        flaky.error = False
        engine.search("example times")

        assert engine.failures["flaky"] == 0

    def test_budget_caps_calls(self):
        provider = FakeProvider("fake")
        engine = SearchEngine(providers=[provider])
        budget = SearchBudget(max_calls=1)

        engine.search("first", budget=budget)
        engine.search("second", budget=budget)

        assert provider.queries == ["first"]
        assert budget.exhausted

    def test_unknown_configured_provider_is_ignored(self):
        with patch("byline_scout.discovery.search_engine.SEARCH_PROVIDERS", ["duckduckgo", "altavista"]):
            engine = SearchEngine()

        assert [p.name for p in engine.providers()] == ["duckduckgo"]
