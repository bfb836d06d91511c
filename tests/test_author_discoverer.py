"""Tests for per-article author extraction and author discovery."""

from unittest.mock import Mock

import pytest
from bs4 import BeautifulSoup

from byline_scout.discovery.article_collector import ArticleCollector
from byline_scout.discovery.author_discoverer import AuthorDiscoverer, rank_candidates
from byline_scout.discovery.author_extractor import ArticleAuthorExtractor, constructed_profile_url
from byline_scout.discovery.search.base import SearchResult
from byline_scout.discovery.search_engine import SearchEngine
from byline_scout.exceptions import JobCancelled
from byline_scout.models.author import (
    Article,
    AuthorCandidate,
    ArticleDerivedCandidate,
    CandidateSource,
    DirectoryCandidate,
    SearchDerivedCandidate,
)
from byline_scout.models.site import ResolvedSite, DetectionMethod
from tests.fakes import FakeCrawler, FakeProvider, HOME, homepage, article_page

SITE = ResolvedSite(base_url=HOME, method=DetectionMethod.CONSTRUCTED_PATTERN)
ARTICLE_URL = f"{HOME}/2024/05/12/election-results-announced"

DIRECTORY_NAMES = [
    "Asha Verma", "Ravi Kumar", "Meera Nair", "Arjun Singh",
    "Priya Das", "Kiran Rao", "Neha Joshi", "Vikram Sethi",
]


def _soup(html):
    return BeautifulSoup(html, "html.parser")


def _directory_page():
    links = "\n".join(
        f'<li><a href="/author/{name.lower().replace(" ", "-")}">{name}</a></li>' for name in DIRECTORY_NAMES
    )
    return f"<html><body><nav><a href='/'>Home</a></nav><h1>Our authors</h1><ul>{links}</ul></body></html>"


def _discoverer(crawler, search_engine=None):
    return AuthorDiscoverer(
        crawler,
        ArticleCollector(crawler),
        search_engine=search_engine,
        fetch_delay=0,
    )


class TestArticleAuthorExtractor:
    """Tests for ArticleAuthorExtractor."""

    def setup_method(self):
        self.extractor = ArticleAuthorExtractor()

    def test_json_ld_author_with_url(self):
        html = """<html><head><script type="application/ld+json">
        {"@type": "NewsArticle", "author": {"@type": "Person", "name": "Asha Verma",
         "url": "https://www.exampletimes.com/author/asha-verma"}}
        </script></head><body></body></html>"""

        author = self.extractor.extract(_soup(html), ARTICLE_URL)

        assert author.name == "Asha Verma"
        assert author.profile_url == f"{HOME}/author/asha-verma"
        assert author.source == CandidateSource.ARTICLE_BYLINE

    def test_json_ld_graph_without_url_gets_constructed_profile(self):
        html = """<script type="application/ld+json">
        {"@graph": [{"@type": "WebPage"}, {"@type": "NewsArticle", "author": [{"name": "Ravi Kumar"}]}]}
        </script>"""

        author = self.extractor.extract(_soup(html), ARTICLE_URL)

        assert author.name == "Ravi Kumar"
        assert author.profile_url == f"{HOME}/author/ravi-kumar"
        assert author.source == CandidateSource.CONSTRUCTED

    def test_author_anchor(self):
        html = '<article><div class="byline"><a href="/author/asha-verma">By Asha Verma</a></div></article>'

        author = self.extractor.extract(_soup(html), ARTICLE_URL)

        assert author.name == "Asha Verma"
        assert author.profile_url == f"{HOME}/author/asha-verma"
        assert author.source == CandidateSource.ARTICLE_BYLINE

    def test_link_labels_are_not_names(self):
        html = """<article><meta name="author" content="Asha Verma">
        <div class="author"><a href="/author/asha-verma">View Profile</a></div></article>"""

        author = self.extractor.extract(_soup(html), ARTICLE_URL)

        assert author.name == "Asha Verma"
        assert author.source == CandidateSource.META_TAG

    def test_link_label_alone_gives_no_author(self):
        html = '<article><div class="author"><a href="/author/asha-verma">Read More</a></div></article>'

        assert self.extractor.extract(_soup(html), ARTICLE_URL) is None

    def test_author_links_in_navigation_are_ignored(self):
        html = """<nav><a href="/author/ravi-kumar">Ravi Kumar</a></nav>
        <article><meta name="author" content="Asha Verma"></article>"""

        author = self.extractor.extract(_soup(html), ARTICLE_URL)

        assert author.name == "Asha Verma"
        assert author.source == CandidateSource.META_TAG

    def test_meta_tag_with_url_content_is_skipped(self):
        html = """<meta property="article:author" content="https://facebook.com/exampletimes">
        <meta name="author" content="Asha Verma">"""

        author = self.extractor.extract(_soup(html), ARTICLE_URL)

        assert author.name == "Asha Verma"

    def test_by_pattern_in_content(self):
        html = "<main><p>By Asha Verma, New Delhi</p><p>Counting began at eight in the morning.</p></main>"

        author = self.extractor.extract(_soup(html), ARTICLE_URL)

        assert author.name == "Asha Verma"
        assert author.profile_url == constructed_profile_url(HOME, "Asha Verma")

    def test_desk_byline_is_rejected(self):
        html = '<article><span class="byline">Web Desk</span></article>'

        assert self.extractor.extract(_soup(html), ARTICLE_URL) is None


class TestRankCandidates:
    """Tests for rank_candidates."""

    def test_directory_first_then_valid_profile_urls(self):
        constructed = AuthorCandidate("Meera Nair", f"{HOME}/author/meera-nair", CandidateSource.CONSTRUCTED)
        no_profile = ArticleDerivedCandidate("Arjun Singh", f"{HOME}/2024/01/01/some-story")
        byline = ArticleDerivedCandidate("Ravi Kumar", f"{HOME}/author/ravi-kumar")
        directory = DirectoryCandidate("Asha Verma", f"{HOME}/author/asha-verma")

        ranked = rank_candidates([constructed, no_profile, byline, directory])

        assert [c.name for c in ranked] == ["Asha Verma", "Ravi Kumar", "Meera Nair", "Arjun Singh"]


class TestDiscover:
    """Tests for AuthorDiscoverer.discover."""

    def test_aggregates_articles_by_normalized_name(self):
        second_url = f"{HOME}/2024/05/13/campaign-trail-heats-up"
        crawler = FakeCrawler({
            HOME: homepage([
                (ARTICLE_URL, "Election results announced"),
                (second_url, "Campaign trail heats up"),
            ]),
            ARTICLE_URL: article_page("Election results announced in the state", "Asha Verma"),
            second_url: article_page("Campaign trail heats up across districts", "  asha   VERMA "),
        })

        candidates = _discoverer(crawler).discover(SITE, "Example Times", quota=5)

        assert len(candidates) == 1
        candidate = candidates[0]
        assert isinstance(candidate, ArticleDerivedCandidate)
        assert candidate.name == "Asha Verma"
        assert candidate.source == CandidateSource.META_TAG
        assert [a.url for a in candidate.found_articles] == [ARTICLE_URL, second_url]
        assert candidate.found_articles[0].title == "Election results announced in the state"
        assert candidate.found_articles[0].publish_date == "2024-05-12"

    def test_directory_fills_quota(self):
        crawler = FakeCrawler({f"{HOME}/authors": _directory_page()})

        candidates = _discoverer(crawler).discover(SITE, "Example Times", quota=3)

        assert len(candidates) == 3
        assert all(isinstance(c, DirectoryCandidate) for c in candidates)
        assert [c.name for c in candidates] == DIRECTORY_NAMES[:3]
        # Quota met from the directory, so no article page was fetched
        assert ARTICLE_URL not in crawler.requested

    def test_zero_quota(self):
        crawler = FakeCrawler({f"{HOME}/authors": _directory_page()})

        assert _discoverer(crawler).discover(SITE, "Example Times", quota=0) == []

    def test_stops_at_buffer_above_quota(self):
        urls = [f"{HOME}/2024/05/1{i}/story-number-{i}-headline" for i in range(6)]
        names = ["Asha Verma", "Ravi Kumar", "Meera Nair", "Arjun Singh", "Priya Das", "Kiran Rao"]
        pages = {HOME: homepage([(url, f"Story number {i}") for i, url in enumerate(urls)])}
        for url, name in zip(urls, names):
            pages[url] = article_page("A sufficiently long headline", name)
        crawler = FakeCrawler(pages)

        candidates = _discoverer(crawler).discover(SITE, "Example Times", quota=2)

        # ceil(2 * 1.5) = 3 authors found before stopping
        assert len(candidates) == 2
        assert urls[3] not in crawler.requested

    def test_cancellation_between_articles(self):
        collector = Mock(spec=ArticleCollector)
        collector.collect.return_value = [Article(title="Story", url=ARTICLE_URL)]
        discoverer = AuthorDiscoverer(FakeCrawler(), collector, fetch_delay=0)

        with pytest.raises(JobCancelled):
            discoverer.discover(SITE, "Example Times", quota=5, should_stop=lambda: True)


class TestFindAuthor:
    """Tests for AuthorDiscoverer.find_author."""

    def test_finds_profile_link_on_homepage(self):
        crawler = FakeCrawler({
            HOME: homepage([], extra='<a href="/author/asha-verma-123">Asha Verma</a>'),
        })

        candidate = _discoverer(crawler).find_author(SITE, "asha verma")

        assert isinstance(candidate, DirectoryCandidate)
        assert candidate.profile_url == f"{HOME}/author/asha-verma-123"

    def test_falls_back_to_constructed_url(self):
        crawler = FakeCrawler({
            HOME: homepage([]),
            f"{HOME}/author/ravi-kumar": "<html><body><h1>Ravi Kumar</h1></body></html>",
        })

        candidate = _discoverer(crawler).find_author(SITE, "Ravi Kumar")

        assert candidate.source == CandidateSource.CONSTRUCTED
        assert candidate.profile_url == f"{HOME}/author/ravi-kumar"

    def test_falls_back_to_site_search(self):
        story = f"{HOME}/2024/05/12/budget-session-opens-today"
        provider = FakeProvider(results=[SearchResult(url=story, title="Budget session opens today")])
        crawler = FakeCrawler({HOME: homepage([])})

        candidate = _discoverer(crawler, SearchEngine(providers=[provider])).find_author(SITE, "Meera Nair")

        assert isinstance(candidate, SearchDerivedCandidate)
        assert candidate.profile_url == f"{HOME}/author/meera-nair"
        assert [a.url for a in candidate.seed_articles] == [story]
        assert provider.queries == ['site:exampletimes.com "Meera Nair"']

    def test_not_found(self):
        crawler = FakeCrawler({HOME: homepage([])})

        assert _discoverer(crawler, SearchEngine(providers=[])).find_author(SITE, "Meera Nair") is None
