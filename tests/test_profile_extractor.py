"""Tests for profile extraction and its degradation paths."""

from unittest.mock import patch

from byline_scout.discovery.profile_extractor import ProfileExtractor, clean_title
from byline_scout.discovery.search.base import SearchResult
from byline_scout.discovery.search_engine import SearchEngine
from byline_scout.models.author import (
    Article,
    ArticleDerivedCandidate,
    CandidateSource,
    DirectoryCandidate,
)
from byline_scout.models.site import ResolvedSite, DetectionMethod
from tests.fakes import FakeCrawler, FakeProvider, HOME, homepage, profile_page

SITE = ResolvedSite(base_url=HOME, method=DetectionMethod.CONSTRUCTED_PATTERN)
PROFILE_URL = f"{HOME}/author/asha-verma"
BIO = "Asha Verma is a senior correspondent covering state politics and elections."

HEADLINES = [
    ("2024/05/12/election-results-announced", "Election results announced in the state"),
    ("2024/05/11/campaign-trail-heats-up", "Campaign trail heats up in the districts"),
    ("2024/05/10/assembly-session-adjourned", "Assembly session adjourned after protests"),
    ("2024/05/09/opposition-rally-draws-crowds", "Opposition rally draws large crowds"),
    ("2024/05/08/voter-turnout-record-high", "Voter turnout reaches a record high"),
]


def _story_cards(headlines=HEADLINES):
    return "\n".join(
        f'<article class="story-card"><a href="/{path}"><h2>{title}</h2></a></article>' for path, title in headlines
    )


def _full_profile():
    links = """
    <a href="https://twitter.com/intent/tweet?url=x">Share</a>
    <a href="https://twitter.com/ashaverma">Twitter</a>
    <a href="https://www.linkedin.com/in/ashaverma">LinkedIn</a>
    <a href="mailto:asha.verma@exampletimes.com">Email</a>
    <img src="/images/asha.jpg" alt="Asha Verma">
    """
    return profile_page("Asha Verma", bio=BIO, role="Senior Correspondent", links=links, articles=_story_cards())


class TestCleanTitle:
    """Tests for clean_title."""

    def test_rejects_short_and_navigation_text(self):
        assert clean_title("Read more") is None
        assert clean_title("Subscribe to our newsletter today") is None

    def test_strips_read_more_prefix(self):
        assert clean_title("Read more: Election results announced") == "Election results announced"

    def test_truncates_long_titles(self):
        assert len(clean_title("x" * 280)) == 250


class TestExtractFromProfilePage:
    """Tests for ProfileExtractor.extract with a loadable profile page."""

    def test_extracts_all_fields(self):
        crawler = FakeCrawler({PROFILE_URL: _full_profile()})
        candidate = DirectoryCandidate(name="Asha Verma", profile_url=PROFILE_URL)

        profile = ProfileExtractor(crawler).extract(candidate, SITE, "Example Times")

        assert profile.name == "Asha Verma"
        assert profile.outlet == "Example Times"
        assert profile.profile_url == PROFILE_URL
        assert profile.source == CandidateSource.DIRECTORY
        assert profile.bio == BIO
        assert profile.role == "Senior Correspondent"
        assert profile.email == "asha.verma@exampletimes.com"
        assert profile.social_links.twitter == "https://twitter.com/ashaverma"
        assert profile.social_links.linkedin == "https://www.linkedin.com/in/ashaverma"
        assert profile.social_links.facebook is None
        assert profile.profile_picture == f"{HOME}/images/asha.jpg"
        assert [a.title for a in profile.articles] == [title for _, title in HEADLINES]
        assert profile.articles[0].publish_date == "2024-05-12"
        assert profile.article_based is False

    def test_site_wide_social_links_are_not_attributed(self):
        crawler = FakeCrawler({PROFILE_URL: profile_page("Asha Verma", articles=_story_cards())})
        candidate = DirectoryCandidate(name="Asha Verma", profile_url=PROFILE_URL)

        profile = ProfileExtractor(crawler).extract(candidate, SITE, "Example Times")

        # The only twitter link on the page sits in the site navigation
        assert profile.social_links.present_count() == 0
        assert profile.role == "Journalist"

    def test_seed_articles_are_merged_without_duplicates(self):
        crawler = FakeCrawler({PROFILE_URL: profile_page("Asha Verma", articles=_story_cards(HEADLINES[:2]))})
        seeds = [
            Article(title=HEADLINES[0][1], url=f"{HOME}/{HEADLINES[0][0]}"),
            Article(title="Counting day live updates from the state", url=f"{HOME}/2024/05/13/counting-day-live"),
        ]
        candidate = ArticleDerivedCandidate(name="Asha Verma", profile_url=PROFILE_URL, found_articles=seeds)

        profile = ProfileExtractor(crawler).extract(candidate, SITE, "Example Times")

        urls = [a.url for a in profile.articles]
        assert len(urls) == len(set(urls)) == 3
        assert urls[-1] == f"{HOME}/2024/05/13/counting-day-live"

    def test_plain_links_under_section_paths(self):
        links = """<ul>
            <li><a href="/politics/budget-vote">Budget vote passed in the assembly</a></li>
            <li><a href="/politics/poll-dates">Poll dates announced for the state</a></li>
        </ul>"""
        crawler = FakeCrawler({PROFILE_URL: profile_page("Asha Verma", articles=links)})
        candidate = DirectoryCandidate(name="Asha Verma", profile_url=PROFILE_URL)

        profile = ProfileExtractor(crawler).extract(candidate, SITE, "Example Times")

        assert [a.url for a in profile.articles] == [f"{HOME}/politics/budget-vote", f"{HOME}/politics/poll-dates"]
        assert profile.articles[0].section == "politics"

    def test_empty_profile_uses_site_search(self):
        search_url = f"{HOME}/search?q=Asha%20Verma"
        crawler = FakeCrawler({
            PROFILE_URL: profile_page("Asha Verma"),
            search_url: f"<html><body><ul><li><a href='/{HEADLINES[0][0]}'>{HEADLINES[0][1]}</a></li></ul></body></html>",
        })
        candidate = DirectoryCandidate(name="Asha Verma", profile_url=PROFILE_URL)

        profile = ProfileExtractor(crawler).extract(candidate, SITE, "Example Times")

        assert [a.title for a in profile.articles] == [HEADLINES[0][1]]

    def test_empty_profile_falls_back_to_web_search(self):
        story = f"{HOME}/{HEADLINES[1][0]}"
        provider = FakeProvider(results=[
            SearchResult(url=story, title=HEADLINES[1][1]),
            SearchResult(url="https://elsewhere.example.org/2024/05/11/other-story", title="Unrelated story elsewhere"),
        ])
        crawler = FakeCrawler({PROFILE_URL: profile_page("Asha Verma")})
        candidate = DirectoryCandidate(name="Asha Verma", profile_url=PROFILE_URL)

        profile = ProfileExtractor(crawler, SearchEngine(providers=[provider])).extract(candidate, SITE, "Example Times")

        assert [a.url for a in profile.articles] == [story]


class TestDegradation:
    """Tests for relocation, article-based and stub profiles."""

    def test_relocates_through_homepage_link(self):
        relocated = f"{HOME}/author/asha-verma-123"
        crawler = FakeCrawler({
            HOME: homepage([], extra='<a href="/author/asha-verma-123">Asha Verma</a>'),
            relocated: _full_profile(),
        })
        candidate = DirectoryCandidate(name="Asha Verma", profile_url=PROFILE_URL)

        profile = ProfileExtractor(crawler).extract(candidate, SITE, "Example Times")

        assert profile.profile_url == relocated
        assert profile.bio == BIO
        assert len(profile.articles) == 5

    def test_article_based_profile_from_seeds(self):
        crawler = FakeCrawler({HOME: homepage([])})
        seeds = [Article(title=title, url=f"{HOME}/{path}") for path, title in HEADLINES[:2]]
        candidate = ArticleDerivedCandidate(
            name="Asha Verma", profile_url=PROFILE_URL, source=CandidateSource.META_TAG, found_articles=seeds,
        )

        profile = ProfileExtractor(crawler).extract(candidate, SITE, "Example Times")

        assert profile.article_based is True
        assert profile.articles == seeds
        assert profile.profile_url == PROFILE_URL
        assert profile.source == CandidateSource.META_TAG
        assert profile.bio is None

    def test_stub_profile_without_seeds(self):
        crawler = FakeCrawler({HOME: homepage([])})
        candidate = DirectoryCandidate(name="Ravi Kumar", profile_url=f"{HOME}/author/ravi-kumar")

        profile = ProfileExtractor(crawler).extract(candidate, SITE, "Example Times")

        assert profile.articles == []
        assert profile.role == "Journalist"
        assert profile.article_based is False
        assert profile.profile_url == f"{HOME}/author/ravi-kumar"

    def test_unexpected_error_gives_stub(self):
        crawler = FakeCrawler({PROFILE_URL: _full_profile()})
        candidate = DirectoryCandidate(name="Asha Verma", profile_url=PROFILE_URL)
        extractor = ProfileExtractor(crawler)

        with patch.object(extractor, "_extract_from_profile_page", side_effect=RuntimeError("boom")):
            profile = extractor.extract(candidate, SITE, "Example Times")

        assert profile.articles == []
        assert profile.name == "Asha Verma"

    def test_outlet_defaults_to_host(self):
        crawler = FakeCrawler()
        candidate = DirectoryCandidate(name="Ravi Kumar", profile_url=f"{HOME}/author/ravi-kumar")

        profile = ProfileExtractor(crawler).extract(candidate, SITE)

        assert profile.outlet == "exampletimes.com"
