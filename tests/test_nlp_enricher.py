"""Tests for keyword, topic and influence enrichment."""

import pytest

from byline_scout.classification.nlp_enricher import (
    NLPEnricher,
    extract_keywords,
    rank_title_keywords,
    categorize_topics,
    calculate_influence,
    summarize_activity,
)
from byline_scout.models.author import Article, AuthorProfile, CandidateSource, SocialLinks


def _profile(titles, bio=None, **kwargs):
    articles = [Article(title=t, url=f"https://www.exampletimes.com/2024/05/{10 + i}/story-{i}") for i, t in enumerate(titles)]
    return AuthorProfile(
        name="Asha Verma",
        profile_url="https://www.exampletimes.com/author/asha-verma",
        source=CandidateSource.DIRECTORY,
        outlet="Example Times",
        bio=bio,
        articles=articles,
        **kwargs,
    )


class TestKeywords:
    """Tests for extract_keywords and rank_title_keywords."""

    def test_extract_keywords_counts_and_filters(self):
        keywords = extract_keywords("The election results and the election campaign were close")

        assert keywords[0] == {"word": "election", "count": 2}
        words = [k["word"] for k in keywords]
        assert "the" not in words
        assert "and" not in words

    def test_extract_keywords_empty(self):
        assert extract_keywords("   ") == []

    def test_rank_title_keywords_prefers_repeated_terms(self):
        ranked = rank_title_keywords([
            "Election results announced",
            "Election campaign heats up",
            "Cricket final tonight",
        ])

        assert ranked[0]["term"] == "election"
        assert "up" not in [r["term"] for r in ranked]

    def test_rank_title_keywords_scores(self):
        ranked = rank_title_keywords(["Budget session opens", "Budget debate continues"])

        # df(budget) = 2 over 2 titles: idf = 1 + ln(2/3), summed over both titles
        assert ranked[0] == {"term": "budget", "score": 1.189}

    def test_rank_title_keywords_empty(self):
        assert rank_title_keywords([]) == []


class TestTopics:
    """Tests for categorize_topics."""

    def test_categories_in_table_order(self):
        topics = categorize_topics("Police arrest minister after cricket match")

        assert topics == ["Politics", "Sports", "Crime"]

    def test_no_match(self):
        assert categorize_topics("Quiet morning walks by the lake") == []


class TestInfluence:
    """Tests for calculate_influence."""

    def test_components(self):
        score = calculate_influence(article_count=10, topic_count=2, social_count=1,
                                    bio="x" * 60, has_picture=True)

        assert score == 20 + 10 + 10 + 15 + 10

    def test_article_count_is_capped(self):
        assert calculate_influence(500, 0, 0) == calculate_influence(50, 0, 0) == 100.0

    @pytest.mark.parametrize("field", ["article_count", "topic_count", "social_count"])
    def test_monotonic(self, field):
        base = {"article_count": 3, "topic_count": 1, "social_count": 0}
        more = dict(base, **{field: base[field] + 1})

        assert calculate_influence(**more) > calculate_influence(**base)


class TestNLPEnricher:
    """Tests for NLPEnricher."""

    def test_enrich_profile(self):
        profile = _profile(
            ["Election results announced in the state", "Election rally draws crowds in districts"],
            social_links=SocialLinks(twitter="https://twitter.com/ashaverma"),
        )

        enriched = NLPEnricher().apply(profile)

        assert enriched is profile
        assert profile.topics == ["Politics"]
        assert profile.keywords[0] == "election"
        assert profile.top_keywords == profile.keywords[:5]
        assert profile.influence_score == 2 * 2 + 5 + 10

    def test_articles_without_matching_topic_get_general(self):
        profile = _profile(["Quiet morning walks by the lake"])

        assert NLPEnricher().enrich(profile).topics == ["General"]

    def test_no_articles(self):
        enrichment = NLPEnricher().enrich(_profile([]))

        assert enrichment.topics == []
        assert enrichment.keywords == []
        assert enrichment.influence_score == 0.0

    def test_bio_contributes_topics(self):
        profile = _profile(["Quiet morning walks by the lake"], bio="Writes about hospital care and public health.")

        assert NLPEnricher().enrich(profile).topics == ["Health"]

    def test_short_titles_are_ignored_for_keywords(self):
        profile = _profile(["Short one", "Budget session opens in the capital"])

        keywords = NLPEnricher().enrich(profile).keywords

        assert "short" not in keywords
        assert "budget" in keywords

    def test_short_titles_still_count_for_topics(self):
        profile = _profile(["Vote today", "Quiet morning walks by the lake"])

        enrichment = NLPEnricher().enrich(profile)

        assert enrichment.topics == ["Politics"]
        assert "vote" not in enrichment.keywords


class TestSummarizeActivity:
    """Tests for summarize_activity."""

    def test_summary(self):
        profiles = [
            {"total_articles": 25, "topics": ["Politics"], "outlet": "Example Times"},
            {"total_articles": 12, "topics": ["Politics", "Sports"], "outlet": "Example Times"},
            {"total_articles": 5, "topics": [], "outlet": "Daily Example"},
            {"total_articles": 0, "topics": [], "outlet": "Daily Example"},
        ]

        summary = summarize_activity(profiles)

        assert summary["total_journalists"] == 4
        assert summary["total_articles"] == 42
        assert summary["avg_articles_per_journalist"] == 10.5
        assert summary["activity_levels"] == {"veryActive": 1, "active": 1, "moderate": 1, "lowActivity": 1}
        assert summary["topic_distribution"] == {"Politics": 2, "Sports": 1}
        assert summary["outlet_distribution"] == {"Example Times": 2, "Daily Example": 2}

    def test_empty(self):
        summary = summarize_activity([])

        assert summary["total_journalists"] == 0
        assert summary["avg_articles_per_journalist"] == 0
