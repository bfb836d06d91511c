"""
Topic, keyword and influence enrichment for author profiles.

Everything here is a pure function of a profile's article titles, bio and
contact fields. Tokenization uses nltk's regular-expression tokenizer,
which needs no downloaded corpora.
"""
import math
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Iterable
from nltk import FreqDist
from nltk.tokenize import wordpunct_tokenize
from byline_scout.config import MAX_STORED_KEYWORDS, MAX_TOP_KEYWORDS
from byline_scout.models.author import AuthorProfile
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

STOP_WORDS = {
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'of', 'with', 'by', 'from', 'as', 'is', 'was', 'are', 'were', 'been',
    'be', 'have', 'has', 'had', 'do', 'does', 'did', 'will', 'would', 'could',
    'should', 'may', 'might', 'must', 'can', 'this', 'that', 'these', 'those',
    'i', 'you', 'he', 'she', 'it', 'we', 'they', 'what', 'which', 'who',
    'when', 'where', 'why', 'how', 'all', 'each', 'every', 'both', 'few',
    'more', 'most', 'other', 'some', 'such', 'no', 'nor', 'not', 'only',
    'own', 'same', 'so', 'than', 'too', 'very', 'says', 'said', 'new', 'just',
    'after', 'over', 'into', 'about', 'amid', 'their', 'there', 'here', 'also',
}
MIN_TOKEN_LENGTH = 4
MIN_TITLE_LENGTH = 10
MAX_RANKED_TERMS = 20

# Category -> keyword table. Order is the order topics are reported in.
ENTITY_CATEGORIES = OrderedDict([
    ("Politics", ['government', 'parliament', 'minister', 'president', 'prime', 'election',
                  'vote', 'policy', 'law', 'bill', 'senate', 'congress', 'political',
                  'democracy', 'opposition', 'ruling', 'campaign']),
    ("Business", ['economy', 'market', 'stock', 'trade', 'business', 'company', 'corporate',
                  'finance', 'investment', 'revenue', 'profit', 'loss', 'shares', 'startup',
                  'industry', 'commercial', 'economic', 'financial', 'bank', 'rupee', 'dollar']),
    ("Technology", ['technology', 'tech', 'software', 'hardware', 'ai', 'artificial', 'intelligence',
                    'digital', 'online', 'internet', 'cyber', 'computer', 'mobile', 'app',
                    'data', 'algorithm', 'innovation', 'smartphone', 'google', 'microsoft', 'apple']),
    ("Sports", ['cricket', 'football', 'hockey', 'tennis', 'sports', 'match', 'tournament',
                'championship', 'olympic', 'player', 'team', 'coach', 'win', 'loss', 'score',
                'game', 'league', 'ipl', 'worldcup']),
    ("Entertainment", ['film', 'movie', 'actor', 'actress', 'cinema', 'bollywood', 'hollywood',
                       'music', 'song', 'album', 'concert', 'entertainment', 'celebrity',
                       'show', 'series', 'tv', 'streaming', 'netflix', 'star']),
    ("Health", ['health', 'medical', 'hospital', 'doctor', 'patient', 'disease', 'virus',
                'vaccine', 'covid', 'pandemic', 'treatment', 'medicine', 'healthcare',
                'surgery', 'clinic', 'wellness']),
    ("Environment", ['climate', 'environment', 'pollution', 'green', 'carbon', 'emission',
                     'renewable', 'energy', 'sustainability', 'conservation', 'wildlife',
                     'forest', 'ocean', 'global warming', 'ecology']),
    ("Crime", ['crime', 'murder', 'theft', 'robbery', 'arrest', 'police', 'investigation',
               'accused', 'victim', 'court', 'judge', 'trial', 'justice', 'criminal',
               'fraud', 'corruption', 'scam']),
    ("International", ['international', 'global', 'world', 'foreign', 'diplomatic', 'relations',
                       'united nations', 'country', 'nation', 'border', 'war', 'peace',
                       'treaty', 'ambassador', 'summit', 'alliance']),
    ("Education", ['education', 'school', 'college', 'university', 'student', 'teacher',
                   'exam', 'degree', 'learning', 'academic', 'campus', 'admission', 'study']),
])
FALLBACK_TOPIC = "General"

ACTIVITY_LEVELS = [
    ("veryActive", 20),
    ("active", 10),
    ("moderate", 5),
    ("lowActivity", 0),
]


@dataclass
class Enrichment:
    keywords: List[str] = field(default_factory=list)
    top_keywords: List[str] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)
    influence_score: float = 0.0


def _tokens(text: str) -> List[str]:
    return [
        token for token in wordpunct_tokenize((text or "").lower())
        if token.isalpha() and len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def extract_keywords(text: str, max_keywords: int = 10) -> List[Dict[str, Any]]:
    """
    Rank the words of a text by frequency.

    Args:
        text: Free text
        max_keywords: Number of keywords to return

    Returns:
        List of {"word", "count"} dictionaries, most frequent first
    """
    if not text or not text.strip():
        return []
    freq = FreqDist(_tokens(text))
    return [{"word": word, "count": count} for word, count in freq.most_common(max_keywords)]


def rank_title_keywords(titles: Iterable[str], limit: int = MAX_RANKED_TERMS) -> List[Dict[str, Any]]:
    """
    Rank terms across a set of titles by summed TF-IDF.

    Each title is one document. A term's weight in a title is its count
    times idf = 1 + ln(N / (1 + df)).

    Args:
        titles: Article titles
        limit: Number of terms to return

    Returns:
        List of {"term", "score"} dictionaries, highest score first
    """
    documents = [FreqDist(_tokens(title)) for title in titles if title]
    if not documents:
        return []

    doc_freq = FreqDist()
    for doc in documents:
        doc_freq.update(doc.keys())

    total = len(documents)
    scores: Dict[str, float] = {}
    for doc in documents:
        for term, count in doc.items():
            idf = 1 + math.log(total / (1 + doc_freq[term]))
            scores[term] = scores.get(term, 0.0) + count * idf

    # Ties keep first-seen order
    ranked = sorted(scores.items(), key=lambda item: -item[1])
    return [{"term": term, "score": round(score, 3)} for term, score in ranked[:limit]]


def categorize_topics(text: str) -> List[str]:
    """Categories whose keywords appear as substrings of the text, in table order."""
    if not text or not text.strip():
        return []
    lower_text = text.lower()
    return [
        category for category, keywords in ENTITY_CATEGORIES.items()
        if any(keyword in lower_text for keyword in keywords)
    ]


def calculate_influence(article_count: int, topic_count: int, social_count: int,
                        bio: Optional[str] = None, has_picture: bool = False) -> float:
    """
    Heuristic influence score.

    Args:
        article_count: Number of articles, counted up to 50
        topic_count: Number of topics
        social_count: Number of social links present
        bio: Biography text
        has_picture: Whether a profile picture was found

    Returns:
        Score rounded to one decimal
    """
    score = min(max(article_count, 0), 50) * 2
    score += topic_count * 5
    score += social_count * 10
    if bio and len(bio) > 50:
        score += 15
    if has_picture:
        score += 10
    return round(float(score), 1)


def summarize_activity(profiles: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Summarize publishing activity over a set of stored profiles.

    Args:
        profiles: Profile dictionaries with total_articles, topics and outlet

    Returns:
        Totals, average, activity level counts and topic/outlet distributions
    """
    levels = OrderedDict((name, 0) for name, _ in ACTIVITY_LEVELS)
    topic_counts = FreqDist()
    outlet_counts = FreqDist()
    total_articles = 0

    for profile in profiles:
        count = profile.get("total_articles") or 0
        total_articles += count
        for name, threshold in ACTIVITY_LEVELS:
            if count >= threshold:
                levels[name] += 1
                break
        topic_counts.update(profile.get("topics") or [])
        if profile.get("outlet"):
            outlet_counts[profile["outlet"]] += 1

    return {
        "total_journalists": len(profiles),
        "total_articles": total_articles,
        "avg_articles_per_journalist": round(total_articles / len(profiles), 1) if profiles else 0,
        "activity_levels": dict(levels),
        "topic_distribution": dict(topic_counts.most_common()),
        "outlet_distribution": dict(outlet_counts.most_common()),
    }


class NLPEnricher:
    """Derives keywords, topics and influence for a profile."""

    def __init__(self, max_keywords: int = MAX_STORED_KEYWORDS, max_top_keywords: int = MAX_TOP_KEYWORDS):
        self.max_keywords = max_keywords
        self.max_top_keywords = max_top_keywords

    def enrich(self, profile: AuthorProfile) -> Enrichment:
        """
        Compute enrichment for a profile without modifying it.

        Args:
            profile: Extracted author profile

        Returns:
            Enrichment with keywords, top keywords, topics and influence score
        """
        titles = [a.title for a in profile.articles if a.title]
        keyword_titles = [t for t in titles if len(t) > MIN_TITLE_LENGTH]
        ranked = [item["term"] for item in rank_title_keywords(keyword_titles, limit=self.max_keywords)]

        combined = " ".join(titles + [profile.bio or ""])
        topics = categorize_topics(combined)
        if not topics and profile.articles:
            topics = [FALLBACK_TOPIC]

        influence = calculate_influence(
            article_count=len(profile.articles),
            topic_count=len(topics),
            social_count=profile.social_links.present_count(),
            bio=profile.bio,
            has_picture=bool(profile.profile_picture),
        )
        return Enrichment(
            keywords=ranked,
            top_keywords=ranked[:self.max_top_keywords],
            topics=topics,
            influence_score=influence,
        )

    def apply(self, profile: AuthorProfile) -> AuthorProfile:
        """Enrich a profile in place and return it."""
        enrichment = self.enrich(profile)
        profile.keywords = enrichment.keywords
        profile.top_keywords = enrichment.top_keywords
        profile.topics = enrichment.topics
        profile.influence_score = enrichment.influence_score
        logger.debug(f"Enriched {profile.name}: {len(profile.topics)} topics, influence {profile.influence_score}")
        return profile
