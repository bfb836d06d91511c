"""
Author, article and profile models passed between pipeline stages.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Optional, Dict, Any

from byline_scout.config import DEFAULT_ROLE


class CandidateSource(str, Enum):
    DIRECTORY = "directory"
    ARTICLE_BYLINE = "articleByline"
    META_TAG = "metaTag"
    CONSTRUCTED = "constructed"


@dataclass
class Article:
    title: str
    url: str
    publish_date: Optional[str] = None
    section: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AuthorCandidate:
    """An unverified author name with the URL where a profile is expected."""
    name: str
    profile_url: str
    source: CandidateSource

    @property
    def seed_articles(self) -> List[Article]:
        return []


@dataclass
class DirectoryCandidate(AuthorCandidate):
    source: CandidateSource = CandidateSource.DIRECTORY


@dataclass
class ArticleDerivedCandidate(AuthorCandidate):
    """Candidate found in an article byline; keeps the articles that named it."""
    source: CandidateSource = CandidateSource.ARTICLE_BYLINE
    found_articles: List[Article] = field(default_factory=list)

    @property
    def seed_articles(self) -> List[Article]:
        return self.found_articles


@dataclass
class SearchDerivedCandidate(AuthorCandidate):
    """Candidate located through a site-restricted search for a known name."""
    source: CandidateSource = CandidateSource.CONSTRUCTED
    found_articles: List[Article] = field(default_factory=list)

    @property
    def seed_articles(self) -> List[Article]:
        return self.found_articles


@dataclass
class SocialLinks:
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None

    def present_count(self) -> int:
        return sum(1 for value in asdict(self).values() if value)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


@dataclass
class AuthorProfile:
    """Enriched record for one author; the unit that gets persisted."""
    name: str
    profile_url: str
    source: CandidateSource
    outlet: str
    bio: Optional[str] = None
    role: str = DEFAULT_ROLE
    email: Optional[str] = None
    profile_picture: Optional[str] = None
    social_links: SocialLinks = field(default_factory=SocialLinks)
    articles: List[Article] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    top_keywords: List[str] = field(default_factory=list)
    influence_score: float = 0.0
    article_based: bool = False

    @property
    def total_articles(self) -> int:
        return len(self.articles)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "profile_url": self.profile_url,
            "source": self.source.value,
            "outlet": self.outlet,
            "bio": self.bio,
            "role": self.role,
            "email": self.email,
            "profile_picture": self.profile_picture,
            "social_links": self.social_links.to_dict(),
            "articles": [a.to_dict() for a in self.articles],
            "total_articles": self.total_articles,
            "topics": list(self.topics),
            "keywords": list(self.keywords),
            "top_keywords": list(self.top_keywords),
            "influence_score": self.influence_score,
            "article_based": self.article_based,
        }
