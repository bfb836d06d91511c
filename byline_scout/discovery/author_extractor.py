"""
Per-article author extraction.

Given one fetched article (or profile) page, find the author's name and
profile URL. Strategies run in priority order: linked data, author anchors,
author meta tags, byline text blocks, then a "By <Name>" pattern over the
main content. Every name must pass the journalist-name validator.
"""
import re
from dataclasses import dataclass
from typing import Optional, Any, List
from urllib.parse import urlparse
from bs4 import BeautifulSoup
from byline_scout.discovery.crawler.web_crawler import absolute_url, extract_json_ld
from byline_scout.extraction.strategies import (
    ExtractionContext, ExtractionStrategy, FunctionStrategy, run_strategies,
)
from byline_scout.models.author import CandidateSource
from byline_scout.validation.name_validator import LINK_NOISE_RE, is_valid_name, clean_byline, slugify_name
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

AUTHOR_ANCHOR_SELECTORS = [
    'a[href*="/author/"]',
    'a[href*="/profile/"]',
    'a[href*="/journalist/"]',
    'a[href*="/writer/"]',
    'a[href*="/reporter/"]',
    'a[href*="/correspondent/"]',
    'a[rel="author"]',
    '.byline a',
    '.author a',
    '.author-name a',
    '[itemprop="author"] a',
    '.story-author a',
    '.article-author a',
    'span.posted-by a',
    '[class*="author"] a',
]

AUTHOR_META_SELECTORS = [
    'meta[name="author"]',
    'meta[property="article:author"]',
    'meta[property="author"]',
    'meta[name="byl"]',
]

BYLINE_SELECTORS = [
    '.byline',
    '.author',
    '.author-name',
    '[itemprop="author"]',
    '.story-author',
    '.article-author',
    '[class*="byline"]',
]
MAX_BYLINE_LENGTH = 100

CONTENT_SELECTORS = ["article", "main", ".content", ".article-body", ".story-content"]
BY_NAME_PATTERNS = [
    re.compile(r"(?:\bBy|द्वारा|লিখেছেন)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3})"),
    re.compile(r"(?:\bBy|द्वारा)\s+([\u0900-\u097F]+(?:\s+[\u0900-\u097F]+){1,3})"),
]

# Navigation regions hold site-wide author lists, not this article's byline
_NON_BYLINE_REGIONS = {"nav", "footer", "aside"}


@dataclass
class ExtractedAuthor:
    name: str
    profile_url: str
    source: CandidateSource
    strategy: str = ""


def constructed_profile_url(origin: str, name: str) -> str:
    """Profile URL assumed for an author whose page exposes no link: {origin}/author/{slug}."""
    return f"{origin.rstrip('/')}/author/{slugify_name(name)}"


def _origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def _in_non_byline_region(tag) -> bool:
    for parent in tag.parents:
        if parent.name in _NON_BYLINE_REGIONS or parent.get("role") == "navigation":
            return True
    return False


def _accept(name: Any) -> Optional[str]:
    if not isinstance(name, str) or LINK_NOISE_RE.match(name.strip()):
        return None
    cleaned = clean_byline(name)
    return cleaned if is_valid_name(cleaned) else None


def _json_ld_author(soup: BeautifulSoup, context: ExtractionContext) -> Optional[ExtractedAuthor]:
    for item in extract_json_ld(soup):
        author = item.get("author")
        if not author:
            continue
        if isinstance(author, list):
            author = author[0] if author else None
        name, url = None, None
        if isinstance(author, str):
            name = author
        elif isinstance(author, dict):
            name = author.get("name")
            for key in ("url", "sameAs", "@id"):
                value = author.get(key)
                if isinstance(value, list):
                    value = next((v for v in value if isinstance(v, str) and v.startswith("http")), None)
                if isinstance(value, str) and value.startswith("http"):
                    url = value
                    break
        accepted = _accept(name)
        if accepted:
            if url:
                return ExtractedAuthor(accepted, url, CandidateSource.ARTICLE_BYLINE, "json_ld")
            return ExtractedAuthor(accepted, constructed_profile_url(context.origin, accepted),
                                   CandidateSource.CONSTRUCTED, "json_ld")
    return None


def _author_anchor(soup: BeautifulSoup, context: ExtractionContext) -> Optional[ExtractedAuthor]:
    for selector in AUTHOR_ANCHOR_SELECTORS:
        for anchor in soup.select(selector):
            if _in_non_byline_region(anchor):
                continue
            href = absolute_url(context.url, anchor.get("href"))
            accepted = _accept(anchor.get_text(" ", strip=True))
            if accepted and href:
                return ExtractedAuthor(accepted, href, CandidateSource.ARTICLE_BYLINE, "author_anchor")
    return None


def _author_meta(soup: BeautifulSoup, context: ExtractionContext) -> Optional[ExtractedAuthor]:
    for selector in AUTHOR_META_SELECTORS:
        for meta in soup.select(selector):
            content = (meta.get("content") or "").strip()
            # article:author is often a profile URL rather than a name
            if not content or content.startswith("http"):
                continue
            accepted = _accept(content)
            if accepted:
                return ExtractedAuthor(accepted, constructed_profile_url(context.origin, accepted),
                                       CandidateSource.META_TAG, "meta_tag")
    return None


def _byline_text(soup: BeautifulSoup, context: ExtractionContext) -> Optional[ExtractedAuthor]:
    for selector in BYLINE_SELECTORS:
        for element in soup.select(selector):
            if _in_non_byline_region(element):
                continue
            text = element.get_text(" ", strip=True)
            if not text or len(text) > MAX_BYLINE_LENGTH:
                continue
            accepted = _accept(text)
            if accepted:
                return ExtractedAuthor(accepted, constructed_profile_url(context.origin, accepted),
                                       CandidateSource.CONSTRUCTED, "byline_text")
    return None


def _by_pattern(soup: BeautifulSoup, context: ExtractionContext) -> Optional[ExtractedAuthor]:
    containers = []
    for selector in CONTENT_SELECTORS:
        containers.extend(soup.select(selector))
    for container in containers:
        text = container.get_text(" ", strip=True)
        for pattern in BY_NAME_PATTERNS:
            for match in pattern.finditer(text):
                accepted = _accept(match.group(1))
                if accepted:
                    return ExtractedAuthor(accepted, constructed_profile_url(context.origin, accepted),
                                           CandidateSource.CONSTRUCTED, "by_pattern")
    return None


DEFAULT_AUTHOR_STRATEGIES: List[ExtractionStrategy] = [
    FunctionStrategy("json_ld", _json_ld_author),
    FunctionStrategy("author_anchor", _author_anchor),
    FunctionStrategy("meta_tag", _author_meta),
    FunctionStrategy("byline_text", _byline_text),
    FunctionStrategy("by_pattern", _by_pattern),
]


class ArticleAuthorExtractor:
    """Finds the author of a single article page."""

    def __init__(self, strategies: Optional[List[ExtractionStrategy]] = None):
        self.strategies = strategies or DEFAULT_AUTHOR_STRATEGIES

    def extract(self, soup: BeautifulSoup, url: str) -> Optional[ExtractedAuthor]:
        """
        Extract the author of a page.

        Args:
            soup: Parsed article page
            url: URL the page was loaded from

        Returns:
            The author, or None if no strategy found a valid name
        """
        context = ExtractionContext(url=url, origin=_origin(url))
        author, strategy = run_strategies(self.strategies, soup, context)
        if author:
            logger.debug(f"Found author {author.name} on {url} via {strategy}")
        return author
