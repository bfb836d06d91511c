"""
Profile extraction for discovered author candidates.

Every candidate variant resolves to a uniform AuthorProfile. A profile page
that cannot be loaded or relocated degrades to an article-based profile
built from the candidate's seed articles, or to a stub with no articles.
Extraction never raises to the caller.
"""
import re
from typing import List, Optional, Set
from urllib.parse import quote, urlparse
from bs4 import BeautifulSoup
from byline_scout.config import (
    DEFAULT_ROLE, MAX_PROFILE_ARTICLES, MIN_CONTAINER_ARTICLES,
    MIN_ARTICLE_TITLE_LENGTH, MAX_ARTICLE_TITLE_LENGTH,
)
from byline_scout.discovery.crawler.url_patterns import is_article_url, extract_publish_date, extract_section
from byline_scout.discovery.crawler.web_crawler import Crawler, absolute_url
from byline_scout.discovery.directories.directory_scraper import AuthorDirectoryScraper
from byline_scout.discovery.search_engine import SearchEngine
from byline_scout.exceptions import ExtractionDegradation
from byline_scout.extraction.strategies import (
    ExtractionContext, ExtractionStrategy, FunctionStrategy, SelectorTextStrategy, run_strategies,
)
from byline_scout.models.author import Article, AuthorCandidate, AuthorProfile, SocialLinks
from byline_scout.models.site import ResolvedSite
from byline_scout.validation.name_validator import GENERIC_BIO_RE, infer_role
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

BIO_SELECTORS = [
    '.author-bio', '.bio', '.author-description', '[itemprop="description"]',
    '.description', '[class*="bio"]',
]
ROLE_SELECTORS = [
    '[itemprop="jobTitle"]', '.designation', '.role', '.position', '.author-title', '[class*="role"]',
]
AUTHOR_BLOCK_SELECTORS = [
    '.author-social', '.author-profile', '.author-info', '.author', '.profile',
    '[class*="author"]', '[class*="profile"]',
]
PICTURE_SELECTORS = [
    '.author-image img', '.author-photo img', '.author img', '.profile img',
    '[class*="author"] img', 'img.avatar', '[itemprop="image"]',
]
ARTICLE_CONTAINER_SELECTORS = [
    'article', '.article', '.story', '.post', '[class*="article-item"]', '[class*="story-item"]',
    '[class*="post-item"]', '[class*="news-item"]', '[class*="content-item"]',
    '.news-card', '.story-card', '.article-card',
]
HEADING_SELECTOR = 'h1, h2, h3, h4, h5, [class*="title"], [class*="headline"]'
SITE_SEARCH_PATHS = ["/search?q={query}", "/?s={query}", "/search/{query}"]
MAX_SITE_SEARCH_ARTICLES = 20

EMAIL_RE = re.compile(r"([a-zA-Z0-9._+-]+@[a-zA-Z0-9._-]+\.[a-zA-Z]{2,})")
MAX_EMAIL_LENGTH = 50
TITLE_NOISE_PREFIX_RE = re.compile(r"^(read more|continue reading|continue|view|click)[\s:]+", re.I)
NAV_TITLE_RE = re.compile(r"^(home|menu|search|login|subscribe|share|follow|next|previous|back|close)\b", re.I)
SHARE_LINK_RE = re.compile(r"share|intent|sharer", re.I)

SOCIAL_HOSTS = [
    ("twitter", ("twitter.com", "x.com")),
    ("linkedin", ("linkedin.com",)),
    ("facebook", ("facebook.com",)),
    ("instagram", ("instagram.com",)),
]

_NON_CONTENT_REGIONS = {"nav", "header", "footer", "aside"}


def _in_non_content_region(tag) -> bool:
    for parent in tag.parents:
        if parent.name in _NON_CONTENT_REGIONS or parent.get("role") == "navigation":
            return True
    return False


def clean_title(text: Optional[str]) -> Optional[str]:
    """
    Normalize an article title and reject navigation labels.

    Args:
        text: Raw heading or anchor text

    Returns:
        Title truncated to the maximum length, or None if it is not a title
    """
    if not text:
        return None
    title = TITLE_NOISE_PREFIX_RE.sub("", re.sub(r"\s+", " ", text).strip())
    if len(title) < MIN_ARTICLE_TITLE_LENGTH or len(title) >= 300:
        return None
    if NAV_TITLE_RE.match(title):
        return None
    return title[:MAX_ARTICLE_TITLE_LENGTH]


def _make_article(url: str, title: str) -> Article:
    return Article(title=title, url=url, publish_date=extract_publish_date(url), section=extract_section(url))


def _email(soup: BeautifulSoup, context: ExtractionContext) -> Optional[str]:
    candidates = []
    for anchor in soup.select('a[href^="mailto:"]'):
        candidates.append(anchor["href"][len("mailto:"):].split("?")[0].strip())
    body = soup.body or soup
    candidates.extend(EMAIL_RE.findall(body.get_text(" ", strip=True)))
    for email in candidates:
        if email and "@example." not in email and len(email) < MAX_EMAIL_LENGTH and EMAIL_RE.fullmatch(email):
            return email
    return None


def _social_links(soup: BeautifulSoup, context: ExtractionContext) -> Optional[SocialLinks]:
    links = SocialLinks()
    for selector in AUTHOR_BLOCK_SELECTORS:
        for block in soup.select(selector):
            if _in_non_content_region(block):
                continue
            for anchor in block.find_all("a", href=True):
                href = anchor["href"].strip()
                if SHARE_LINK_RE.search(href):
                    continue
                host = urlparse(href).netloc.lower()
                host = host[4:] if host.startswith("www.") else host
                for field_name, hosts in SOCIAL_HOSTS:
                    if host in hosts and not getattr(links, field_name):
                        setattr(links, field_name, href)
        if links.present_count():
            return links
    return None


def _profile_picture(soup: BeautifulSoup, context: ExtractionContext) -> Optional[str]:
    for selector in PICTURE_SELECTORS:
        for element in soup.select(selector):
            src = element.get("src") or element.get("data-src") or element.get("content")
            url = absolute_url(context.url, src)
            if url:
                return url
    return None


def _container_articles(soup: BeautifulSoup, context: ExtractionContext) -> List[Article]:
    host = urlparse(context.url).netloc
    articles = []
    for selector in ARTICLE_CONTAINER_SELECTORS:
        for container in soup.select(selector):
            link = container.find("a", href=True)
            heading = container.select_one(HEADING_SELECTOR)
            if link is None or heading is None:
                continue
            url = absolute_url(context.url, link["href"])
            if not url or not is_article_url(url, host):
                continue
            title = clean_title(heading.get_text(" ", strip=True)) or clean_title(link.get_text(" ", strip=True))
            if title:
                articles.append(_make_article(url, title))
    return articles


def _anchor_articles(soup: BeautifulSoup, context: ExtractionContext) -> List[Article]:
    host = urlparse(context.url).netloc
    articles = []
    for anchor in soup.find_all("a", href=True):
        if _in_non_content_region(anchor):
            continue
        url = absolute_url(context.url, anchor["href"])
        if not url or not is_article_url(url, host):
            continue
        title = clean_title(anchor.get_text(" ", strip=True) or anchor.get("title"))
        if not title:
            parent = anchor.find_parent(["article", "li", "div"])
            heading = parent.select_one(HEADING_SELECTOR) if parent else None
            title = clean_title(heading.get_text(" ", strip=True)) if heading else None
        if title:
            articles.append(_make_article(url, title))
    return articles


BIO_STRATEGY = SelectorTextStrategy("bio", BIO_SELECTORS, min_length=20, max_length=1000,
                                    reject=GENERIC_BIO_RE.pattern)
ROLE_STRATEGY = SelectorTextStrategy("role", ROLE_SELECTORS, min_length=2, max_length=50)
EMAIL_STRATEGY = FunctionStrategy("email", _email)
SOCIAL_STRATEGY = FunctionStrategy("social_links", _social_links)
PICTURE_STRATEGY = FunctionStrategy("profile_picture", _profile_picture)
ARTICLE_PHASES: List[ExtractionStrategy] = [
    FunctionStrategy("article_containers", _container_articles),
    FunctionStrategy("article_anchors", _anchor_articles),
]


class ArticleList:
    """Profile articles deduplicated by URL, capped at the profile maximum."""

    def __init__(self, limit: int = MAX_PROFILE_ARTICLES):
        self.limit = limit
        self.articles: List[Article] = []
        self._seen: Set[str] = set()

    def __len__(self):
        return len(self.articles)

    def extend(self, articles: List[Article]) -> int:
        added = 0
        for article in articles:
            if len(self.articles) >= self.limit:
                break
            if article.url in self._seen:
                continue
            self._seen.add(article.url)
            self.articles.append(article)
            added += 1
        return added


class ProfileExtractor:
    """Resolves author candidates to profiles."""

    def __init__(self, crawler: Crawler, search_engine: Optional[SearchEngine] = None,
                 directory_scraper: Optional[AuthorDirectoryScraper] = None):
        """
        Initialize the profile extractor.

        Args:
            crawler: HTTP backend
            search_engine: Used for the name-qualified article search fallback
            directory_scraper: Used to relocate authors whose profile URL fails
        """
        self.crawler = crawler
        self.search_engine = search_engine
        self.directory_scraper = directory_scraper or AuthorDirectoryScraper(crawler)

    def extract(self, candidate: AuthorCandidate, site: ResolvedSite, outlet: Optional[str] = None) -> AuthorProfile:
        """
        Extract a profile for one candidate.

        Args:
            candidate: Author candidate of any variant
            site: Resolved outlet website
            outlet: Outlet display name stored on the profile

        Returns:
            AuthorProfile; article-based or stub when the profile page is unusable
        """
        outlet = outlet or site.bare_host
        try:
            return self._extract_from_profile_page(candidate, site, outlet)
        except ExtractionDegradation as e:
            logger.warning(str(e))
            return self.fallback_profile(candidate, outlet)
        except Exception as e:
            logger.error(f"Unexpected error extracting profile for {candidate.name}: {e}", exc_info=True)
            return self.stub_profile(candidate, outlet)

    def _load_profile(self, candidate: AuthorCandidate, site: ResolvedSite):
        result = self.crawler.fetch(candidate.profile_url)
        if result.ok:
            return result

        # Relocate through an exact-name link on the homepage
        homepage = self.crawler.get_soup(site.base_url)
        if homepage is not None:
            match = self.directory_scraper.find_by_name(homepage, site.base_url, candidate.name)
            if match and match.profile_url != candidate.profile_url:
                logger.info(f"Relocated {candidate.name} to {match.profile_url}")
                result = self.crawler.fetch(match.profile_url)
                if result.ok:
                    return result

        raise ExtractionDegradation(candidate.name, candidate.profile_url, f"status {result.status}")

    def _extract_from_profile_page(self, candidate: AuthorCandidate, site: ResolvedSite, outlet: str) -> AuthorProfile:
        result = self._load_profile(candidate, site)
        profile_url = result.final_url or result.url
        soup = BeautifulSoup(result.html, "html.parser")
        context = ExtractionContext(url=profile_url, origin=site.base_url, name=candidate.name)

        bio, _ = run_strategies([BIO_STRATEGY], soup, context)
        role, _ = run_strategies([ROLE_STRATEGY], soup, context)
        email, _ = run_strategies([EMAIL_STRATEGY], soup, context)
        social_links, _ = run_strategies([SOCIAL_STRATEGY], soup, context)
        picture, _ = run_strategies([PICTURE_STRATEGY], soup, context)

        articles = ArticleList()
        for phase in ARTICLE_PHASES:
            found, _ = run_strategies([phase], soup, context)
            articles.extend(found or [])
            if len(articles) >= MIN_CONTAINER_ARTICLES:
                break
        logger.info(f"Found {len(articles)} articles on profile page for {candidate.name}")

        articles.extend(candidate.seed_articles)
        if not len(articles):
            self._search_articles(candidate.name, site, articles)

        return AuthorProfile(
            name=candidate.name,
            profile_url=profile_url,
            source=candidate.source,
            outlet=outlet,
            bio=bio,
            role=role or infer_role(candidate.name, DEFAULT_ROLE),
            email=email,
            profile_picture=picture,
            social_links=social_links or SocialLinks(),
            articles=articles.articles,
        )

    def _search_articles(self, name: str, site: ResolvedSite, articles: ArticleList) -> None:
        """Fill an empty article list from the outlet's own search, then a site-restricted web search."""
        base = site.base_url.rstrip("/")
        for path in SITE_SEARCH_PATHS:
            url = base + path.format(query=quote(name))
            soup = self.crawler.get_soup(url)
            if soup is None:
                continue
            found, _ = run_strategies([ARTICLE_PHASES[-1]], soup, ExtractionContext(url=url, origin=base, name=name))
            articles.extend((found or [])[:MAX_SITE_SEARCH_ARTICLES])
            if len(articles):
                logger.info(f"Found {len(articles)} articles for {name} via site search {url}")
                return

        if self.search_engine is None:
            return
        results = self.search_engine.search(f'site:{site.bare_host} "{name}"', max_results=10)
        found = []
        for result in results:
            if not is_article_url(result.url, site.host):
                continue
            title = clean_title(result.title)
            if title:
                found.append(_make_article(result.url, title))
        articles.extend(found)
        logger.info(f"Found {len(found)} articles for {name} via web search")

    def fallback_profile(self, candidate: AuthorCandidate, outlet: str) -> AuthorProfile:
        """
        Profile for a candidate whose profile page is unusable.

        Args:
            candidate: Author candidate
            outlet: Outlet display name

        Returns:
            Article-based profile when the candidate carries seed articles, otherwise a stub
        """
        seeds = candidate.seed_articles
        if not seeds:
            return self.stub_profile(candidate, outlet)

        articles = ArticleList()
        articles.extend(seeds)
        logger.info(f"Built article-based profile for {candidate.name} from {len(articles)} articles")
        return AuthorProfile(
            name=candidate.name,
            profile_url=candidate.profile_url,
            source=candidate.source,
            outlet=outlet,
            role=infer_role(candidate.name, DEFAULT_ROLE),
            articles=articles.articles,
            article_based=True,
        )

    @staticmethod
    def stub_profile(candidate: AuthorCandidate, outlet: str) -> AuthorProfile:
        """Minimal profile with no articles and the default role."""
        return AuthorProfile(
            name=candidate.name,
            profile_url=candidate.profile_url,
            source=candidate.source,
            outlet=outlet,
            role=infer_role(candidate.name, DEFAULT_ROLE),
        )
