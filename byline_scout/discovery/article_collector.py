"""
Article URL collection for an outlet website.

Strategies run in order and stop once the target count is reached:
syndication feeds, sitemaps, the homepage, conventional section pages and
finally a site-restricted web search.
"""
import re
import time
from typing import List, Optional, Callable, Set
from urllib.parse import urlparse
import feedparser
from bs4 import BeautifulSoup
from byline_scout.config import FEED_PATHS, SITEMAP_PATHS, SECTION_SLUGS, SECTION_PREFIXES
from byline_scout.discovery.crawler.url_patterns import (
    is_article_url, is_excluded_path, in_navigation, extract_publish_date, extract_section,
)
from byline_scout.discovery.crawler.web_crawler import Crawler, absolute_url
from byline_scout.discovery.search_engine import SearchEngine
from byline_scout.models.author import Article
from byline_scout.models.site import ResolvedSite
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

FEED_LINK_TYPES = ("application/rss+xml", "application/atom+xml")
FEED_HREF_RE = re.compile(r"rss|feed|atom", re.I)
MAX_FEEDS = 5
MAX_NESTED_SITEMAPS = 3


def title_from_url(url: str) -> str:
    """Readable title from the last meaningful path segment, for links with no anchor text."""
    segments = [s for s in urlparse(url).path.split("/") if s]
    for segment in reversed(segments):
        segment = re.sub(r"\.(html?|php|aspx?)$", "", segment)
        words = [w for w in re.split(r"[-_]+", segment) if w and not w.isdigit()]
        if len(words) >= 2:
            return " ".join(words).capitalize()
    return "Article"


class ArticleBucket:
    """Articles gathered in one collection call, deduplicated by exact URL."""

    def __init__(self, target_count: int):
        self.target_count = target_count
        self.articles: List[Article] = []
        self._seen: Set[str] = set()

    @property
    def full(self) -> bool:
        return len(self.articles) >= self.target_count

    def add(self, url: str, title: Optional[str] = None, publish_date: Optional[str] = None) -> bool:
        if self.full or not url or url in self._seen:
            return False
        self._seen.add(url)
        title = re.sub(r"\s+", " ", title or "").strip() or title_from_url(url)
        self.articles.append(Article(
            title=title,
            url=url,
            publish_date=publish_date or extract_publish_date(url),
            section=extract_section(url),
        ))
        return True


class ArticleCollector:
    """Gathers candidate article URLs for a site."""

    def __init__(self, crawler: Crawler, search_engine: Optional[SearchEngine] = None):
        """
        Initialize the collector.

        Args:
            crawler: HTTP backend
            search_engine: Used for the site-restricted search fallback
        """
        self.crawler = crawler
        self.search_engine = search_engine
        self.strategies = [
            ("feeds", self._collect_from_feeds),
            ("sitemaps", self._collect_from_sitemaps),
            ("homepage", self._collect_from_homepage),
            ("sections", self._collect_from_sections),
            ("search", self._collect_from_search),
        ]

    def collect(self, site: ResolvedSite, target_count: int,
                should_stop: Optional[Callable[[], bool]] = None) -> List[Article]:
        """
        Collect up to target_count article URLs from a site.

        Args:
            site: Resolved outlet website
            target_count: Number of articles wanted
            should_stop: Polled between strategies; collection ends early when it returns True

        Returns:
            Articles in discovery order, possibly fewer than requested
        """
        bucket = ArticleBucket(target_count)
        for name, strategy in self.strategies:
            if bucket.full or (should_stop and should_stop()):
                break
            before = len(bucket.articles)
            strategy(site, bucket)
            logger.info(f"Strategy {name} added {len(bucket.articles) - before} articles for {site.base_url}")

        logger.info(f"Collected {len(bucket.articles)} articles from {site.base_url}")
        return bucket.articles

    def discover_feeds(self, site: ResolvedSite) -> List[str]:
        """
        Find feed URLs advertised on the homepage, followed by conventional feed paths.

        Args:
            site: Resolved outlet website

        Returns:
            Candidate feed URLs, advertised ones first
        """
        feeds: List[str] = []
        soup = self.crawler.get_soup(site.base_url)
        if soup is not None:
            for link in soup.find_all("link", href=True):
                if (link.get("type") or "").lower() in FEED_LINK_TYPES:
                    url = absolute_url(site.base_url, link["href"])
                    if url and url not in feeds:
                        feeds.append(url)
            for anchor in soup.find_all("a", href=True):
                if FEED_HREF_RE.search(anchor["href"]):
                    url = absolute_url(site.base_url, anchor["href"])
                    if url and url not in feeds:
                        feeds.append(url)

        for path in FEED_PATHS:
            url = site.base_url.rstrip("/") + path
            if url not in feeds:
                feeds.append(url)
        return feeds

    def _collect_from_feeds(self, site: ResolvedSite, bucket: ArticleBucket) -> None:
        parsed_feeds = 0
        for feed_url in self.discover_feeds(site):
            if bucket.full or parsed_feeds >= MAX_FEEDS:
                break
            result = self.crawler.fetch(feed_url)
            if not result.ok:
                continue

            feed = feedparser.parse(result.html)
            if not feed.entries:
                continue
            parsed_feeds += 1

            for entry in feed.entries:
                link = entry.get("link") or entry.get("id")
                if not link or not str(link).startswith("http"):
                    continue
                bucket.add(link, entry.get("title"), self._entry_date(entry))
            logger.debug(f"Parsed {len(feed.entries)} entries from {feed_url}")

    @staticmethod
    def _entry_date(entry) -> Optional[str]:
        parsed = entry.get("published_parsed") or entry.get("updated_parsed")
        if not parsed:
            return None
        return time.strftime("%Y-%m-%d", parsed)

    def _collect_from_sitemaps(self, site: ResolvedSite, bucket: ArticleBucket) -> None:
        for path in SITEMAP_PATHS:
            if bucket.full:
                break
            self._read_sitemap(site.base_url.rstrip("/") + path, bucket, depth=0)

    def _read_sitemap(self, url: str, bucket: ArticleBucket, depth: int) -> None:
        result = self.crawler.fetch(url)
        if not result.ok:
            return

        soup = BeautifulSoup(result.html, "html.parser")
        nested = []
        for loc in soup.find_all("loc"):
            loc_url = loc.get_text(strip=True)
            if not loc_url.startswith("http"):
                continue
            if loc_url.lower().endswith(".xml") or ".xml?" in loc_url.lower():
                nested.append(loc_url)
                continue
            if is_excluded_path(urlparse(loc_url).path):
                continue
            if bucket.full:
                return
            bucket.add(loc_url)

        # Sitemap indexes list child sitemaps rather than pages
        if depth == 0:
            for child in nested[:MAX_NESTED_SITEMAPS]:
                if bucket.full:
                    return
                self._read_sitemap(child, bucket, depth=1)

    def _add_page_links(self, soup: BeautifulSoup, page_url: str, site: ResolvedSite,
                        bucket: ArticleBucket) -> None:
        for anchor in soup.find_all("a", href=True):
            if bucket.full:
                return
            if in_navigation(anchor):
                continue
            url = absolute_url(page_url, anchor["href"])
            if not url or not is_article_url(url, site.host):
                continue
            title = anchor.get_text(" ", strip=True) or anchor.get("title")
            bucket.add(url, title)

    def _collect_from_homepage(self, site: ResolvedSite, bucket: ArticleBucket) -> None:
        soup = self.crawler.get_soup(site.base_url)
        if soup is None:
            logger.warning(f"Homepage {site.base_url} could not be loaded")
            return
        self._add_page_links(soup, site.base_url, site, bucket)

    def _collect_from_sections(self, site: ResolvedSite, bucket: ArticleBucket) -> None:
        base = site.base_url.rstrip("/")
        for slug in SECTION_SLUGS:
            if bucket.full:
                break
            for prefix in SECTION_PREFIXES:
                url = base + prefix.format(slug=slug)
                soup = self.crawler.get_soup(url)
                if soup is None:
                    continue
                before = len(bucket.articles)
                self._add_page_links(soup, url, site, bucket)
                if len(bucket.articles) > before:
                    break

    def _collect_from_search(self, site: ResolvedSite, bucket: ArticleBucket) -> None:
        if self.search_engine is None:
            return
        results = self.search_engine.search(f"site:{site.bare_host} news article", max_results=10)
        for result in results:
            if is_article_url(result.url, site.host):
                bucket.add(result.url, result.title)
