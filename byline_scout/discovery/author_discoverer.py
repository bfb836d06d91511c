"""
Author discovery for an outlet website.

Directory pages are tried first. When they do not fill the quota, collected
articles are fetched one at a time and their bylines extracted, until a
buffer above the quota is found or the processing cap is reached. The
buffer leaves room for candidates that fail later.
"""
import math
import time
from collections import OrderedDict
from typing import List, Optional, Callable
from byline_scout.config import ARTICLE_PROCESS_CAP, AUTHOR_BUFFER_FACTOR, ARTICLE_FETCH_DELAY
from byline_scout.discovery.article_collector import ArticleCollector
from byline_scout.discovery.author_extractor import ArticleAuthorExtractor, constructed_profile_url
from byline_scout.discovery.crawler.url_patterns import is_article_url, is_profile_url
from byline_scout.discovery.crawler.web_crawler import Crawler
from byline_scout.discovery.directories.directory_scraper import AuthorDirectoryScraper
from byline_scout.discovery.search_engine import SearchEngine
from byline_scout.exceptions import JobCancelled
from byline_scout.models.author import (
    Article, AuthorCandidate, ArticleDerivedCandidate, CandidateSource, SearchDerivedCandidate,
)
from byline_scout.models.site import ResolvedSite
from byline_scout.validation.name_validator import normalize_name, is_valid_profile_url
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

MIN_PAGE_TITLE_LENGTH = 15


def _page_title(soup) -> Optional[str]:
    og_title = soup.find("meta", attrs={"property": "og:title"})
    if og_title and og_title.get("content"):
        return og_title["content"].strip()
    heading = soup.find("h1")
    if heading:
        return heading.get_text(" ", strip=True)
    return None


def rank_candidates(candidates: List[AuthorCandidate]) -> List[AuthorCandidate]:
    """
    Order candidates for trimming to quota.

    Directory candidates first, then candidates with a plausible profile URL,
    then the rest. Discovery order is kept within each group.
    """
    def rank(candidate: AuthorCandidate) -> int:
        if candidate.source == CandidateSource.DIRECTORY:
            return 0
        if candidate.source != CandidateSource.CONSTRUCTED and is_valid_profile_url(candidate.profile_url, candidate.name):
            return 1
        if is_valid_profile_url(candidate.profile_url, candidate.name):
            return 2
        return 3
    return sorted(candidates, key=rank)


class AuthorDiscoverer:
    """Turns an outlet website into a deduplicated list of author candidates."""

    def __init__(self, crawler: Crawler, collector: ArticleCollector,
                 directory_scraper: Optional[AuthorDirectoryScraper] = None,
                 extractor: Optional[ArticleAuthorExtractor] = None,
                 search_engine: Optional[SearchEngine] = None,
                 process_cap: int = ARTICLE_PROCESS_CAP,
                 buffer_factor: float = AUTHOR_BUFFER_FACTOR,
                 fetch_delay: float = ARTICLE_FETCH_DELAY):
        """
        Initialize the discoverer.

        Args:
            crawler: HTTP backend
            collector: Article collector used for byline discovery
            directory_scraper: Directory page scraper
            extractor: Per-article author extractor
            search_engine: Used to locate a single named author
            process_cap: Maximum number of articles fetched per discovery
            buffer_factor: Stop article processing at quota times this factor
            fetch_delay: Seconds to wait between article fetches
        """
        self.crawler = crawler
        self.collector = collector
        self.directory_scraper = directory_scraper or AuthorDirectoryScraper(crawler)
        self.extractor = extractor or ArticleAuthorExtractor()
        self.search_engine = search_engine
        self.process_cap = process_cap
        self.buffer_factor = buffer_factor
        self.fetch_delay = fetch_delay

    def discover(self, site: ResolvedSite, outlet_name: str, quota: int,
                 should_stop: Optional[Callable[[], bool]] = None) -> List[AuthorCandidate]:
        """
        Discover up to quota author candidates.

        Args:
            site: Resolved outlet website
            outlet_name: Outlet display name, for logging
            quota: Maximum number of candidates to return
            should_stop: Polled between article fetches

        Returns:
            Candidates, at most quota, deduplicated by normalized name

        Raises:
            JobCancelled: when should_stop returns True mid-discovery
        """
        if quota <= 0:
            return []

        found: "OrderedDict[str, AuthorCandidate]" = OrderedDict()
        logger.info(f"Discovering up to {quota} authors for '{outlet_name}' at {site.base_url}")

        for candidate in self.directory_scraper.scrape(site, limit=quota):
            found.setdefault(normalize_name(candidate.name), candidate)
        logger.info(f"{len(found)} candidates after directory strategy")

        if len(found) < quota:
            self._discover_from_articles(site, quota, found, should_stop)
            logger.info(f"{len(found)} candidates after article strategy")

        ranked = rank_candidates(list(found.values()))
        return ranked[:quota]

    def _discover_from_articles(self, site: ResolvedSite, quota: int,
                                found: "OrderedDict[str, AuthorCandidate]",
                                should_stop: Optional[Callable[[], bool]]) -> None:
        buffer_target = math.ceil(quota * self.buffer_factor)
        articles = self.collector.collect(site, self.process_cap, should_stop=should_stop)

        for index, article in enumerate(articles[:self.process_cap]):
            if should_stop and should_stop():
                raise JobCancelled()
            if len(found) >= buffer_target:
                logger.info(f"Found {len(found)} authors, stopping article processing early")
                break

            soup = self.crawler.get_soup(article.url)
            if soup is None:
                continue

            page_title = _page_title(soup)
            if page_title and len(page_title) >= MIN_PAGE_TITLE_LENGTH:
                article = Article(title=page_title, url=article.url,
                                  publish_date=article.publish_date, section=article.section)

            author = self.extractor.extract(soup, article.url)
            if author is None:
                continue

            key = normalize_name(author.name)
            existing = found.get(key)
            if existing is None:
                found[key] = ArticleDerivedCandidate(
                    name=author.name, profile_url=author.profile_url,
                    source=author.source, found_articles=[article],
                )
            elif isinstance(existing, ArticleDerivedCandidate):
                existing.found_articles.append(article)

            if (index + 1) % 25 == 0:
                logger.info(f"Processed {index + 1} articles, found {len(found)} unique authors")
            if self.fetch_delay:
                time.sleep(self.fetch_delay)

    def find_author(self, site: ResolvedSite, author_name: str) -> Optional[AuthorCandidate]:
        """
        Locate one named author on the site.

        Tries exact-name profile links on the directory page and homepage,
        then the conventional profile URL, then a site-restricted search.

        Args:
            site: Resolved outlet website
            author_name: Name of the author to find

        Returns:
            Candidate for the author, or None if nothing points to them
        """
        directory_url = self.directory_scraper.find_directory(site)
        for page_url in filter(None, [directory_url, site.base_url]):
            soup = self.crawler.get_soup(page_url)
            if soup is None:
                continue
            match = self.directory_scraper.find_by_name(soup, page_url, author_name)
            if match:
                logger.info(f"Found {author_name} linked from {page_url}")
                return match

        constructed = constructed_profile_url(site.base_url, author_name)
        if self.crawler.probe(constructed).ok:
            logger.info(f"Found {author_name} at constructed profile URL {constructed}")
            return AuthorCandidate(name=author_name, profile_url=constructed, source=CandidateSource.CONSTRUCTED)

        if self.search_engine is None:
            return None

        results = self.search_engine.search(f'site:{site.bare_host} "{author_name}"', max_results=10)
        profile_url = None
        seeds: List[Article] = []
        seen = set()
        for result in results:
            if profile_url is None and is_profile_url(result.url) and is_valid_profile_url(result.url, author_name):
                profile_url = result.url
            elif is_article_url(result.url, site.host) and result.url not in seen:
                seen.add(result.url)
                seeds.append(Article(title=result.title or "Article", url=result.url))

        if profile_url is None and not seeds:
            logger.info(f"No trace of {author_name} found on {site.base_url}")
            return None

        return SearchDerivedCandidate(
            name=author_name,
            profile_url=profile_url or constructed,
            found_articles=seeds,
        )
