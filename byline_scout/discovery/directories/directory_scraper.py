"""
Author directory scraper for journalist discovery.
"""
from typing import List, Optional
from bs4 import BeautifulSoup
from byline_scout.config import DIRECTORY_PATHS, DIRECTORY_VOCABULARY, DIRECTORY_MIN_PROFILE_LINKS
from byline_scout.discovery.crawler.url_patterns import is_profile_url
from byline_scout.discovery.crawler.web_crawler import Crawler, absolute_url
from byline_scout.models.author import DirectoryCandidate
from byline_scout.models.site import ResolvedSite
from byline_scout.validation.name_validator import LINK_NOISE_RE, is_valid_name, clean_byline, normalize_name
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

DIRECTORY_LINK_SELECTOR = 'a[href*="/author/"], a[href*="/profile/"], a[href*="/journalist/"]'


class AuthorDirectoryScraper:
    """Finds an outlet's author/team listing page and reads its profile links."""

    def __init__(self, crawler: Crawler):
        """
        Initialize the directory scraper.

        Args:
            crawler: HTTP backend
        """
        self.crawler = crawler

    def find_directory(self, site: ResolvedSite) -> Optional[str]:
        """
        Probe conventional directory paths.

        Args:
            site: Resolved outlet website

        Returns:
            URL of the first page that looks like an author directory, or None
        """
        base = site.base_url.rstrip("/")
        for path in DIRECTORY_PATHS:
            url = base + path
            soup = self.crawler.get_soup(url)
            if soup is None:
                continue
            if self.is_directory_page(soup):
                logger.info(f"Found author directory at {url}")
                return url
        logger.info(f"No author directory found on {site.base_url}")
        return None

    @staticmethod
    def is_directory_page(soup: BeautifulSoup) -> bool:
        """
        A directory page mentions authors or journalists and links to more than a handful of profiles.

        Args:
            soup: Parsed page

        Returns:
            True if the page qualifies as a directory
        """
        body = soup.body or soup
        text = body.get_text(" ", strip=True).lower()
        if not any(word in text for word in DIRECTORY_VOCABULARY):
            return False
        return len(soup.select(DIRECTORY_LINK_SELECTOR)) > DIRECTORY_MIN_PROFILE_LINKS

    def extract_candidates(self, soup: BeautifulSoup, page_url: str, limit: Optional[int] = None) -> List[DirectoryCandidate]:
        """
        Read author candidates from profile links on a page.

        Args:
            soup: Parsed page
            page_url: URL the page was loaded from
            limit: Maximum number of candidates

        Returns:
            Candidates deduplicated by normalized name
        """
        candidates: List[DirectoryCandidate] = []
        seen = set()
        for anchor in soup.find_all("a", href=True):
            url = absolute_url(page_url, anchor["href"])
            if not url or not is_profile_url(url):
                continue
            text = anchor.get_text(" ", strip=True) or anchor.get("title", "")
            if not text or LINK_NOISE_RE.match(text):
                continue
            name = clean_byline(text)
            if not is_valid_name(name):
                continue
            key = normalize_name(name)
            if key in seen:
                continue
            seen.add(key)
            candidates.append(DirectoryCandidate(name=name, profile_url=url))
            if limit and len(candidates) >= limit:
                break
        return candidates

    def scrape(self, site: ResolvedSite, limit: Optional[int] = None) -> List[DirectoryCandidate]:
        """
        Locate the directory page and return its candidates.

        Args:
            site: Resolved outlet website
            limit: Maximum number of candidates

        Returns:
            Directory candidates, empty if the site has no directory
        """
        url = self.find_directory(site)
        if not url:
            return []
        soup = self.crawler.get_soup(url)
        if soup is None:
            return []
        candidates = self.extract_candidates(soup, url, limit)
        logger.info(f"Found {len(candidates)} author profiles in directory {url}")
        return candidates

    def find_by_name(self, soup: BeautifulSoup, page_url: str, name: str) -> Optional[DirectoryCandidate]:
        """
        Find the profile link for one author by exact normalized name.

        Args:
            soup: Parsed page to search
            page_url: URL the page was loaded from
            name: Author name to match

        Returns:
            Matching candidate, or None
        """
        target = normalize_name(name)
        for candidate in self.extract_candidates(soup, page_url):
            if normalize_name(candidate.name) == target:
                return candidate
        return None
