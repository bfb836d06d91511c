"""
HTTP fetching and HTML parsing backend for outlet websites.
"""
import json
import random
import threading
from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Callable
import requests
from urllib.parse import urlparse, urljoin, urldefrag
from bs4 import BeautifulSoup
from byline_scout.config import USER_AGENTS, ACCEPT_LANGUAGE, REQUEST_TIMEOUT, PROBE_TIMEOUT
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class FetchResult:
    """Outcome of one HTTP fetch. Status 0 means the request never completed."""
    url: str
    status: int
    html: str = ""
    final_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == 200 and bool(self.html)


class Crawler:
    """
    Thin HTTP+HTML backend used by every discovery stage.

    All network failures are soft: they come back as a FetchResult with a
    non-200 status and the caller moves on to its next strategy.
    """

    def __init__(self, timeout: int = REQUEST_TIMEOUT, use_cache: bool = True):
        """
        Initialize the crawler.

        Args:
            timeout: Default per-request timeout in seconds
            use_cache: Keep successful page bodies in memory for the crawler's lifetime
        """
        self.timeout = timeout
        self.use_cache = use_cache
        self.content_cache: Dict[str, FetchResult] = {}
        self._cache_lock = threading.Lock()
        self.session = requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "User-Agent": random.choice(USER_AGENTS),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": ACCEPT_LANGUAGE,
        }

    def fetch(self, url: str, timeout: Optional[int] = None) -> FetchResult:
        """
        Fetch a URL.

        Args:
            url: Absolute URL to fetch
            timeout: Per-call timeout in seconds, defaults to the crawler timeout

        Returns:
            FetchResult with status and body
        """
        if self.use_cache:
            with self._cache_lock:
                cached = self.content_cache.get(url)
            if cached is not None:
                logger.debug(f"Using cached content for {url}")
                return cached

        try:
            response = self.session.get(url, headers=self._headers(), timeout=timeout or self.timeout, allow_redirects=True)
            result = FetchResult(
                url=url,
                status=response.status_code,
                html=response.text if response.status_code == 200 else "",
                final_url=response.url,
            )
        except requests.RequestException as e:
            logger.warning(f"Error fetching {url}: {e}")
            return FetchResult(url=url, status=0, error=str(e))

        if result.status != 200:
            logger.debug(f"Got HTTP {result.status} for {url}")
        elif self.use_cache:
            with self._cache_lock:
                self.content_cache[url] = result
        return result

    def probe(self, url: str, timeout: Optional[int] = None) -> FetchResult:
        """Lightweight fetch with the shorter probe timeout and no caching of failures."""
        return self.fetch(url, timeout=timeout or PROBE_TIMEOUT)

    def head_ok(self, url: str, timeout: Optional[int] = None) -> bool:
        """
        Check that a URL answers with a non-error status.

        Args:
            url: URL to check
            timeout: Timeout in seconds

        Returns:
            True if the server answered below 400
        """
        try:
            response = self.session.head(url, headers=self._headers(), timeout=timeout or PROBE_TIMEOUT, allow_redirects=True)
            if response.status_code == 405:
                return self.probe(url, timeout).status == 200
            return response.status_code < 400
        except requests.RequestException as e:
            logger.debug(f"HEAD check failed for {url}: {e}")
            return False

    def get_soup(self, url: str, timeout: Optional[int] = None) -> Optional[BeautifulSoup]:
        """
        Fetch a page and parse it.

        Args:
            url: URL to fetch
            timeout: Timeout in seconds

        Returns:
            Parsed document, or None if the fetch failed
        """
        result = self.fetch(url, timeout=timeout)
        if not result.ok:
            return None
        return BeautifulSoup(result.html, "html.parser")

    def evaluate(self, result: FetchResult, extractor: Callable[[BeautifulSoup], Any]) -> Any:
        """
        Apply a DOM extractor to a fetched document.

        Args:
            result: A successful fetch
            extractor: Function taking the parsed document

        Returns:
            Whatever the extractor returns, or None for a failed fetch
        """
        if not result.ok:
            return None
        return extractor(BeautifulSoup(result.html, "html.parser"))


def absolute_url(base_url: str, href: Optional[str]) -> Optional[str]:
    """Resolve an href against the page URL, returning None for non-navigable links."""
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith(("#", "javascript:", "mailto:", "tel:")):
        return None
    resolved, _ = urldefrag(urljoin(base_url, href))
    if urlparse(resolved).scheme not in ("http", "https"):
        return None
    return resolved


def extract_json_ld(soup: BeautifulSoup) -> List[Dict[str, Any]]:
    """
    Collect JSON-LD objects from a page.

    Handles single objects, top-level lists and @graph containers.

    Args:
        soup: BeautifulSoup object

    Returns:
        Flat list of JSON-LD dictionaries
    """
    items: List[Dict[str, Any]] = []
    for script in soup.find_all("script", {"type": "application/ld+json"}):
        raw = script.string or script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            data = json.loads(raw)
        except ValueError:
            logger.debug("Skipping malformed JSON-LD block")
            continue

        stack = data if isinstance(data, list) else [data]
        for item in stack:
            if not isinstance(item, dict):
                continue
            items.append(item)
            graph = item.get("@graph")
            if isinstance(graph, list):
                items.extend(g for g in graph if isinstance(g, dict))
    return items
