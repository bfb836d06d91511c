"""
DuckDuckGo HTML endpoint search. Needs no API key.
"""
from typing import List
import requests
from urllib.parse import urlparse, parse_qs, unquote
from bs4 import BeautifulSoup
from byline_scout.discovery.search.base import SearchProvider, SearchResult, SearchProviderError
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)


class DuckDuckGoSearchClient(SearchProvider):
    """Scrapes the HTML-only DuckDuckGo results page."""

    name = "duckduckgo"
    base_url = "https://html.duckduckgo.com/html/"

    def search(self, query: str, max_results: int = 10) -> List[SearchResult]:
        try:
            response = requests.get(self.base_url, params={"q": query}, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise SearchProviderError(f"DuckDuckGo request failed: {e}") from e

        if response.status_code != 200:
            raise SearchProviderError(f"DuckDuckGo returned HTTP {response.status_code}")

        results = self.parse_results(response.text)[:max_results]
        logger.info(f"DuckDuckGo returned {len(results)} results for: {query}")
        return results

    def parse_results(self, html: str) -> List[SearchResult]:
        """
        Parse a results page.

        Args:
            html: Results page HTML

        Returns:
            Results with redirect links unwrapped
        """
        soup = BeautifulSoup(html, "html.parser")
        results = []
        for link in soup.select("a.result__a"):
            url = self._unwrap(link.get("href", ""))
            if not url:
                continue
            snippet_tag = link.find_parent(class_="result")
            snippet = ""
            if snippet_tag:
                snippet_el = snippet_tag.select_one(".result__snippet")
                snippet = snippet_el.get_text(" ", strip=True) if snippet_el else ""
            results.append(SearchResult(url=url, title=link.get_text(" ", strip=True), snippet=snippet, provider=self.name))
        return results

    @staticmethod
    def _unwrap(href: str) -> str:
        """Result links go through /l/?uddg=<target>; return the target."""
        if not href:
            return ""
        if href.startswith("//"):
            href = "https:" + href
        parsed = urlparse(href)
        if "duckduckgo.com" in parsed.netloc and parsed.path.startswith("/l/"):
            target = parse_qs(parsed.query).get("uddg")
            return unquote(target[0]) if target else ""
        if parsed.scheme in ("http", "https"):
            return href
        return ""
