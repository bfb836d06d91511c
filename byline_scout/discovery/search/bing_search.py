"""
Bing HTML results search.
"""
from typing import List
import requests
from bs4 import BeautifulSoup
from byline_scout.discovery.search.base import SearchProvider, SearchResult, SearchProviderError
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)


class BingSearchClient(SearchProvider):
    """Scrapes the Bing web results list."""

    name = "bing"
    base_url = "https://www.bing.com/search"

    def search(self, query: str, max_results: int = 10) -> List[SearchResult]:
        try:
            response = requests.get(self.base_url, params={"q": query, "setlang": "en"}, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise SearchProviderError(f"Bing request failed: {e}") from e

        if response.status_code != 200:
            raise SearchProviderError(f"Bing returned HTTP {response.status_code}")

        results = self.parse_results(response.text)[:max_results]
        logger.info(f"Bing returned {len(results)} results for: {query}")
        return results

    def parse_results(self, html: str) -> List[SearchResult]:
        soup = BeautifulSoup(html, "html.parser")
        results = []
        for item in soup.select("li.b_algo"):
            link = item.select_one("h2 a") or item.select_one("a")
            if not link or not link.get("href", "").startswith("http"):
                continue
            snippet_el = item.select_one(".b_caption p")
            results.append(SearchResult(
                url=link["href"],
                title=link.get_text(" ", strip=True),
                snippet=snippet_el.get_text(" ", strip=True) if snippet_el else "",
                provider=self.name,
            ))
        return results
