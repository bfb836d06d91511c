"""
Google search integration for outlet and author discovery.

Uses the Custom Search JSON API when credentials are configured and falls
back to the public HTML results page otherwise.
"""
import time
from typing import List, Dict, Any, Optional
import requests
from urllib.parse import urlparse, parse_qs, unquote
from bs4 import BeautifulSoup
from byline_scout.config import GOOGLE_API_KEY, GOOGLE_CSE_ID
from byline_scout.discovery.search.base import SearchProvider, SearchResult, SearchProviderError
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)


class GoogleSearchClient(SearchProvider):
    """Client for Google search with rate limiting."""

    name = "google"

    def __init__(self, api_key: Optional[str] = GOOGLE_API_KEY, cse_id: Optional[str] = GOOGLE_CSE_ID, **kwargs):
        """
        Initialize the Google search client.

        Args:
            api_key: Custom Search API key
            cse_id: Custom Search Engine ID
        """
        super().__init__(**kwargs)
        self.api_key = (api_key or "").strip()
        self.cse_id = (cse_id or "").strip()

        self.api_url = "https://www.googleapis.com/customsearch/v1"
        self.html_url = "https://www.google.com/search"
        self.results_per_page = 10  # Google CSE allows 10 results per page

        # Rate limiting variables
        self.queries_per_minute = 100  # Google's limit
        self.query_timestamps: List[float] = []

    @property
    def uses_api(self) -> bool:
        return bool(self.api_key and self.cse_id)

    def search(self, query: str, max_results: int = 10) -> List[SearchResult]:
        self._respect_rate_limit()
        query = query.strip()
        if self.uses_api:
            results = self._search_api(query, max_results)
        else:
            results = self._search_html(query, max_results)
        logger.info(f"Google returned {len(results)} results for: {query}")
        return results

    def _search_api(self, query: str, max_results: int) -> List[SearchResult]:
        params = {
            "key": self.api_key,
            "cx": self.cse_id,
            "q": query,
            "num": min(max_results, self.results_per_page),
        }
        try:
            response = requests.get(self.api_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise SearchProviderError(f"Google API request failed: {e}") from e

        if response.status_code != 200:
            raise SearchProviderError(f"Google API returned HTTP {response.status_code}")

        try:
            data: Dict[str, Any] = response.json()
        except ValueError as e:
            # Quota and consent pages come back as HTML with status 200
            raise SearchProviderError(f"Google API returned a non-JSON body: {e}") from e

        if "searchInformation" in data:
            search_info = data["searchInformation"]
            logger.debug(f"Search stats: Total results: {search_info.get('totalResults')}, "
                         f"Time: {search_info.get('searchTime')}s")

        return [
            SearchResult(url=item.get("link", ""), title=item.get("title", ""), snippet=item.get("snippet", ""), provider=self.name)
            for item in data.get("items", [])
            if item.get("link")
        ][:max_results]

    def _search_html(self, query: str, max_results: int) -> List[SearchResult]:
        try:
            response = requests.get(self.html_url, params={"q": query, "num": max_results, "hl": "en"},
                                    headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise SearchProviderError(f"Google request failed: {e}") from e

        if response.status_code != 200:
            raise SearchProviderError(f"Google returned HTTP {response.status_code}")
        return self.parse_results(response.text)[:max_results]

    def parse_results(self, html: str) -> List[SearchResult]:
        """
        Parse the HTML results page.

        Args:
            html: Results page HTML

        Returns:
            Results with /url?q= redirects unwrapped
        """
        soup = BeautifulSoup(html, "html.parser")
        results = []
        seen = set()
        links = soup.select("div.yuRUbf > a") or soup.select("a[href^='/url?']")
        for link in links:
            url = self._unwrap(link.get("href", ""))
            if not url or url in seen or "google." in urlparse(url).netloc:
                continue
            seen.add(url)
            title_el = link.find("h3")
            title = title_el.get_text(" ", strip=True) if title_el else link.get_text(" ", strip=True)
            results.append(SearchResult(url=url, title=title, provider=self.name))
        return results

    @staticmethod
    def _unwrap(href: str) -> str:
        if href.startswith("/url?"):
            target = parse_qs(urlparse(href).query).get("q")
            return unquote(target[0]) if target else ""
        return href if href.startswith("http") else ""

    def _respect_rate_limit(self) -> None:
        """
        Respect the Google rate limit of 100 queries per minute.
        This method will wait if needed to ensure we don't exceed the limit.
        """
        current_time = time.time()

        # Remove timestamps older than 1 minute
        one_minute_ago = current_time - 60
        self.query_timestamps = [t for t in self.query_timestamps if t > one_minute_ago]

        # Stay under 80 per minute to leave headroom
        if len(self.query_timestamps) >= 80:
            oldest_timestamp = min(self.query_timestamps)
            time_to_wait = 60 - (current_time - oldest_timestamp) + 5

            if time_to_wait > 0:
                logger.warning(f"Rate limit approaching ({len(self.query_timestamps)}/{self.queries_per_minute}), "
                               f"waiting {time_to_wait:.2f}s")
                time.sleep(time_to_wait)

                current_time = time.time()
                one_minute_ago = current_time - 60
                self.query_timestamps = [t for t in self.query_timestamps if t > one_minute_ago]

        self.query_timestamps.append(time.time())
