"""
Common interface for web search backends.
"""
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Dict
from byline_scout.config import USER_AGENTS, ACCEPT_LANGUAGE, REQUEST_TIMEOUT


@dataclass
class SearchResult:
    url: str
    title: str = ""
    snippet: str = ""
    provider: str = ""


class SearchProviderError(Exception):
    """A search backend could not be reached or refused the request."""


class SearchProvider(ABC):
    """A web search backend returning ranked result links."""

    name = "base"

    def __init__(self, timeout: int = REQUEST_TIMEOUT):
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "User-Agent": random.choice(USER_AGENTS),
            "Accept": "text/html,application/xhtml+xml",
            "Accept-Language": ACCEPT_LANGUAGE,
        }

    @abstractmethod
    def search(self, query: str, max_results: int = 10) -> List[SearchResult]:
        """
        Run a query.

        Args:
            query: Search query
            max_results: Maximum number of results to return

        Returns:
            Ranked results, possibly empty

        Raises:
            SearchProviderError: when the backend fails
        """
