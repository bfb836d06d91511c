"""
SearchEngine wrapper for the Byline Scout discovery pipeline.

This module provides a unified interface over the configured search backends.
The provider order comes from configuration; each provider has its own
circuit breaker and the total number of calls per resolution is capped.
"""
import threading
from typing import List, Dict, Optional, Iterator
from byline_scout.config import (
    SEARCH_PROVIDERS, SEARCH_FAILURE_THRESHOLD, SEARCH_RESULTS_PER_QUERY,
    MAX_SEARCH_CALLS_PER_RESOLUTION,
)
from byline_scout.discovery.search.base import SearchProvider, SearchResult, SearchProviderError
from byline_scout.discovery.search.bing_search import BingSearchClient
from byline_scout.discovery.search.duckduckgo_search import DuckDuckGoSearchClient
from byline_scout.discovery.search.google_search import GoogleSearchClient
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

PROVIDER_REGISTRY = {
    "duckduckgo": DuckDuckGoSearchClient,
    "bing": BingSearchClient,
    "google": GoogleSearchClient,
}


class SearchBudget:
    """Caps the number of external search calls made for one resolution attempt."""

    def __init__(self, max_calls: int = MAX_SEARCH_CALLS_PER_RESOLUTION):
        self.max_calls = max_calls
        self.calls = 0

    @property
    def exhausted(self) -> bool:
        return self.calls >= self.max_calls

    def spend(self) -> bool:
        """Record a call. Returns False, without recording, once the cap is reached."""
        if self.exhausted:
            return False
        self.calls += 1
        return True


class SearchEngine:
    """
    Search engine interface over an ordered list of providers.
    Providers that keep failing are skipped until one of their calls succeeds again.
    """

    def __init__(self, providers: Optional[List[SearchProvider]] = None,
                 failure_threshold: int = SEARCH_FAILURE_THRESHOLD):
        """
        Initialize the search engine wrapper.

        Args:
            providers: Ordered providers; built from SEARCH_PROVIDERS when omitted
            failure_threshold: Consecutive failures before a provider is skipped
        """
        if providers is None:
            providers = self._build_providers(SEARCH_PROVIDERS)
        self._providers = providers
        self.failure_threshold = failure_threshold

        # Search engine circuit breakers
        self.failures: Dict[str, int] = {p.name: 0 for p in providers}
        self._lock = threading.Lock()

    @staticmethod
    def _build_providers(names: List[str]) -> List[SearchProvider]:
        providers = []
        for name in names:
            provider_cls = PROVIDER_REGISTRY.get(name.lower())
            if provider_cls is None:
                logger.warning(f"Unknown search provider '{name}' in configuration, skipping")
                continue
            providers.append(provider_cls())
        return providers

    def providers(self) -> Iterator[SearchProvider]:
        """Iterate the providers whose circuit breaker is closed, in priority order."""
        for provider in self._providers:
            with self._lock:
                failures = self.failures.get(provider.name, 0)
            if failures < self.failure_threshold:
                yield provider
            else:
                logger.debug(f"Skipping {provider.name}: {failures} consecutive failures")

    def query_provider(self, provider: SearchProvider, query: str,
                       max_results: int = SEARCH_RESULTS_PER_QUERY,
                       budget: Optional[SearchBudget] = None) -> List[SearchResult]:
        """
        Run one query on one provider, updating its circuit breaker.

        Args:
            provider: Provider to query
            query: Search query
            max_results: Maximum number of results
            budget: Call budget to charge, if any

        Returns:
            Results, empty on failure or when the budget is spent
        """
        if budget is not None and not budget.spend():
            logger.info(f"Search budget exhausted, not running: {query}")
            return []

        try:
            results = provider.search(query, max_results=max_results)
        except SearchProviderError as e:
            with self._lock:
                self.failures[provider.name] = self.failures.get(provider.name, 0) + 1
            logger.warning(f"{provider.name} search failed: {e}")
            return []

        with self._lock:
            self.failures[provider.name] = 0  # Reset failure counter on success
        return results

    def search(self, query: str, max_results: int = SEARCH_RESULTS_PER_QUERY,
               budget: Optional[SearchBudget] = None) -> List[SearchResult]:
        """
        Execute a search using the available providers.

        Returns the first non-empty result list in provider order.

        Args:
            query: Search query string
            max_results: Maximum number of results
            budget: Call budget to charge, if any

        Returns:
            List of search results
        """
        logger.info(f"Executing search: {query}")
        for provider in self.providers():
            if budget is not None and budget.exhausted:
                break
            results = self.query_provider(provider, query, max_results=max_results, budget=budget)
            if results:
                return results
        return []
