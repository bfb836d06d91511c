"""
Outlet website resolution.

Maps a free-text outlet name to the outlet's canonical website. Search
backends are tried first, in configured priority order, and their results
are ranked by a locale-aware priority score. When no backend produces a
candidate, conventional domain patterns built from the outlet name are
probed directly.
"""
import re
from typing import List, Optional, Tuple
from urllib.parse import urlparse
import tldextract
from bs4 import BeautifulSoup
from byline_scout.config import (
    SITE_QUERY_TEMPLATES, EXCLUDED_RESULT_DOMAINS, LOCALE_TLDS, FOREIGN_TLDS,
    LOCALE_KEYWORDS, FOREIGN_KEYWORDS, LOCALE_TLD_WEIGHT, LOCALE_KEYWORD_WEIGHT,
    GENERIC_COM_PENALTY, FOREIGN_TLD_PENALTY, FOREIGN_KEYWORD_PENALTY,
    PRIMARY_TLDS, SECONDARY_TLDS, NEWS_VOCABULARY, SEARCH_RESULTS_PER_QUERY,
    MAX_SEARCH_CALLS_PER_RESOLUTION,
)
from byline_scout.discovery.crawler.web_crawler import Crawler, FetchResult
from byline_scout.discovery.search.base import SearchResult
from byline_scout.discovery.search_engine import SearchEngine, SearchBudget
from byline_scout.exceptions import ResolutionFailure
from byline_scout.models.site import ResolvedSite, DetectionMethod
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

# Bundled public suffix snapshot only; never fetch the list over the network
_TLD_EXTRACTOR = tldextract.TLDExtract(suffix_list_urls=())


def normalize_outlet_name(outlet_name: str) -> str:
    """
    Collapse an outlet name into a domain label, e.g. "The Example Times" -> "exampletimes".

    Args:
        outlet_name: Outlet display name

    Returns:
        Lowercase alphanumeric label
    """
    name = outlet_name.lower().strip()
    name = re.sub(r"^the\s+", "", name)
    name = re.sub(r"[^a-z0-9\s]", "", name)
    return re.sub(r"\s+", "", name)


def outlet_words(outlet_name: str) -> List[str]:
    """Significant words of an outlet name, used to match result domains and titles."""
    words = re.sub(r"[^a-z0-9\s]", " ", outlet_name.lower()).split()
    return [w for w in words if len(w) > 3]


def priority_score(url: str, title: str = "") -> int:
    """
    Rank a search result as the outlet's home site.

    Local TLDs and locale keywords add weight; foreign TLDs and foreign
    keywords subtract heavily; a bare .com with no locale signal is
    slightly penalized.

    Args:
        url: Result URL
        title: Result title

    Returns:
        Priority score, higher is better
    """
    host = urlparse(url).netloc.lower()
    url_lower = url.lower()
    title_lower = (title or "").lower()
    score = 0

    if any(host.endswith(tld) for tld in LOCALE_TLDS):
        score += LOCALE_TLD_WEIGHT

    locale_matches = sum(1 for kw in LOCALE_KEYWORDS if kw in url_lower or kw in title_lower)
    score += LOCALE_KEYWORD_WEIGHT * locale_matches

    if host.endswith(".com") and not locale_matches:
        score += GENERIC_COM_PENALTY
    if any(host.endswith(tld) for tld in FOREIGN_TLDS):
        score += FOREIGN_TLD_PENALTY

    foreign_matches = sum(1 for kw in FOREIGN_KEYWORDS if _keyword_in(kw, url_lower) or _keyword_in(kw, title_lower))
    score += FOREIGN_KEYWORD_PENALTY * foreign_matches
    return score


def _keyword_in(keyword: str, text: str) -> bool:
    # Short keywords like "uk" must match as whole words, not inside "kolkata.uk..."
    if len(keyword) <= 3:
        return re.search(rf"\b{re.escape(keyword)}\b", text) is not None
    return keyword in text


def origin_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme or 'https'}://{parsed.netloc}"


def looks_like_news_site(soup: BeautifulSoup) -> bool:
    """
    Check a homepage for news vocabulary plus a navigation or header element.

    Args:
        soup: Parsed homepage

    Returns:
        True if the page looks like a news outlet
    """
    title = soup.title.get_text(" ", strip=True).lower() if soup.title else ""
    body = soup.body or soup
    text = body.get_text(" ", strip=True).lower()
    has_vocabulary = any(word in text or word in title for word in NEWS_VOCABULARY)
    has_structure = bool(soup.find(["nav", "header"]) or soup.find(attrs={"role": "navigation"}))
    return has_vocabulary and has_structure


class SiteResolver:
    """Resolves outlet names to websites."""

    def __init__(self, crawler: Crawler, search_engine: SearchEngine,
                 max_search_calls: int = MAX_SEARCH_CALLS_PER_RESOLUTION):
        """
        Initialize the resolver.

        Args:
            crawler: HTTP backend used for verification and probing
            search_engine: Ordered search providers
            max_search_calls: Cap on external search calls per resolution
        """
        self.crawler = crawler
        self.search_engine = search_engine
        self.max_search_calls = max_search_calls

    def resolve(self, outlet_name: str) -> ResolvedSite:
        """
        Resolve an outlet name to its website.

        Args:
            outlet_name: Outlet display name

        Returns:
            The resolved site

        Raises:
            ResolutionFailure: when every strategy is exhausted
        """
        outlet_name = (outlet_name or "").strip()
        if not outlet_name:
            raise ResolutionFailure(outlet_name, "empty outlet name")

        logger.info(f"Detecting website for '{outlet_name}'")

        site = self._resolve_via_search(outlet_name)
        if site:
            logger.info(f"Resolved '{outlet_name}' to {site.base_url} via {site.provider} (score {site.score})")
            return site

        site = self._resolve_via_patterns(outlet_name)
        if site:
            logger.info(f"Resolved '{outlet_name}' to {site.base_url} via constructed pattern")
            return site

        logger.warning(f"Website detection failed for '{outlet_name}'")
        raise ResolutionFailure(outlet_name, "no search result or constructed domain responded")

    def _resolve_via_search(self, outlet_name: str) -> Optional[ResolvedSite]:
        budget = SearchBudget(self.max_search_calls)
        queries = [template.format(outlet=outlet_name) for template in SITE_QUERY_TEMPLATES]

        for provider in self.search_engine.providers():
            for query in queries:
                if budget.exhausted:
                    logger.info(f"Search budget of {budget.max_calls} calls spent for '{outlet_name}'")
                    return None
                results = self.search_engine.query_provider(provider, query, max_results=SEARCH_RESULTS_PER_QUERY, budget=budget)
                ranked = self.rank_results(outlet_name, results)
                if ranked:
                    url, score = ranked[0]
                    return ResolvedSite(base_url=url, method=DetectionMethod.SEARCH_ENGINE, score=score, provider=provider.name)
        return None

    def rank_results(self, outlet_name: str, results: List[SearchResult]) -> List[Tuple[str, int]]:
        """
        Filter and rank search results as outlet home sites.

        Args:
            outlet_name: Outlet display name
            results: Raw search results

        Returns:
            (origin URL, score) pairs, best first
        """
        words = outlet_words(outlet_name) or [normalize_outlet_name(outlet_name)]
        ranked: List[Tuple[str, int]] = []
        seen = set()

        for result in results:
            parsed = urlparse(result.url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                continue

            host = parsed.netloc.lower()
            ext = _TLD_EXTRACTOR(host)
            registered = f"{ext.domain}.{ext.suffix}" if ext.suffix else ext.domain
            if any(registered == d or host.endswith("." + d) for d in EXCLUDED_RESULT_DOMAINS):
                continue

            title_lower = (result.title or "").lower()
            if not any(w in host or w in title_lower for w in words):
                continue

            origin = origin_of(result.url)
            if origin in seen:
                continue
            seen.add(origin)

            if not self.crawler.head_ok(origin):
                logger.debug(f"Candidate {origin} did not respond, skipping")
                continue

            ranked.append((origin, priority_score(result.url, result.title)))

        ranked.sort(key=lambda pair: pair[1], reverse=True)
        return ranked

    def constructed_urls(self, outlet_name: str) -> List[str]:
        """Conventional domains for the outlet, local TLDs first."""
        label = normalize_outlet_name(outlet_name)
        if not label:
            return []
        urls = []
        for tld in PRIMARY_TLDS:
            urls.append(f"https://www.{label}{tld}")
            if tld == PRIMARY_TLDS[0]:
                urls.append(f"https://{label}{tld}")
        urls.append(f"https://www.{label}online{PRIMARY_TLDS[0]}")
        for tld in SECONDARY_TLDS:
            urls.append(f"https://www.{label}{tld}")
            if tld == SECONDARY_TLDS[0]:
                urls.append(f"https://{label}{tld}")
                urls.append(f"https://www.{label}online{tld}")
        return urls

    def _resolve_via_patterns(self, outlet_name: str) -> Optional[ResolvedSite]:
        for url in self.constructed_urls(outlet_name):
            result: FetchResult = self.crawler.probe(url)
            if not result.ok:
                continue
            if self.crawler.evaluate(result, looks_like_news_site):
                return ResolvedSite(
                    base_url=origin_of(result.final_url or url),
                    method=DetectionMethod.CONSTRUCTED_PATTERN,
                )
            logger.debug(f"{url} responded but does not look like a news site")
        return None
