"""
Discovery manager for byline-scout.

This module contains the DiscoveryManager class that drives one outlet
through the whole pipeline: website resolution, author discovery, batched
profile extraction, enrichment and persistence.
"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Callable, Set
from sqlalchemy.exc import SQLAlchemyError
from byline_scout.classification.nlp_enricher import NLPEnricher
from byline_scout.config import EXTRACTION_BATCH_SIZE, BATCH_DELAY_SECONDS, DEFAULT_MAX_AUTHORS, QUICK_MAX_AUTHORS
from byline_scout.database import crud
from byline_scout.database.models import get_session_factory
from byline_scout.discovery.article_collector import ArticleCollector
from byline_scout.discovery.author_discoverer import AuthorDiscoverer
from byline_scout.discovery.crawler.web_crawler import Crawler
from byline_scout.discovery.directories.directory_scraper import AuthorDirectoryScraper
from byline_scout.discovery.profile_extractor import ProfileExtractor
from byline_scout.discovery.search_engine import SearchEngine
from byline_scout.discovery.site_resolver import SiteResolver
from byline_scout.exceptions import DiscoveryFailure, JobCancelled, PersistenceFailure
from byline_scout.models.author import AuthorCandidate, AuthorProfile
from byline_scout.models.site import ResolvedSite
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[..., None]

EXTRACTION_PROGRESS_START = 30
EXTRACTION_PROGRESS_END = 75


@dataclass
class PipelineResult:
    outlet: str
    website: str
    profiles: List[AuthorProfile] = field(default_factory=list)
    authors_found: int = 0
    authors_saved: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outlet": self.outlet,
            "website": self.website,
            "authors_found": self.authors_found,
            "authors_saved": self.authors_saved,
            "profiles": [p.to_dict() for p in self.profiles],
        }


def _no_progress(progress: int, message: str, **details) -> None:
    pass


class DiscoveryManager:
    """
    Runs the outlet discovery pipeline.

    Components are built from configuration unless passed in, so tests can
    swap the crawler, search engine or session factory.
    """

    def __init__(self, crawler: Optional[Crawler] = None, search_engine: Optional[SearchEngine] = None,
                 session_factory=None, resolver: Optional[SiteResolver] = None,
                 discoverer: Optional[AuthorDiscoverer] = None, extractor: Optional[ProfileExtractor] = None,
                 enricher: Optional[NLPEnricher] = None, batch_size: int = EXTRACTION_BATCH_SIZE,
                 batch_delay: float = BATCH_DELAY_SECONDS):
        """
        Initialize the discovery manager.

        Args:
            crawler: HTTP backend
            search_engine: Search providers
            session_factory: SQLAlchemy session factory; the default database when omitted
            resolver: Website resolver
            discoverer: Author discoverer
            extractor: Profile extractor
            enricher: Topic and keyword enricher
            batch_size: Concurrent profile extractions per batch
            batch_delay: Seconds to wait between extraction batches
        """
        self.crawler = crawler or Crawler()
        self.search_engine = search_engine or SearchEngine()
        self.session_factory = session_factory
        directory_scraper = AuthorDirectoryScraper(self.crawler)

        self.resolver = resolver or SiteResolver(self.crawler, self.search_engine)
        self.discoverer = discoverer or AuthorDiscoverer(
            self.crawler,
            ArticleCollector(self.crawler, self.search_engine),
            directory_scraper=directory_scraper,
            search_engine=self.search_engine,
        )
        self.extractor = extractor or ProfileExtractor(self.crawler, self.search_engine, directory_scraper)
        self.enricher = enricher or NLPEnricher()
        self.batch_size = max(1, batch_size)
        self.batch_delay = batch_delay

        self.metrics = self._empty_metrics()

    @staticmethod
    def _empty_metrics() -> Dict[str, Any]:
        return {
            "authors_found": 0,
            "profiles_extracted": 0,
            "article_based_profiles": 0,
            "stub_profiles": 0,
            "duplicate_profiles": 0,
            "articles_dropped": 0,
            "authors_saved": 0,
            "save_failures": 0,
        }

    @staticmethod
    def _checkpoint(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise JobCancelled()

    def resolve(self, outlet: str) -> ResolvedSite:
        """Resolve an outlet name to its website."""
        return self.resolver.resolve(outlet)

    def run_pipeline(self, outlet: str, max_authors: int = DEFAULT_MAX_AUTHORS,
                     progress: Optional[ProgressCallback] = None,
                     cancel_event: Optional[threading.Event] = None,
                     persist: bool = True) -> PipelineResult:
        """
        Run the full discovery pipeline for one outlet.

        Args:
            outlet: Outlet display name
            max_authors: Author quota
            progress: Called as progress(percent, message, **details) from this thread only
            cancel_event: Set to stop the pipeline at its next checkpoint
            persist: Write profiles to the database

        Returns:
            PipelineResult with the extracted profiles

        Raises:
            ResolutionFailure: no website found
            DiscoveryFailure: no authors found
            JobCancelled: cancel_event was set
        """
        report = progress or _no_progress
        should_stop = cancel_event.is_set if cancel_event is not None else None
        self.metrics = self._empty_metrics()
        start_time = time.time()

        logger.info(f"Starting discovery for '{outlet}' (max_authors={max_authors})")
        report(10, "Detecting website...")
        site = self.resolver.resolve(outlet)
        self._checkpoint(cancel_event)

        report(20, f"Website found: {site.base_url}. Discovering authors...", website=site.base_url)
        candidates = self.discoverer.discover(site, outlet, max_authors, should_stop=should_stop)
        self._checkpoint(cancel_event)
        if not candidates:
            raise DiscoveryFailure(outlet, site.base_url)

        self.metrics["authors_found"] = len(candidates)
        report(EXTRACTION_PROGRESS_START, f"Found {len(candidates)} authors. Extracting profiles...",
               authors_found=len(candidates))
        profiles = self._extract_profiles(candidates, site, outlet, report, cancel_event)

        saved = 0
        if persist:
            self._checkpoint(cancel_event)
            report(80, "Saving to database...")
            saved = self._persist(profiles)

        runtime_seconds = round(time.time() - start_time, 1)
        logger.info(f"Discovery for '{outlet}' completed in {runtime_seconds} seconds: "
                    f"{len(profiles)} profiles, {saved} saved")
        logger.debug(f"Discovery metrics: {self.metrics}")
        return PipelineResult(
            outlet=outlet,
            website=site.base_url,
            profiles=profiles,
            authors_found=len(profiles),
            authors_saved=saved,
        )

    def run_quick(self, outlet: str, max_authors: int = QUICK_MAX_AUTHORS) -> PipelineResult:
        """Blocking run with a small quota and no persistence."""
        return self.run_pipeline(outlet, max_authors=max_authors, persist=False)

    def run_single_author(self, outlet: str, author_name: str, persist: bool = True) -> PipelineResult:
        """
        Find, extract and store one named author.

        Args:
            outlet: Outlet display name
            author_name: Author to look for
            persist: Write the profile to the database

        Returns:
            PipelineResult with at most one profile

        Raises:
            ResolutionFailure: no website found
            DiscoveryFailure: the author could not be located on the site
        """
        self.metrics = self._empty_metrics()
        site = self.resolver.resolve(outlet)
        candidate = self.discoverer.find_author(site, author_name)
        if candidate is None:
            raise DiscoveryFailure(outlet, site.base_url)

        profile = self.enricher.apply(self.extractor.extract(candidate, site, outlet))
        self._count_profile(profile)
        saved = self._persist([profile]) if persist else 0
        return PipelineResult(outlet=outlet, website=site.base_url, profiles=[profile],
                              authors_found=1, authors_saved=saved)

    def _count_profile(self, profile: AuthorProfile) -> None:
        self.metrics["profiles_extracted"] += 1
        if profile.article_based:
            self.metrics["article_based_profiles"] += 1
        elif not profile.articles:
            self.metrics["stub_profiles"] += 1

    def _extract_profiles(self, candidates: List[AuthorCandidate], site: ResolvedSite, outlet: str,
                          report: ProgressCallback,
                          cancel_event: Optional[threading.Event]) -> List[AuthorProfile]:
        """
        Extract profiles in fixed-size concurrent batches.

        Workers only return profiles. Article claiming, enrichment and
        progress happen here, one profile at a time in candidate order.
        """
        profiles: List[AuthorProfile] = []
        claimed_articles: Set[str] = set()
        seen_profiles: Set[str] = set()
        total = len(candidates)
        batches = [candidates[i:i + self.batch_size] for i in range(0, total, self.batch_size)]

        with ThreadPoolExecutor(max_workers=self.batch_size, thread_name_prefix="profile-extract") as pool:
            for index, batch in enumerate(batches):
                self._checkpoint(cancel_event)
                futures = [pool.submit(self.extractor.extract, candidate, site, outlet) for candidate in batch]

                for future in futures:
                    profile = future.result()
                    if profile.profile_url in seen_profiles:
                        self.metrics["duplicate_profiles"] += 1
                        logger.info(f"Skipping duplicate profile {profile.profile_url} for {profile.name}")
                        continue
                    seen_profiles.add(profile.profile_url)

                    kept = [a for a in profile.articles if a.url not in claimed_articles]
                    self.metrics["articles_dropped"] += len(profile.articles) - len(kept)
                    profile.articles = kept
                    claimed_articles.update(a.url for a in kept)

                    profiles.append(self.enricher.apply(profile))
                    self._count_profile(profile)

                done = min((index + 1) * self.batch_size, total)
                percent = EXTRACTION_PROGRESS_START + int(
                    (EXTRACTION_PROGRESS_END - EXTRACTION_PROGRESS_START) * done / total)
                report(percent, f"Extracted {done}/{total} profiles...")

                if index < len(batches) - 1 and self.batch_delay:
                    # Wakes early on cancellation
                    if cancel_event is not None:
                        cancel_event.wait(self.batch_delay)
                    else:
                        time.sleep(self.batch_delay)

        return profiles

    def _persist(self, profiles: List[AuthorProfile]) -> int:
        """
        Upsert profiles one at a time.

        A failed upsert is rolled back, logged and skipped.

        Returns:
            Number of profiles saved
        """
        factory = self.session_factory or get_session_factory()
        saved = 0
        session = factory()
        try:
            for profile in profiles:
                try:
                    crud.upsert_author_profile(session, profile)
                except SQLAlchemyError as e:
                    session.rollback()
                    self.metrics["save_failures"] += 1
                    logger.warning(str(PersistenceFailure(f"Could not save {profile.name} ({profile.profile_url}): {e}")))
                    continue
                saved += 1

                try:
                    crud.upsert_author_mirror(session, profile)
                except SQLAlchemyError as e:
                    session.rollback()
                    logger.warning(f"Could not update author mirror for {profile.name}: {e}")
        finally:
            session.close()

        self.metrics["authors_saved"] = saved
        logger.info(f"Saved {saved}/{len(profiles)} profiles")
        return saved
