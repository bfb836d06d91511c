"""
Domain models for the discovery pipeline.
"""
from byline_scout.models.author import (
    Article, AuthorCandidate, AuthorProfile, ArticleDerivedCandidate,
    CandidateSource, DirectoryCandidate, SearchDerivedCandidate, SocialLinks,
)
from byline_scout.models.job import DiscoveryJob, JobStatus
from byline_scout.models.site import DetectionMethod, ResolvedSite

__all__ = [
    'Article', 'AuthorCandidate', 'AuthorProfile', 'ArticleDerivedCandidate',
    'CandidateSource', 'DirectoryCandidate', 'SearchDerivedCandidate', 'SocialLinks',
    'DiscoveryJob', 'JobStatus', 'DetectionMethod', 'ResolvedSite',
]
