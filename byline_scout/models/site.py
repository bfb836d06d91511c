"""
Resolved website model.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlparse


class DetectionMethod(str, Enum):
    SEARCH_ENGINE = "search_engine"
    CONSTRUCTED_PATTERN = "constructed_pattern"


@dataclass
class ResolvedSite:
    base_url: str
    method: DetectionMethod
    score: float = 0.0
    provider: Optional[str] = None

    @property
    def host(self) -> str:
        return urlparse(self.base_url).netloc.lower()

    @property
    def bare_host(self) -> str:
        host = self.host
        return host[4:] if host.startswith("www.") else host
