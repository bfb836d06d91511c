"""
Ordered extraction strategies over parsed HTML documents.

Every "try selector family A, then B, then a text pattern" chain in the
pipeline is expressed as a list of strategies and run by run_strategies().
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Tuple
from bs4 import BeautifulSoup
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ExtractionContext:
    """What a strategy knows about the document besides its DOM."""
    url: str
    origin: str = ""
    name: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)


class ExtractionStrategy(ABC):
    """A single way of pulling one value out of a document."""

    name = "strategy"

    @abstractmethod
    def try_extract(self, soup: BeautifulSoup, context: ExtractionContext) -> Optional[Any]:
        """Return the extracted value, or None when this strategy does not apply."""


class FunctionStrategy(ExtractionStrategy):
    """Wraps a plain function as a strategy."""

    def __init__(self, name: str, func: Callable[[BeautifulSoup, ExtractionContext], Optional[Any]]):
        self.name = name
        self.func = func

    def try_extract(self, soup: BeautifulSoup, context: ExtractionContext) -> Optional[Any]:
        return self.func(soup, context)


class SelectorTextStrategy(ExtractionStrategy):
    """
    First element text matching any selector in a family, within length bounds.

    Args:
        name: Strategy name for logging
        selectors: CSS selectors tried in order
        min_length: Shortest acceptable text
        max_length: Longest acceptable text
        attribute: Read this attribute instead of the element text
        reject: Regex; matching text is skipped
    """

    def __init__(self, name: str, selectors: Sequence[str], min_length: int = 1, max_length: int = 1000,
                 attribute: Optional[str] = None, reject: Optional[str] = None):
        self.name = name
        self.selectors = list(selectors)
        self.min_length = min_length
        self.max_length = max_length
        self.attribute = attribute
        self.reject = re.compile(reject, re.I) if reject else None

    def try_extract(self, soup: BeautifulSoup, context: ExtractionContext) -> Optional[str]:
        for selector in self.selectors:
            for element in soup.select(selector):
                if self.attribute:
                    text = (element.get(self.attribute) or "").strip()
                else:
                    text = element.get_text(" ", strip=True)
                text = re.sub(r"\s+", " ", text)
                if not (self.min_length <= len(text) <= self.max_length):
                    continue
                if self.reject and self.reject.search(text):
                    continue
                return text
        return None


def run_strategies(strategies: Sequence[ExtractionStrategy], soup: BeautifulSoup,
                   context: ExtractionContext) -> Tuple[Optional[Any], Optional[str]]:
    """
    Run strategies in order and return the first value produced.

    A strategy that raises is logged and skipped; extraction from messy HTML
    must never abort the stage.

    Args:
        strategies: Ordered strategies
        soup: Parsed document
        context: Document context

    Returns:
        (value, strategy name), or (None, None) when nothing matched
    """
    for strategy in strategies:
        try:
            value = strategy.try_extract(soup, context)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Strategy {strategy.name} failed on {context.url}: {e}")
            continue
        if value is not None and value != [] and value != "":
            return value, strategy.name
    return None, None
