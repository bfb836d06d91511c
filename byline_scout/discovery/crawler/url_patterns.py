"""
URL heuristics for telling article pages from profiles, sections and navigation.
"""
import re
from typing import Optional
from urllib.parse import urlparse
from byline_scout.config import PROFILE_PATH_MARKERS

DATE_PATH_PATTERNS = [
    re.compile(r"/(\d{4})/(\d{1,2})/(\d{1,2})/.+"),
    re.compile(r"/(\d{4})-(\d{2})-(\d{2})/.+"),
]
ID_PATH_PATTERNS = [
    re.compile(r"-\d{5,}"),
    re.compile(r"\d{8,}\.html?"),
    re.compile(r"\d{7,}"),
]
CONTENT_PREFIX_RE = re.compile(r"/(article|articles|story|stories|news|post|blog|column|opinion|report|coverage|breaking)/.+")
SECTION_PREFIX_RE = re.compile(
    r"/(national|international|world|india|politics|business|sports|entertainment|tech|technology|science|health|lifestyle|cities|states)/.+"
)
ARTICLE_QUERY_RE = re.compile(r"articleshow|newsid|storyid|articleid|story_id|news_id", re.I)
DYNAMIC_PAGE_RE = re.compile(r"(news|article|story)\.(asp|aspx|php)", re.I)

EXCLUDED_PATH_FRAGMENTS = [
    "/author/", "/authors/", "/tag/", "/tags/", "/topic/", "/category/", "/search",
    "/profile/", "/login", "/subscribe", "/privacy", "/terms", "/contact",
]
PROFILE_PATH_RE = re.compile(r"/(" + "|".join(PROFILE_PATH_MARKERS) + r")s?/[^/]+", re.I)
MIN_ARTICLE_PATH_LENGTH = 15
LONG_PATH_LENGTH = 25

NAVIGATION_TAGS = {"nav", "header", "footer"}


def same_site(url: str, host: str) -> bool:
    """Return True if the URL is on the given host, ignoring a leading www."""
    try:
        url_host = urlparse(url).netloc.lower()
    except ValueError:
        return False
    return _strip_www(url_host) == _strip_www((host or "").lower())


def _strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def is_excluded_path(path: str) -> bool:
    """Paths that are never articles: author pages, tag pages, search, legal pages."""
    lower_path = path.lower()
    return any(fragment in lower_path for fragment in EXCLUDED_PATH_FRAGMENTS)


def is_article_url(url: str, host: Optional[str] = None) -> bool:
    """
    Classify a URL as an article page.

    Homepage links, section listings, profile pages and search results
    all go through the same rules.

    Args:
        url: Absolute URL to classify
        host: Site host the article must belong to, if given

    Returns:
        True if the URL looks like an article
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    if host and not same_site(url, host):
        return False

    path = parsed.path or "/"
    if len(path) < MIN_ARTICLE_PATH_LENGTH or is_excluded_path(path):
        return False

    if any(p.search(path) for p in DATE_PATH_PATTERNS):
        return True
    if any(p.search(path) for p in ID_PATH_PATTERNS[:1]):
        return True
    if CONTENT_PREFIX_RE.search(path):
        return True
    if len(path) > LONG_PATH_LENGTH:
        return True

    return bool(
        any(p.search(path) for p in ID_PATH_PATTERNS[1:])
        or SECTION_PREFIX_RE.search(path)
        or ARTICLE_QUERY_RE.search(parsed.query or "")
        or DYNAMIC_PAGE_RE.search(path)
    )


def is_profile_url(url: str) -> bool:
    """Return True if the URL path looks like an author profile page."""
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    return bool(PROFILE_PATH_RE.search(path))


def extract_publish_date(url: str) -> Optional[str]:
    """
    Pull an ISO date out of a date-segmented article path.

    Args:
        url: Article URL

    Returns:
        Date as YYYY-MM-DD, or None when the path carries no date
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    for pattern in DATE_PATH_PATTERNS:
        match = pattern.search(path)
        if match:
            year, month, day = (int(g) for g in match.groups())
            if 1990 <= year <= 2100 and 1 <= month <= 12 and 1 <= day <= 31:
                return f"{year:04d}-{month:02d}-{day:02d}"
    return None


def extract_section(url: str) -> Optional[str]:
    """Return the section slug an article sits under, if the path names one."""
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    match = SECTION_PREFIX_RE.search(path) or CONTENT_PREFIX_RE.search(path)
    if not match:
        return None
    return match.group(1).lower()


def in_navigation(tag) -> bool:
    """Return True if a BeautifulSoup tag sits inside nav, header, footer or a navigation role."""
    for parent in tag.parents:
        if parent.name in NAVIGATION_TAGS:
            return True
        if parent.get("role") == "navigation":
            return True
    return False
