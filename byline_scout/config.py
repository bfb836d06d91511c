"""
Configuration settings for the Byline Scout journalist discovery system.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# API Keys and credentials
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GOOGLE_CSE_ID = os.getenv("GOOGLE_CSE_ID")  # Custom Search Engine ID

# Database configuration
DATABASE_PATH = BASE_DIR / "data" / "bylines.db"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_PATH}")

# Logging configuration
LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "logs")))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() in ("1", "true", "yes")

# HTTP settings
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]
ACCEPT_LANGUAGE = os.getenv("ACCEPT_LANGUAGE", "en-IN,en;q=0.9,hi;q=0.8")
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "15"))  # seconds
PROBE_TIMEOUT = int(os.getenv("PROBE_TIMEOUT", "8"))  # seconds

# Search settings
SEARCH_PROVIDERS = [
    p.strip() for p in os.getenv("SEARCH_PROVIDERS", "duckduckgo,bing,google").split(",") if p.strip()
]
MAX_SEARCH_CALLS_PER_RESOLUTION = int(os.getenv("MAX_SEARCH_CALLS_PER_RESOLUTION", "8"))
SEARCH_FAILURE_THRESHOLD = 3  # consecutive failures before a provider is skipped
SEARCH_RESULTS_PER_QUERY = 5

SITE_QUERY_TEMPLATES = [
    "{outlet} newspaper india",
    "{outlet} news india official website",
    "{outlet} .in news outlet",
    "{outlet} official website news",
]

# Result domains that never belong to an outlet
EXCLUDED_RESULT_DOMAINS = [
    "wikipedia.org", "facebook.com", "twitter.com", "x.com", "youtube.com",
    "linkedin.com", "instagram.com", "wikidata.org", "reddit.com",
]

# Locale scoring for site resolution
LOCALE_TLDS = [".in", ".co.in"]
FOREIGN_TLDS = [".uk", ".us", ".au", ".ca", ".nz", ".eu"]
LOCALE_KEYWORDS = [
    "india", "indian", "hindi", "tamil", "telugu", "kannada", "malayalam",
    "marathi", "bengali", "gujarati", "punjabi", "odia", "delhi", "mumbai",
    "chennai", "kolkata", "bangalore", "bengaluru", "hyderabad", "indiatimes",
]
FOREIGN_KEYWORDS = [
    "american", "british", "australia", "canada", "uk", "international",
    "global", "world", "usa", "united states", "washington", "london",
    "new york", "chicago",
]
LOCALE_TLD_WEIGHT = 500
LOCALE_KEYWORD_WEIGHT = 200
GENERIC_COM_PENALTY = -100
FOREIGN_TLD_PENALTY = -1000
FOREIGN_KEYWORD_PENALTY = -500

# Constructed-domain probing
PRIMARY_TLDS = [".in", ".co.in"]
SECONDARY_TLDS = [".com", ".net", ".org"]
NEWS_VOCABULARY = ["news", "article", "story", "journalism", "reporter", "latest"]

# Article collection
FEED_PATHS = [
    "/rss", "/rss.xml", "/feed", "/feed.xml", "/feeds/rss", "/feeds/news.xml",
    "/rssfeeds", "/feed/rss", "/feeds/all", "/rss/all", "/index.xml",
]
SITEMAP_PATHS = ["/sitemap.xml", "/sitemap_index.xml", "/sitemap-news.xml"]
SECTION_SLUGS = [
    "news", "india", "national", "politics", "business", "sports", "world",
    "entertainment", "tech", "opinion", "latest",
]
SECTION_PREFIXES = ["/{slug}", "/category/{slug}", "/section/{slug}"]
ARTICLE_FETCH_DELAY = float(os.getenv("ARTICLE_FETCH_DELAY", "0.2"))  # seconds between article fetches

# Author discovery
DIRECTORY_PATHS = [
    "/authors", "/author", "/journalists", "/team", "/staff", "/writers",
    "/contributors", "/people", "/our-team", "/editorial-team", "/columnists",
    "/reporters",
]
DIRECTORY_VOCABULARY = ["author", "journalist", "writer", "team", "reporter", "columnist"]
DIRECTORY_MIN_PROFILE_LINKS = 5  # page must have more than this many profile links
PROFILE_PATH_MARKERS = [
    "author", "profile", "journalist", "writer", "reporter", "contributor",
    "correspondent", "people", "staff", "columnist",
]
ARTICLE_PROCESS_CAP = 300
AUTHOR_BUFFER_FACTOR = 1.5

# Profile extraction
MAX_PROFILE_ARTICLES = 100
MIN_CONTAINER_ARTICLES = 5
MIN_ARTICLE_TITLE_LENGTH = 15
MAX_ARTICLE_TITLE_LENGTH = 250
DEFAULT_ROLE = "Journalist"

# Enrichment
MAX_STORED_KEYWORDS = 15
MAX_TOP_KEYWORDS = 5

# Job orchestration
EXTRACTION_BATCH_SIZE = int(os.getenv("EXTRACTION_BATCH_SIZE", "2"))
BATCH_DELAY_SECONDS = float(os.getenv("BATCH_DELAY_SECONDS", "1.0"))
JOB_RETENTION_SECONDS = int(os.getenv("JOB_RETENTION_SECONDS", "600"))  # 10 minutes
JOB_CLEANUP_INTERVAL_SECONDS = 60
JOB_WORKERS = int(os.getenv("JOB_WORKERS", "2"))
DEFAULT_MAX_AUTHORS = 30
QUICK_MAX_AUTHORS = 10
