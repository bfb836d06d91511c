"""
Journalist-name and profile-URL validation.

Only names that look like real people make it into the candidate set.
Desks, bureaus, agencies and section names are rejected in English and in
the Indic scripts the outlets publish in. Scripts without letter case
accept single-token names; Latin names need at least two words.
"""
import html
import re
import unicodedata
from typing import Dict, Any, List, Optional
from urllib.parse import urlparse

# Unicode blocks for Devanagari, Bengali, Gurmukhi, Gujarati, Oriya, Tamil,
# Telugu, Kannada, Malayalam and Sinhala.
CASELESS_SCRIPT_RANGES = (
    r"\u0900-\u097F\u0980-\u09FF\u0A00-\u0A7F\u0A80-\u0AFF\u0B00-\u0B7F"
    r"\u0B80-\u0BFF\u0C00-\u0C7F\u0C80-\u0CFF\u0D00-\u0D7F\u0D80-\u0DFF"
)
LATIN_LETTER_RANGES = r"A-Za-z\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u024F"

_CASELESS_SCRIPT_RE = re.compile(f"[{CASELESS_SCRIPT_RANGES}]")
_ALLOWED_CHARS_RE = re.compile(f"^[{LATIN_LETTER_RANGES}{CASELESS_SCRIPT_RANGES}\\s.\\-'\\u2019\\u200c\\u200d]+$")
_DIGIT_RE = re.compile(r"\d")

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 60
MAX_NAME_WORDS = 6

# Section/category names that are never people
INVALID_NAMES = [
    'travel', 'news', 'desk', 'bureau', 'team', 'editor', 'reporter',
    'international', 'national', 'sports', 'business', 'politics',
    'entertainment', 'technology', 'tech', 'health', 'education', 'general',
    'lifestyle', 'opinion', 'analysis', 'cricket', 'food', 'auto',
    'world', 'india', 'fashion', 'gaming', 'music', 'movies', 'tv',
    'science', 'environment', 'climate', 'regional', 'state', 'city',
    'latest', 'breaking', 'online', 'digital', 'web', 'staff', 'admin',
    'editorial', 'agency', 'agencies', 'correspondent', 'network', 'media',
]

NEWS_AGENCIES = ['pti', 'reuters', 'ap', 'afp', 'dpa', 'ians', 'ani', 'uni', 'bloomberg', 'agencies', 'agency']

INVALID_PATTERNS = [
    re.compile(r"(desk|bureau|team|editorial\s*board|news\s*desk|web\s*desk|staff|correspondent|reporter|group)$", re.I),
    re.compile(r"^(" + "|".join(NEWS_AGENCIES) + r"|staff|team|bureau|desk|admin|editor)$", re.I),
    re.compile(r"^(our|the|my)\s+(bureau|desk|correspondent|reporter|team|staff)", re.I),
    re.compile(r"&\s*(pti|reuters|agencies|ani|ians)", re.I),
    re.compile(r"^(by|from|with|the|and|or)\s+", re.I),
    re.compile(r"^(mr|mrs|ms|dr|prof)\.?\s", re.I),
    # Timestamps that leak out of byline blocks
    re.compile(r"^(updated|published|posted|last\s+updated|edited)\b", re.I),
    re.compile(r"\b(ist|gmt|utc)$", re.I),
]

GENERIC_TERMS = [
    # Tamil
    'நமது நிருபர்', 'சிறப்பு நிருபர்', 'நிருபர்', 'செய்தியாளர்', 'தினமலர் நிருபர்',
    # Hindi
    'हमारे संवाददाता', 'विशेष संवाददाता', 'संवाददाता', 'रिपोर्टर', 'ब्यूरो', 'समाचार डेस्क',
    'डेस्क', 'एजेंसी',
    # Malayalam
    'നമ്മുടെ റിപ്പോര്‍ട്ടര്‍', 'പ്രത്യേക ലേഖകന്‍', 'റിപ്പോര്‍ട്ടര്‍', 'ലേഖകൻ',
    # Bengali
    'আমাদের সংবাদদাতা', 'বিশেষ সংবাদদাতা', 'নিজস্ব সংবাদদাতা', 'সংবাদদাতা',
    # English
    'our reporter', 'our correspondent', 'staff reporter', 'special correspondent',
    'bureau chief', 'news desk', 'web desk', 'news service', 'news network',
]

BYLINE_PREFIX_RE = re.compile(
    r"^\s*(((written|posted|reported|edited)\s+)?by\b|author\s*:|"
    r"द्वारा|लेखक\s*:?|লিখেছেন|எழுதியவர்|ലേഖകൻ)[\s:\-]*",
    re.I,
)
BYLINE_SUFFIX_RE = re.compile(
    r"(\s*[,|\-]\s*|\s+)(senior\s+|special\s+|chief\s+|staff\s+)?"
    r"(reporter|correspondent|journalist|writer|editor|columnist|contributor)\s*$",
    re.I,
)
BYLINE_TRAILER_RE = re.compile(r"\s*[|,]\s*(updated|published|posted)\b.*$", re.I)

PROFILE_URL_RE = re.compile(r"/(author|authors|profile|journalist|writer|reporter|contributor|people|staff|columnist)s?/", re.I)
CATEGORY_PATH_FRAGMENTS = [
    '/author/travel', '/author/sports', '/author/news', '/author/business',
    '/author/politics', '/author/entertainment', '/author/technology',
    '/author/health', '/author/education', '/topic/', '/category/', '/section/', '/tag/',
]
GENERIC_BIO_RE = re.compile(r"(read all|latest news|breaking news|exclusive news)", re.I)
LINK_NOISE_RE = re.compile(r"^(read|view|more|all|see|follow)\b", re.I)

ROLE_HINTS = [
    ("desk", "News Desk"),
    ("bureau", "Bureau"),
    ("tech", "Technology Reporter"),
    ("sports", "Sports Reporter"),
    ("business", "Business Reporter"),
    ("entertainment", "Entertainment Reporter"),
    ("politics", "Political Reporter"),
]


def uses_caseless_script(text: str) -> bool:
    """Return True when the text contains characters from a script without letter case."""
    return bool(_CASELESS_SCRIPT_RE.search(text or ""))


def normalize_name(name: str) -> str:
    """
    Fold a name into its identity key.

    Entities are unescaped, case and whitespace folded. Diacritics are
    stripped only for Latin names; Indic vowel signs are combining marks
    and must survive.

    Args:
        name: Raw author name

    Returns:
        Normalized key, empty string for empty input
    """
    if not name:
        return ""
    text = html.unescape(name).replace("\xa0", " ")
    text = unicodedata.normalize("NFKC", text)
    if not uses_caseless_script(text):
        decomposed = unicodedata.normalize("NFKD", text)
        text = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", text.casefold()).strip()


def is_valid_name(name: str) -> bool:
    """
    Decide whether a string is a plausible journalist name.

    Args:
        name: Candidate name

    Returns:
        True if the name should be accepted
    """
    if not name or not isinstance(name, str):
        return False

    trimmed = re.sub(r"\s+", " ", html.unescape(name).replace("\xa0", " ")).strip()
    if len(trimmed) < MIN_NAME_LENGTH or len(trimmed) > MAX_NAME_LENGTH:
        return False

    words = trimmed.split(" ")
    min_words = 1 if uses_caseless_script(trimmed) else 2
    if len(words) < min_words or len(words) > MAX_NAME_WORDS:
        return False

    if len(_DIGIT_RE.findall(trimmed)) > 2:
        return False

    if not _ALLOWED_CHARS_RE.match(trimmed):
        return False

    lower_name = trimmed.lower()
    for pattern in INVALID_PATTERNS:
        if pattern.search(lower_name):
            return False

    for term in GENERIC_TERMS:
        if term.lower() in lower_name:
            return False

    if lower_name in INVALID_NAMES:
        return False

    # "Sports News", "India Business": every word is section vocabulary
    plain_words = [w.strip(".'-") for w in lower_name.split(" ")]
    if all(w in INVALID_NAMES or w in NEWS_AGENCIES for w in plain_words):
        return False

    return True


def clean_byline(text: str) -> str:
    """
    Strip byline decoration such as a leading "By" or a trailing role word.

    Args:
        text: Raw byline text

    Returns:
        The bare name, possibly empty
    """
    if not text:
        return ""
    cleaned = re.sub(r"\s+", " ", html.unescape(text)).strip()
    cleaned = BYLINE_TRAILER_RE.sub("", cleaned)
    cleaned = BYLINE_PREFIX_RE.sub("", cleaned)
    cleaned = BYLINE_SUFFIX_RE.sub("", cleaned)
    return cleaned.strip(" ,|-:")


def slugify_name(name: str) -> str:
    """Turn a name into the path segment used for constructed profile URLs."""
    slug = re.sub(r"\s+", "-", name.strip().lower())
    slug = re.sub(f"[^a-z0-9{CASELESS_SCRIPT_RANGES}-]", "", slug)
    return re.sub(r"-{2,}", "-", slug).strip("-")


def is_valid_profile_url(url: str, name: Optional[str] = None) -> bool:
    """
    Check that a URL looks like a person's profile page rather than a section page.

    Args:
        url: Candidate profile URL
        name: Author name the URL should belong to

    Returns:
        True if the URL has a profile path marker and matches the name
    """
    if not url:
        return False
    try:
        path = urlparse(url).path.lower()
    except ValueError:
        return False

    if not PROFILE_URL_RE.search(path):
        return False

    for fragment in CATEGORY_PATH_FRAGMENTS:
        if fragment in path:
            return False

    if name:
        name_slug = re.sub(r"[^a-z\-]", "", re.sub(r"\s+", "-", normalize_name(name)))
        if len(name_slug) > 5:
            name_words = [w for w in name_slug.split("-") if len(w) > 2]
            if len(name_words) >= 2 and not any(w in path for w in name_words):
                return False

    return True


def infer_role(name: str, default: str = "Journalist") -> str:
    """Guess a role from desk or beat words in the author name."""
    lower_name = (name or "").lower()
    for hint, role in ROLE_HINTS:
        if hint in lower_name:
            return role
    return default


def profile_quality(profile: Dict[str, Any]) -> Dict[str, Any]:
    """
    Score a stored profile for completeness (0-100).

    Args:
        profile: Profile dictionary with name, articles, bio, topics and role

    Returns:
        Dictionary with score, issues and quality flags
    """
    score = 0
    issues: List[str] = []

    if profile.get("name") and is_valid_name(profile["name"]):
        score += 25
    else:
        issues.append("Invalid or missing name")

    articles = profile.get("articles") or []
    article_count = articles if isinstance(articles, int) else len(articles)
    if article_count >= 5:
        score += 30
    elif article_count >= 3:
        score += 20
        issues.append("Low article count")
    elif article_count > 0:
        score += 10
        issues.append("Very low article count")
    else:
        issues.append("No articles")

    bio = profile.get("bio") or ""
    if len(bio) >= 100:
        if GENERIC_BIO_RE.search(bio):
            score += 5
            issues.append("Generic bio")
        else:
            score += 20
    elif len(bio) >= 50:
        score += 10
        issues.append("Short bio")
    else:
        issues.append("No bio or too short")

    topics = profile.get("topics") or []
    if len(topics) >= 2:
        score += 15
    elif len(topics) == 1:
        score += 7
        issues.append("Only 1 topic")
    else:
        issues.append("No topics")

    role = profile.get("role")
    if role and role != "Journalist":
        score += 10
    else:
        score += 3
        issues.append("Generic role")

    return {
        "score": score,
        "issues": issues,
        "is_high_quality": score >= 70,
        "is_acceptable": score >= 50,
    }
