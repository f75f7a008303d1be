"""
Pattern library for business card field classification.

All patterns are compiled once at import. Locale keyword lists are plain
data tables; adding a locale means extending a tuple, not adding a branch.
"""

import re
from typing import Iterable, List, Optional

# =========================
# KEYWORD TABLES
# =========================

LABEL_KEYWORDS = {
    "phone": ("tel", "telephone", "telefon", "phone", "mob", "mobile", "đt", "điện thoại"),
    "fax": ("fax", "telefax"),
    "email": ("e-mail", "email", "mail"),
    "web": ("web", "website", "site", "url", "internet"),
    "office": ("văn phòng", "vp", "office", "büro"),
    "branch": ("cn", "chi nhánh", "branch", "filiale"),
}

# Legal-entity suffixes, matched as whole words
COMPANY_SUFFIXES = (
    r"co\.?\s*,?\s*ltd\.?", r"ltd\.?", r"inc\.?", r"corp\.?", r"gmbh", r"s\.a\.?",
    r"company", r"llc", r"tnhh", r"jsc", r"công ty",
)

# Business-premises nouns; only the word end is anchored so German compounds hit
BUSINESS_PREMISES = (
    "praxis", "clinic", "studio", "atelier", "zentrum", "büro", "office", "kanzlei",
)

CORPORATE_FALLBACK = ("group", "se", "ag", "kg", "plc", "holding")

TITLE_KEYWORDS = (
    r"phòng\s+(?:kinh doanh|marketing|sales|nhân sự|kỹ thuật)", "giám đốc", "trưởng phòng",
    "department", "sales", "marketing", "business", "manager", "director", "lead",
    "vice president", "president", "engineer", "developer", "designer", "analyst",
    "specialist", "officer", "research", "consultant", "founder", "partner",
    "ceo", "cto", "cfo", "geschäftsführer", "leiter", "entwicklung", "development",
)

HONORIFICS = (r"dr\.?", r"prof\.?", r"mr\.?", r"ms\.?", r"mrs\.?", "herr", "frau")

STREET_KEYWORDS = (
    "straße", "strasse", r"str\.", "street", r"st\.", "road", r"rd\.", "platz", "allee",
    "avenue", "weg", "đường",
)

HOURS_HEADERS = ("öffnungszeiten", "opening hours", "business hours", "giờ mở cửa")

DAY_ABBREVIATIONS = (
    "mo", "di", "mi", "do", "fr", "sa", "so",
    "mon", "tue", "wed", "thu", "fri", "sat", "sun",
)

MARKETING_PHRASES = (
    "wir helfen", "we help", "call us", "reach us", "kontaktieren", "contact us today",
)

# Location keyword -> label suffix; the last matching entry wins
LOCATION_KEYWORDS = (
    ("hcm", ("hcm", "ho chi minh", "hồ chí minh", "sai gon", "sài gòn")),
    ("hanoi", ("ha noi", "hà nội", "hanoi")),
    ("china", ("china", "trung quoc", "trung quốc")),
    ("vietnam", ("viet nam", "vietnam", "việt nam")),
)

WEBSITE_TLDS = frozenset((
    "com", "net", "org", "de", "at", "ch", "eu", "io", "co", "us", "uk", "fr",
    "it", "es", "nl", "be", "jp", "cn", "ru", "pl", "se", "no", "fi", "dk",
    "pt", "br", "mx", "ca", "au", "nz", "vn", "info", "biz", "app", "dev",
))


def _alternation(words: Iterable[str]) -> str:
    return "|".join(words)


def _literal_alternation(words: Iterable[str]) -> str:
    return "|".join(re.escape(word) for word in words)


# =========================
# COMPILED PATTERNS
# =========================

EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
PHONE_RE = re.compile(r"\+?[0-9][0-9()\-.\s]{6,}[0-9]")
URL_RE = re.compile(r"(?:https?://\S+|www\.\S+|[A-Z0-9.-]+\.[A-Z]{2,})(?:/\S*)?", re.IGNORECASE)
IMAGE_FILE_RE = re.compile(r"\.(?:png|jpe?g|gif)$", re.IGNORECASE)

LABEL_PATTERNS = {
    kind: re.compile(rf"^(?:{_literal_alternation(words)})\s*[:：]", re.IGNORECASE)
    for kind, words in LABEL_KEYWORDS.items()
}
LABEL_SEPARATOR_RE = re.compile(r"[:：]")
ADDRESS_LABEL_RE = re.compile(
    rf"^(?:{_literal_alternation(LABEL_KEYWORDS['office'] + LABEL_KEYWORDS['branch'])})\s*[:：]",
    re.IGNORECASE,
)

COMPANY_HINT_RE = re.compile(
    rf"(?<!\w)(?:{_alternation(COMPANY_SUFFIXES)})(?!\w)|(?:{_literal_alternation(BUSINESS_PREMISES)})(?!\w)",
    re.IGNORECASE,
)
CORPORATE_SUFFIX_RE = re.compile(rf"\b(?:{_literal_alternation(CORPORATE_FALLBACK)})\b", re.IGNORECASE)
TITLE_HINT_RE = re.compile(rf"(?<!\w)(?:{_alternation(TITLE_KEYWORDS)})(?!\w)", re.IGNORECASE)
PERSON_HINT_RE = re.compile(rf"^(?:{_alternation(HONORIFICS)})\b", re.IGNORECASE)
CAPITALIZED_WORD_RE = re.compile(r"^[A-ZÄÖÜ][a-zäöüß\-]+$")
COMPANY_MARKER_VI_RE = re.compile(r"công ty", re.IGNORECASE)

STREET_RE = re.compile(_alternation(STREET_KEYWORDS), re.IGNORECASE)
POSTAL_RE = re.compile(r"\b\d{4,6}\b")
LETTER_RE = re.compile(r"[^\W\d_]")

HOURS_HEADER_RE = re.compile(_literal_alternation(HOURS_HEADERS), re.IGNORECASE)
HOURS_DAY_RE = re.compile(rf"\b(?:{_alternation(DAY_ABBREVIATIONS)})\b", re.IGNORECASE)
TIME_RE = re.compile(r"\b\d{1,2}:\d{2}\b")

MARKETING_RE = re.compile(_literal_alternation(MARKETING_PHRASES), re.IGNORECASE)
CONTACT_INLINE_RE = re.compile(
    r"\b(?:telefon|tel\.?|phone|fax|e-?mail|web(?:site)?)\b|www\.|https?://",
    re.IGNORECASE,
)

# Inline "T 0123 · M 0456" style lines
INLINE_LABEL_HINT_RE = re.compile(r"\b[TM]\b")
INLINE_SEPARATOR_RE = re.compile(r"[•·|]")
SHORT_LABEL_RE = re.compile(r"^(t|m|f|tel|telefon|mobile)\b\s*[:：]?\s*(.+)$", re.IGNORECASE)
SHORT_LABEL_ALIASES = {"TEL": "T", "TELEFON": "T", "MOBILE": "M"}


# =========================
# MATCH HELPERS
# =========================

def unique_values(values: Iterable[Optional[str]]) -> List[str]:
    """Trimmed, non-empty values; case-insensitive duplicates keep the first spelling."""
    seen = set()
    result = []
    for value in values:
        value = (value or "").strip()
        if value and value.lower() not in seen:
            seen.add(value.lower())
            result.append(value)
    return result


def find_emails(text: str) -> List[str]:
    return [m.group(0) for m in EMAIL_RE.finditer(text)]


def find_urls(text: str) -> List[str]:
    return [m.group(0) for m in URL_RE.finditer(text)]


def find_numbers(text: str) -> List[str]:
    """Phone/fax-shaped digit runs in text, deduplicated."""
    return unique_values(m.group(0) for m in PHONE_RE.finditer(text))


def url_host(value: str) -> str:
    """Lowercased host of a URL-ish value, without scheme or www."""
    host = re.sub(r"^https?://", "", value.strip(), flags=re.IGNORECASE)
    host = re.sub(r"^www\.", "", host, flags=re.IGNORECASE)
    return host.split("/")[0].lower()


def is_likely_url(value: str) -> bool:
    cleaned = re.sub(r"^[^a-z0-9]+", "", value, flags=re.IGNORECASE)
    if re.match(r"^(?:https?://|www\.)", cleaned, re.IGNORECASE):
        return True
    host = cleaned.split("/")[0]
    if "." not in host:
        return False
    return host.rsplit(".", 1)[1].lower() in WEBSITE_TLDS


def clean_urls(values: Iterable[str]) -> List[str]:
    """Keep plausible website values, dropping image file names and duplicates."""
    candidates = (value.rstrip(".,;)") for value in values)
    return unique_values(
        value for value in candidates
        if value and not IMAGE_FILE_RE.search(value) and is_likely_url(value)
    )


def parse_label_value(line: str) -> str:
    """Text after the first label separator, or "" if there is none."""
    parts = LABEL_SEPARATOR_RE.split(line, maxsplit=1)
    if len(parts) < 2:
        return ""
    return parts[1].strip()


# =========================
# LINE PREDICATES
# =========================

def has_label(line: str, *kinds: str) -> bool:
    return any(LABEL_PATTERNS[kind].search(line) for kind in kinds)


def is_contact_line(line: str) -> bool:
    """Line whose content is a phone, fax, email or web channel."""
    return (
        has_label(line, "phone", "fax", "email", "web")
        or bool(PHONE_RE.search(line))
        or bool(CONTACT_INLINE_RE.match(line))
        or bool(EMAIL_RE.search(line))
        # bare "acme.com" lines
        or (" " not in line.strip() and is_likely_url(line))
    )


def is_hours_line(line: str) -> bool:
    return bool(HOURS_HEADER_RE.search(line) or HOURS_DAY_RE.search(line) or TIME_RE.search(line))


def is_mostly_uppercase(line: str) -> bool:
    letters = "".join(ch for ch in line if ch.isalpha())
    return len(letters) >= 6 and letters == letters.upper()


def is_likely_person_name(line: str) -> bool:
    if COMPANY_HINT_RE.search(line):
        return False
    if PERSON_HINT_RE.search(line):
        return True
    if re.search(r"\d", line):
        return False
    words = line.split()
    if len(words) < 2 or len(words) > 4:
        return False
    capitalized = [word for word in words if CAPITALIZED_WORD_RE.match(word)]
    return len(capitalized) >= 2


def strip_contact_from_address_line(line: str) -> str:
    """Cut a line at the first inline contact marker ("Tel.", "www.", ...)."""
    match = CONTACT_INLINE_RE.search(line)
    if not match:
        return line.strip()
    return line[:match.start()].strip()


def derive_label(line: str) -> Optional[str]:
    """
    Build a context label from an office/branch marker line.

    "Văn phòng: 12 Lê Lợi, TP. HCM" -> "office-hcm"; "Branch: Hanoi" -> "branch-hanoi".
    """
    lower = line.lower()
    base = ""
    if LABEL_PATTERNS["office"].search(line):
        base = "office"
    if LABEL_PATTERNS["branch"].search(line):
        base = "branch"

    location = ""
    for tag, keywords in LOCATION_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            location = tag

    if base and location:
        return f"{base}-{location}"
    return base or location or None


def split_inline_labels(line: str):
    """
    Yield (label, number) pairs from lines such as "T 030 1234567 · M 0170 7654321".

    Labels are normalized: Tel/Telefon -> T, Mobile -> M, otherwise upper-cased.
    """
    for part in INLINE_SEPARATOR_RE.split(line):
        part = part.strip()
        if not part:
            continue
        match = SHORT_LABEL_RE.match(part)
        if not match:
            continue
        raw = match.group(1).upper()
        label = SHORT_LABEL_ALIASES.get(raw, raw)
        for number in find_numbers(match.group(2)):
            yield label, number
