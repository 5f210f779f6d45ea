"""
String-level helpers shared by Node, NodeList and the extractors.

None of these functions build an lxml tree: they work on markup or plain text
directly, so they stay cheap on fragments that were never materialized.
"""

import codecs
import html
import re
import unicodedata
import warnings
from typing import Iterable, Optional
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, UnicodeDammit

from .logger import get_module_logger

logger = get_module_logger("text")

# Literal opening tag, e.g. "<div" in '<div class="x">'. "<!DOCTYPE" and
# "</p>" do not match because '!' and '/' are outside the name class.
FIRST_TAG_PATTERN = re.compile(r'<([a-zA-Z0-9_-]+)')

WHITESPACE_PATTERN = re.compile(r'\s+')
DIGIT_RUN_PATTERN = re.compile(r'[0-9]+')

# Characters removed by Node.clear()
LAYOUT_CHARACTERS = str.maketrans('', '', '\n\r\t')

# Substrings that disqualify an href in is_valid_link()
FORBIDDEN_LINK_PARTS = ['\t', '\n', ' ', 'mailto:']

# Most mojibake comes from UTF-8 bytes decoded as windows-1252
MOJIBAKE_CHARSET = 'windows-1252'

# Tried in order on bytes that declare no charset
DEFAULT_BYTE_ENCODINGS = ['utf-8', MOJIBAKE_CHARSET]

# WHATWG encoding spec: browsers silently remap these charsets.
# https://encoding.spec.whatwg.org/#names-and-labels
WHATWG_CHARSET_MAP = {
    'iso-8859-1': 'windows-1252',
    'iso8859-1': 'windows-1252',
    'iso88591': 'windows-1252',
    'latin-1': 'windows-1252',
    'latin1': 'windows-1252',
    'us-ascii': 'windows-1252',
    'ascii': 'windows-1252',
    'iso-8859-9': 'windows-1254',
    'iso-8859-11': 'windows-874',
}


def detect_charset(raw_bytes: bytes) -> Optional[str]:
    """
    Detect the declared charset of raw HTML bytes.

    Scans the first 2048 bytes for <meta charset=...> or the legacy
    <meta http-equiv="Content-Type" content="...; charset=..."> form and
    applies the WHATWG browser mapping (e.g. iso-8859-1 → windows-1252).

    Returns the browser-equivalent charset, or None when nothing usable
    is declared.
    """
    head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

    charset = None
    m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
    if m:
        charset = m.group(1).strip().lower()

    if not charset:
        m = re.search(
            r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
            head_str, re.IGNORECASE
        )
        if m:
            charset = m.group(1).strip().lower()

    if not charset:
        return None

    charset = WHATWG_CHARSET_MAP.get(charset, charset)
    try:
        codecs.lookup(charset)
    except LookupError:
        return None
    return charset


def decode_markup(raw_bytes: bytes) -> str:
    """
    Decode raw HTML bytes to text.

    A declared charset wins. Otherwise UnicodeDammit sniffs a byte order
    mark, then tries UTF-8 and windows-1252 before any statistical guess,
    so undeclared legacy bytes keep their accented letters and quotes.
    """
    declared = detect_charset(raw_bytes)
    dammit = UnicodeDammit(
        raw_bytes,
        known_definite_encodings=[declared] if declared else [],
        user_encodings=DEFAULT_BYTE_ENCODINGS,
        is_html=True,
    )
    if dammit.unicode_markup is None:
        return raw_bytes.decode(MOJIBAKE_CHARSET, errors='replace')
    if dammit.original_encoding != declared:
        logger.debug(f"Decoded undeclared bytes as {dammit.original_encoding}")
    return dammit.unicode_markup


def fix_encoding(text: str) -> str:
    """
    Normalize text to canonical Unicode.

    Repairs windows-1252 mojibake with a round-trip (text → windows-1252
    bytes → UTF-8 text) when the round-trip succeeds, i.e. when the
    characters really were UTF-8 bytes misread as windows-1252. Text that
    does not round-trip is left as it is. The result is NFC-composed.
    """
    if not text.isascii():
        try:
            text = text.encode(MOJIBAKE_CHARSET).decode('utf-8')
        except (UnicodeEncodeError, UnicodeDecodeError):
            pass
    return unicodedata.normalize('NFC', text)


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return WHITESPACE_PATTERN.sub(' ', text).strip()


def strip_tags(markup: str) -> str:
    """Remove every tag from markup, keeping the text between them."""
    with warnings.catch_warnings():
        # Plain-text fragments such as "/relative" look like paths to bs4
        warnings.simplefilter('ignore', MarkupResemblesLocatorWarning)
        return BeautifulSoup(markup, 'html.parser').get_text()


def normalize_text(markup: str) -> str:
    """
    Markup → plain text: decode entities, strip tags, collapse whitespace,
    trim, then normalize the encoding.

    Entities are decoded before tags are stripped, so escaped tags such as
    "&lt;b&gt;" are removed too.
    """
    text = strip_tags(html.unescape(markup))
    return fix_encoding(collapse_whitespace(text))


def escape_text(text: str) -> str:
    """Turn plain text into markup that normalize_text() maps back to it."""
    return html.escape(text, quote=False)


def remove_layout_characters(markup: str) -> str:
    """Drop newline, carriage-return and tab characters (nothing else)."""
    return markup.translate(LAYOUT_CHARACTERS)


def first_tag_name(markup: str) -> Optional[str]:
    """Lower-cased name of the first opening tag in markup, or None."""
    m = FIRST_TAG_PATTERN.search(markup)
    if m:
        return m.group(1).lower()
    return None


def digit_runs(text: str) -> list[str]:
    """All runs of ASCII digits, in order."""
    return DIGIT_RUN_PATTERN.findall(text)


def leading_number(text: str) -> float:
    """
    Parse the longest numeric prefix of text ("12.5.3" → 12.5).

    Returns 0.0 when text has no numeric prefix.
    """
    m = re.match(r'[0-9]*(?:\.[0-9]*)?', text)
    value = m.group(0) if m else ''
    if value in ('', '.'):
        return 0.0
    return float(value)


def _is_well_formed_url(value: str) -> bool:
    """Absolute URL with a scheme and a host."""
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc)


def is_valid_link(
    href: str,
    base_url: str = "http://example.com",
    ignored_extensions: Iterable[str] = ('jpg', 'jpeg', 'gif', 'png')
) -> bool:
    """
    Decide whether an href points at a crawlable page.

    Rejected:
      - empty values and bare "#"
      - values that are not a URL, neither alone nor appended to base_url
      - values containing a tab, newline, space or "mailto:"
      - URLs without a path component
      - paths ending in an image extension (ignored_extensions)
    """
    if not href or href == '#':
        return False

    if not _is_well_formed_url(href) and not _is_well_formed_url(base_url + href):
        return False

    for item in FORBIDDEN_LINK_PARTS:
        if item in href:
            return False

    try:
        path = urlsplit(href).path
    except ValueError:
        return False
    if not path:
        return False

    extension = path.split('.')[-1].lower()
    if extension in {ext.lower() for ext in ignored_extensions}:
        return False

    return True
