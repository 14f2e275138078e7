"""
Text utilities for German product copy.

Used by every cleanup pass: HTML stripping, diacritic folding,
whitespace collapsing, whole-word matching and tag token normalization.
"""

import re
import unicodedata
from typing import Optional
from bs4 import BeautifulSoup

_WHITESPACE_RE = re.compile(r"\s+")
_TAG_TOKEN_RE = re.compile(r"[^a-z0-9-]")


def strip_html(html: Optional[str]) -> str:
    """
    Plain text of an HTML fragment.

    Entities are decoded, script and style contents dropped, whitespace
    (including non-breaking spaces) collapsed.

    - "<p>Pinsel <b>Set</b></p>" → "Pinsel Set"
    - "Pinsel&nbsp;&amp;&nbsp;Set" → "Pinsel & Set"
    """
    if not html:
        return ""
    soup = BeautifulSoup(str(html), "html.parser")
    for tag in soup.find_all(["script", "style"]):
        tag.decompose()
    return collapse_whitespace(soup.get_text())


def collapse_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", str(text)).strip()


def fold_diacritics(text: Optional[str]) -> str:
    """
    Remove accent marks, keep base characters.

    - "Häkelnadel" → "Hakelnadel"
    - "Chamäleon" → "Chamaleon"

    NFD decomposition separates base chars from accents; the accents
    (Unicode category 'Mn') are dropped. "ß" has no decomposition and is
    kept as is.
    """
    if not text:
        return ""
    normalized = unicodedata.normalize("NFD", str(text))
    return "".join(c for c in normalized if unicodedata.category(c) != "Mn")


def normalize_tag(tag: Optional[str]) -> str:
    """
    Normalize a tag to the storefront's tag alphabet.

    Lowercase, fold diacritics, keep only [a-z0-9-].

    - "Acryl Farbe" → "acrylfarbe"
    - "Häkeln" → "hakeln"
    """
    if not tag:
        return ""
    return _TAG_TOKEN_RE.sub("", fold_diacritics(str(tag).lower()))


def word_pattern(term: str, ignore_case: bool = True) -> re.Pattern:
    """Compile a whole-word pattern for a literal term."""
    flags = re.IGNORECASE if ignore_case else 0
    return re.compile(rf"\b{re.escape(term)}\b", flags)


def contains_word(text: Optional[str], term: str, ignore_case: bool = True) -> bool:
    """True if term occurs in text as a whole word."""
    if not text or not term:
        return False
    return word_pattern(term, ignore_case).search(str(text)) is not None


def to_title_case(text: str) -> str:
    """
    Capitalize each space-separated word.

    "PINSEL SET 6 TEILIG" → "Pinsel Set 6 Teilig"
    """
    return " ".join(
        word[:1].upper() + word[1:].lower() if word else word
        for word in text.split(" ")
    )


def truncate_at_word(text: str, limit: int) -> str:
    """
    Cut text to at most `limit` characters, ending on a whole word.

    Falls back to a hard cut when the first `limit` characters hold no space.
    """
    if len(text) <= limit:
        return text
    cut = text[:limit]
    last_space = cut.rfind(" ")
    if last_space > 0:
        cut = cut[:last_space]
    return cut.rstrip()
