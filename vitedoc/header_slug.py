"""Utility for generating slugs the way VitePress does for Markdown headers."""

import re
import unicodedata

SPECIAL_CHARS_RE = re.compile(r"[\s~`!@#$%^&*()\-_+=\[\]{}|\;:\"'“”‘’<>,.?/]+")
COMBINING_RE = re.compile(r"[\u0300-\u036f]")


def header_slug(s: str) -> str:
    """Slug for a heading: accents dropped, punctuation runs hyphenated, lower."""
    s = COMBINING_RE.sub("", unicodedata.normalize("NFKD", s))
    s = SPECIAL_CHARS_RE.sub("-", s)
    s = re.sub(r"-{2,}", "-", s).strip("-")
    if s[:1].isdigit():
        s = "_" + s
    return s.lower() or "section"
