"""Utilities for making names safe for file paths and in-page anchors."""

import re

# Characters that are invalid or problematic on common file systems.
UNSAFE_FILE_CHARS_RE = re.compile(r'[:<>|?*"/\\]')
NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
MULTI_DASH_RE = re.compile(r"-+")


def strip_generics(name: str) -> str:
    """Drop generic parameters: ``get<T>`` -> ``get``."""
    idx = name.find("<")
    return name if idx == -1 else name[:idx]


def sanitize_file_name(name: str) -> str:
    """Make a stable file name: generics stripped, illegal characters hyphenated."""
    name = strip_generics(name)
    name = UNSAFE_FILE_CHARS_RE.sub("-", name)
    name = MULTI_DASH_RE.sub("-", name)
    return name.strip("-")


def sanitize_anchor(value: str) -> str:
    """Make an anchor id: non-alphanumerics hyphenated, lower-cased."""
    value = NON_ALNUM_RE.sub("-", value)
    value = MULTI_DASH_RE.sub("-", value)
    return value.strip("-").lower()
