"""Logic for loading, merging and validating configuration files."""

import copy
import re
from pathlib import Path
from typing import Any

import yaml

from vitedoc.deep_merge import deep_merge

# fmt: off
SAFE_HTML_TAGS: list[str] = [
    # Structural.
    "div", "section", "article", "aside", "header", "footer", "nav", "main",
    "figure", "figcaption", "details", "summary", "address", "dialog",
    # Inline formatting.
    "span", "em", "strong", "b", "i", "u", "s", "del", "ins", "mark", "sub",
    "sup", "small", "abbr", "cite", "q", "dfn", "kbd", "var", "samp", "time",
    # Text blocks.
    "p", "blockquote",
    # Media and links.
    "a", "img", "iframe", "picture", "source",
    # Lists.
    "ul", "ol", "li", "dl", "dt", "dd",
    # Tables.
    "table", "thead", "tbody", "tfoot", "tr", "th", "td", "caption",
    "colgroup", "col",
    # Code.
    "pre", "code",
    # Line breaks.
    "br", "hr", "wbr",
    # Headings.
    "h1", "h2", "h3", "h4", "h5", "h6",
]
# fmt: on

DEFAULT_CONFIG: dict[str, Any] = {
    "sanitizer": {
        "allowed_iframe_hosts": [],
    },
    "html": {
        "safe_tags": SAFE_HTML_TAGS,
    },
    "libraries": {
        "internal_names": [
            "rti",
            "vmservice_io",
            "metadata",
            "nativewrappers",
            "html_common",
            "dart2js_runtime_metrics",
        ],
        "internal_patterns": [r"^_", r"\._"],
        # Dotted names under these prefixes use hyphens as directory separators.
        "dotted_prefixes": ["dart."],
        # Internal duplicates mapped onto their canonical library name.
        "duplicate_prefixes": [
            {"internal": "dart.", "canonical": "dart:"},
            {"internal": "dart.dom.", "canonical": "dart:"},
        ],
    },
    "pages": {
        "outline_member_threshold": 50,
        "signature_wrap_width": 80,
        "default_code_language": "dart",
    },
    "output": {
        "managed_dirs": ["api", "topics", ".vitepress/generated"],
        "repository_url": "",
    },
}


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file, merge it with defaults and validate it."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        p = Path(path)
        if not p.exists():
            msg = f"Config file not found: {p}"
            raise SystemExit(msg)
        try:
            user_config = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in config file {p}: {e}"
            raise SystemExit(msg) from e
        if not isinstance(user_config, dict):
            msg = f"Config file {p} must contain a mapping at the top level"
            raise SystemExit(msg)
        config = deep_merge(config, user_config)
    validate_config(config)
    return config


def validate_config(config: dict[str, Any]) -> None:
    """Reject structural misconfiguration before any page is rendered."""
    for pattern in config["libraries"].get("internal_patterns") or []:
        try:
            re.compile(pattern)
        except re.error as e:
            msg = f"Invalid pattern in libraries.internal_patterns: {pattern!r} ({e})"
            raise SystemExit(msg) from e

    for entry in config["libraries"].get("duplicate_prefixes") or []:
        if not isinstance(entry, dict) or not {"internal", "canonical"} <= set(entry):
            msg = (
                "Each libraries.duplicate_prefixes entry needs "
                f"'internal' and 'canonical' keys, got: {entry!r}"
            )
            raise SystemExit(msg)

    width = config["pages"].get("signature_wrap_width")
    if not isinstance(width, int) or width <= 0:
        msg = f"pages.signature_wrap_width must be a positive integer, got: {width!r}"
        raise SystemExit(msg)
