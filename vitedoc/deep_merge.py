"""Logic for deep merging configuration dictionaries."""

from typing import Any

# List-valued keys that extend the defaults instead of replacing them.
ADDITIVE_KEYS = frozenset({"allowed_iframe_hosts", "internal_names"})


def _union(existing: list[Any], extra: list[Any]) -> list[str]:
    return sorted({str(v) for v in existing} | {str(v) for v in extra})


def deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` overlaid with ``update``; neither input is modified.

    Mappings merge key by key. A list in ``update`` replaces the default list,
    unless its key is one of ADDITIVE_KEYS: those are unioned and sorted.
    """
    merged = dict(base)
    for key, incoming in update.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(incoming, dict):
            merged[key] = deep_merge(current, incoming)
        elif key in ADDITIVE_KEYS and isinstance(current, list) and isinstance(incoming, list):
            merged[key] = _union(current, incoming)
        else:
            merged[key] = incoming
    return merged
