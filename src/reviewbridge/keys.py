"""Issue-key matching.

A key is ``PREFIX-NUMBER`` where ``PREFIX`` is one of the configured Jira
project keys. Matching is lexical and case-insensitive; the text keeps its
original casing in the results.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

# Never matches: used when no project prefix is configured.
_MATCH_NOTHING = re.compile(r"(?!)")


def normalize_prefixes(prefixes: str | Iterable[str] | None) -> list[str]:
    if prefixes is None:
        return []
    if isinstance(prefixes, str):
        prefixes = [prefixes]
    out: list[str] = []
    seen: set[str] = set()
    for raw in prefixes:
        cleaned = str(raw).strip()
        if cleaned and cleaned.upper() not in seen:
            seen.add(cleaned.upper())
            out.append(cleaned)
    return out


def build_key_pattern(prefixes: str | Iterable[str] | None) -> re.Pattern[str]:
    """Compile a matcher for ``(P1|P2|...)-[0-9]+``.

    The prefix must not continue a longer word (``XWEB-1`` is not a ``WEB``
    key) but may directly follow a number, so ``WEB-12WEB-13`` holds two
    keys. The number is always taken in full.
    """
    cleaned = normalize_prefixes(prefixes)
    if not cleaned:
        return _MATCH_NOTHING
    alternation = "|".join(re.escape(p) for p in cleaned)
    return re.compile(rf"(?<![A-Za-z])(?:{alternation})-[0-9]+", re.IGNORECASE)


def find_keys(pattern: re.Pattern[str], text: str | None) -> list[str]:
    if not text:
        return []
    return [m.group(0) for m in pattern.finditer(text)]


def dedupe_keys(keys: Iterable[str]) -> list[str]:
    """Drop keys equal ignoring case, keeping first spelling and order."""
    seen: set[str] = set()
    out: list[str] = []
    for key in keys:
        folded = key.casefold()
        if folded in seen:
            continue
        seen.add(folded)
        out.append(key)
    return out


__all__ = ["build_key_pattern", "dedupe_keys", "find_keys", "normalize_prefixes"]
