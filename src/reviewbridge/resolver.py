"""Resolve the issue keys a review request refers to.

Sources are searched in a fixed order (title, commit messages, branch name)
regardless of which ones are enabled; the description body is consulted
only when none of the enabled sources produced a key.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .keys import build_key_pattern, dedupe_keys, find_keys

if TYPE_CHECKING:
    from .platforms import ReviewPlatform


@dataclass
class SearchConfig:
    title: bool = True
    commits: bool = False
    branch: bool = False


@dataclass
class ReviewText:
    """Text of a review request, one entry per searchable source."""

    title: str = ""
    body: str = ""
    branch: str = ""
    commits: list[str] = field(default_factory=list)

    @classmethod
    def from_platform(
        cls, platform: ReviewPlatform, *, include_commits: bool = True
    ) -> ReviewText:
        # Commit messages usually cost an extra API round trip.
        return cls(
            title=platform.title() or "",
            body=platform.body() or "",
            branch=platform.branch_name() or "",
            commits=list(platform.commit_messages()) if include_commits else [],
        )


def _primary_matches(
    pattern: re.Pattern[str], text: ReviewText, config: SearchConfig
) -> list[str]:
    found: list[str] = []
    if config.title:
        found.extend(find_keys(pattern, text.title))
    if config.commits:
        for message in text.commits:
            found.extend(find_keys(pattern, message))
    if config.branch:
        found.extend(find_keys(pattern, text.branch))
    return found


def resolve_keys(
    prefixes: str | Iterable[str] | re.Pattern[str],
    text: ReviewText,
    config: SearchConfig | None = None,
) -> list[str]:
    """Return the deduplicated keys found in ``text``, in discovery order."""
    pattern = prefixes if isinstance(prefixes, re.Pattern) else build_key_pattern(prefixes)
    config = config or SearchConfig()
    found = _primary_matches(pattern, text, config)
    if not found:
        found = find_keys(pattern, text.body)
    return dedupe_keys(found)


__all__ = ["ReviewText", "SearchConfig", "resolve_keys"]
