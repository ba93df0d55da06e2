"""Remote-link payloads pointing a Jira issue at a review request."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

DEFAULT_RELATIONSHIP = "relates to"


@dataclass(frozen=True)
class LinkApplication:
    type: str
    name: str
    icon_url: str


APPLICATIONS: dict[str, LinkApplication] = {
    "github": LinkApplication("com.github", "GitHub", "https://github.com/favicon.ico"),
    "gitlab": LinkApplication("com.gitlab", "GitLab", "https://gitlab.com/favicon.ico"),
}


def _status_object(status: Mapping[str, Any] | bool | None) -> dict[str, Any] | None:
    if status is None:
        return None
    if isinstance(status, bool):
        return {"resolved": status}
    return dict(status)


def build_remote_link(
    url: str,
    title: str,
    platform_kind: str,
    *,
    relationship: str | None = DEFAULT_RELATIONSHIP,
    status: Mapping[str, Any] | bool | None = None,
) -> dict[str, Any]:
    """Payload for ``POST /issue/{key}/remotelink``.

    The review URL doubles as ``globalId`` so that posting again for the same
    request updates the existing link instead of adding another one.
    """
    try:
        app = APPLICATIONS[platform_kind]
    except KeyError:
        raise ValueError(f"unsupported review platform: {platform_kind!r}") from None
    link_object: dict[str, Any] = {
        "url": url,
        "title": title,
        "icon": {"url16x16": app.icon_url, "title": app.name},
    }
    status_obj = _status_object(status)
    if status_obj is not None:
        link_object["status"] = status_obj
    return {
        "globalId": url,
        "application": {"type": app.type, "name": app.name},
        "relationship": relationship or DEFAULT_RELATIONSHIP,
        "object": link_object,
    }


__all__ = ["APPLICATIONS", "DEFAULT_RELATIONSHIP", "LinkApplication", "build_remote_link"]
