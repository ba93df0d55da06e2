"""Review-platform sources (GitHub pull requests, GitLab merge requests).

Exactly one platform is active per run. :func:`detect_platform` picks it
once from the CI environment; callers then pass the resulting object
around instead of probing for a platform at every call site.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Protocol

import requests

from .errors import PlatformError

DEFAULT_GITHUB_API_URL = "https://api.github.com"
USER_AGENT = "reviewbridge/0.3.0"
HTTP_ERROR_STATUS = 400
PER_PAGE = 100


class ReviewPlatform(Protocol):
    kind: ClassVar[str]

    def title(self) -> str: ...

    def body(self) -> str: ...

    def branch_name(self) -> str: ...

    def commit_messages(self) -> list[str]: ...

    def request_url(self) -> str: ...


def _paginate(
    session: requests.Session, url: str, *, headers: dict[str, str], timeout: float
) -> list[Any]:
    params: dict[str, Any] = {"per_page": PER_PAGE, "page": 1}
    results: list[Any] = []
    while True:
        try:
            response = session.get(url, params=dict(params), headers=headers, timeout=timeout)
        except requests.RequestException as exc:
            raise PlatformError(f"GET {url} failed: {exc}") from exc
        if response.status_code >= HTTP_ERROR_STATUS:
            raise PlatformError(f"GET {url} failed with {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise PlatformError(f"GET {url} returned invalid JSON") from exc
        if not isinstance(data, list):
            break
        results.extend(data)
        if len(data) < PER_PAGE:
            break
        params["page"] += 1
    return results


def _fetch_pages(
    session: requests.Session | None, url: str, *, headers: dict[str, str], timeout: float
) -> list[Any]:
    if session is not None:
        return _paginate(session, url, headers=headers, timeout=timeout)
    with requests.Session() as owned:
        return _paginate(owned, url, headers=headers, timeout=timeout)


@dataclass
class GitHubReview:
    """A GitHub pull request, usually read from the Actions event payload."""

    kind: ClassVar[str] = "github"

    pr_title: str
    pr_body: str
    head_ref: str
    html_url: str
    repo: str | None = None
    number: int | None = None
    token: str | None = None
    api_url: str = DEFAULT_GITHUB_API_URL
    commits: list[str] | None = None
    timeout: float = 30.0
    session: requests.Session | None = field(default=None, repr=False)

    def title(self) -> str:
        return self.pr_title

    def body(self) -> str:
        return self.pr_body

    def branch_name(self) -> str:
        return self.head_ref

    def request_url(self) -> str:
        return self.html_url

    def commit_messages(self) -> list[str]:
        if self.commits is not None:
            return list(self.commits)
        if not self.repo or self.number is None:
            return []
        headers = {"Accept": "application/vnd.github+json", "User-Agent": USER_AGENT}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        url = f"{self.api_url.rstrip('/')}/repos/{self.repo}/pulls/{self.number}/commits"
        entries = _fetch_pages(self.session, url, headers=headers, timeout=self.timeout)
        messages: list[str] = []
        for entry in entries:
            commit = entry.get("commit") if isinstance(entry, dict) else None
            if isinstance(commit, dict) and isinstance(commit.get("message"), str):
                messages.append(commit["message"])
        return messages

    @classmethod
    def from_event(
        cls, event: Mapping[str, Any], env: Mapping[str, str] | None = None
    ) -> GitHubReview:
        env = os.environ if env is None else env
        pr = event.get("pull_request")
        if not isinstance(pr, Mapping):
            raise PlatformError("GitHub event payload has no pull_request object")
        head = pr.get("head") if isinstance(pr.get("head"), Mapping) else {}
        number = pr.get("number")
        return cls(
            pr_title=str(pr.get("title") or ""),
            pr_body=str(pr.get("body") or ""),
            head_ref=str(head.get("ref") or ""),
            html_url=str(pr.get("html_url") or ""),
            repo=env.get("GITHUB_REPOSITORY"),
            number=number if isinstance(number, int) else None,
            token=env.get("GITHUB_TOKEN") or env.get("GH_TOKEN"),
            api_url=env.get("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL,
        )

    @classmethod
    def from_environment(cls, env: Mapping[str, str] | None = None) -> GitHubReview:
        env = os.environ if env is None else env
        event_path = env.get("GITHUB_EVENT_PATH")
        if not event_path:
            raise PlatformError("GITHUB_EVENT_PATH is not set; not running in GitHub Actions?")
        try:
            event = json.loads(Path(event_path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PlatformError(f"cannot read GitHub event payload {event_path}: {exc}") from exc
        return cls.from_event(event, env)


@dataclass
class GitLabReview:
    """A GitLab merge request, read from merge-request pipeline variables."""

    kind: ClassVar[str] = "gitlab"

    mr_title: str
    mr_description: str
    source_branch: str
    web_url: str
    api_url: str | None = None
    project_id: str | None = None
    iid: str | None = None
    token: str | None = None
    job_token: str | None = None
    commits: list[str] | None = None
    timeout: float = 30.0
    session: requests.Session | None = field(default=None, repr=False)

    def title(self) -> str:
        return self.mr_title

    def body(self) -> str:
        return self.mr_description

    def branch_name(self) -> str:
        return self.source_branch

    def request_url(self) -> str:
        return self.web_url

    def commit_messages(self) -> list[str]:
        if self.commits is not None:
            return list(self.commits)
        if not (self.api_url and self.project_id and self.iid):
            return []
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if self.token:
            headers["PRIVATE-TOKEN"] = self.token
        elif self.job_token:
            headers["JOB-TOKEN"] = self.job_token
        url = (
            f"{self.api_url.rstrip('/')}/projects/{self.project_id}"
            f"/merge_requests/{self.iid}/commits"
        )
        entries = _fetch_pages(self.session, url, headers=headers, timeout=self.timeout)
        return [
            e["message"] for e in entries if isinstance(e, dict) and isinstance(e.get("message"), str)
        ]

    @classmethod
    def from_environment(cls, env: Mapping[str, str] | None = None) -> GitLabReview:
        env = os.environ if env is None else env
        iid = env.get("CI_MERGE_REQUEST_IID")
        project_url = env.get("CI_MERGE_REQUEST_PROJECT_URL") or env.get("CI_PROJECT_URL")
        if not iid or not project_url:
            raise PlatformError(
                "CI_MERGE_REQUEST_IID is not set; the job must run in a merge request pipeline"
            )
        return cls(
            mr_title=env.get("CI_MERGE_REQUEST_TITLE", ""),
            mr_description=env.get("CI_MERGE_REQUEST_DESCRIPTION", ""),
            source_branch=env.get("CI_MERGE_REQUEST_SOURCE_BRANCH_NAME", ""),
            web_url=f"{project_url.rstrip('/')}/-/merge_requests/{iid}",
            api_url=env.get("CI_API_V4_URL"),
            project_id=env.get("CI_MERGE_REQUEST_PROJECT_ID") or env.get("CI_PROJECT_ID"),
            iid=iid,
            token=env.get("GITLAB_TOKEN"),
            job_token=env.get("CI_JOB_TOKEN"),
        )


def detect_platform(env: Mapping[str, str] | None = None) -> ReviewPlatform:
    """GitLab when running under GitLab CI, GitHub otherwise."""
    env = os.environ if env is None else env
    if env.get("GITLAB_CI"):
        return GitLabReview.from_environment(env)
    return GitHubReview.from_environment(env)


__all__ = ["GitHubReview", "GitLabReview", "ReviewPlatform", "detect_platform"]
