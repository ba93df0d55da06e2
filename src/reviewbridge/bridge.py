"""High-level entry point tying a review request to its Jira issues.

Typical pipeline script::

    bridge = ReviewBridge.from_environment()
    issues = bridge.find_issues(["WEB", "API"], search_branch=True)
    for issue in issues:
        print(bridge.issue_link(issue), issue.summary)
    bridge.transition_and_update(issues, "In Review", assignee={"name": "bot"})
    bridge.add_remote_link(issues, status=False)

No warnings or messages are emitted on the caller's behalf; the returned
booleans and issue lists are meant to drive whatever reporting the
pipeline already does.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from .batch import BatchRunner, Issues
from .config import BridgeConfig, load_config
from .issue import TrackedIssue
from .jira_rest import JiraRestClient
from .logging import StructuredLogger, configure_logging, get_logger
from .models import FieldSet, IssueRef, TrackerClient
from .platforms import ReviewPlatform, detect_platform
from .remote_link import DEFAULT_RELATIONSHIP
from .resolver import ReviewText, SearchConfig, resolve_keys
from .routing import TransitionRef


class ReviewBridge:
    def __init__(
        self,
        config: BridgeConfig,
        platform: ReviewPlatform,
        client: TrackerClient | None = None,
        logger: StructuredLogger | None = None,
    ):
        self.config = config
        self.platform = platform
        self.logger = logger or get_logger()
        self.api: TrackerClient = client or JiraRestClient(
            base_url=config.url,
            user=config.user,
            token=config.token,
            timeout=config.timeout,
        )
        self._runner = BatchRunner(self.api, self.logger)

    @classmethod
    def from_environment(
        cls,
        config_path: str | Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> ReviewBridge:
        cfg = load_config(config_path, env=env)
        logger = configure_logging(json_logging=cfg.logging_json_enabled, level=cfg.logging_level)
        return cls(cfg, detect_platform(env), logger=logger)

    # --- issue discovery --------------------------------------------------
    def search_config(
        self,
        search_title: bool | None = None,
        search_commits: bool | None = None,
        search_branch: bool | None = None,
    ) -> SearchConfig:
        return SearchConfig(
            title=self.config.search_title if search_title is None else search_title,
            commits=self.config.search_commits if search_commits is None else search_commits,
            branch=self.config.search_branch if search_branch is None else search_branch,
        )

    def find_keys(
        self,
        prefixes: str | Iterable[str] | None = None,
        *,
        search_title: bool | None = None,
        search_commits: bool | None = None,
        search_branch: bool | None = None,
    ) -> list[str]:
        search = self.search_config(search_title, search_commits, search_branch)
        text = ReviewText.from_platform(self.platform, include_commits=search.commits)
        return resolve_keys(self._prefixes(prefixes), text, search)

    def find_issues(
        self,
        prefixes: str | Iterable[str] | None = None,
        *,
        search_title: bool | None = None,
        search_commits: bool | None = None,
        search_branch: bool | None = None,
    ) -> list[IssueRef]:
        """Unique issues referenced by the review request.

        Raises :class:`~reviewbridge.errors.IssueNotFoundError` if any
        referenced key is unknown to Jira.
        """
        keys = self.find_keys(
            prefixes,
            search_title=search_title,
            search_commits=search_commits,
            search_branch=search_branch,
        )
        with self.logger.timed_operation("find_issues", keys=keys):
            return [self.api.find_issue(key) for key in keys]

    def _prefixes(self, prefixes: str | Iterable[str] | None) -> str | list[str]:
        if prefixes is None:
            return list(self.config.prefixes)
        if isinstance(prefixes, str):
            return prefixes
        return list(prefixes)

    # --- issue operations -------------------------------------------------
    def issue_link(self, issue: IssueRef | str) -> str:
        key = issue if isinstance(issue, str) else issue.key
        return self.config.browse_link(key)

    def wrap(self, issue: IssueRef) -> TrackedIssue:
        return TrackedIssue(issue, self.api, self.config.url, self.logger)

    def update(self, issues: Issues, **fields: Any) -> bool:
        return self._runner.update(issues, fields)

    def transition(self, issues: Issues, transition: TransitionRef, **fields: Any) -> bool:
        return self._runner.transition(issues, transition, fields)

    def split_transition_fields(
        self, issue: IssueRef, transition: TransitionRef, **fields: Any
    ) -> tuple[FieldSet, FieldSet]:
        return self._runner.split_transition_fields(issue, transition, fields)

    def transition_and_update(
        self, issues: Issues, transition: TransitionRef, **fields: Any
    ) -> bool:
        return self._runner.transition_and_update(issues, transition, fields)

    def add_remote_link(
        self,
        issues: Issues,
        *,
        status: Mapping[str, Any] | bool | None = None,
        relationship: str | None = DEFAULT_RELATIONSHIP,
        title: str | None = None,
    ) -> bool:
        """Link every issue back to the review request (idempotent per request)."""
        return self._runner.add_remote_link(
            issues,
            self.platform.request_url(),
            title if title is not None else self.platform.title(),
            self.platform.kind,
            relationship=relationship,
            status=status,
        )


__all__ = ["ReviewBridge"]
