"""reviewbridge - link pull/merge requests to Jira issues from CI.

High-level public API:

from reviewbridge import ReviewBridge

bridge = ReviewBridge.from_environment()
issues = bridge.find_issues('WEB', search_branch=True)
bridge.transition_and_update(issues, 'In Review', assignee={'name': 'ci-bot'})
bridge.add_remote_link(issues, status=False)

The lower-level pieces (``resolve_keys``, ``split_fields``, ``BatchRunner``)
are importable on their own for callers that bring their own tracker client.
"""

from __future__ import annotations

from .batch import BatchRunner
from .bridge import ReviewBridge
from .config import BridgeConfig, load_config
from .errors import ConfigError, IssueNotFoundError, JiraAPIError, PlatformError
from .issue import TrackedIssue
from .jira_rest import JiraRestClient
from .keys import build_key_pattern
from .models import IssueRef, Transition
from .platforms import GitHubReview, GitLabReview, detect_platform
from .remote_link import build_remote_link
from .resolver import ReviewText, SearchConfig, resolve_keys
from .routing import split_fields

# Version constant (keep in sync with pyproject.toml)
__version__ = "0.3.0"

__all__ = [
    "BatchRunner",
    "BridgeConfig",
    "ConfigError",
    "GitHubReview",
    "GitLabReview",
    "IssueNotFoundError",
    "IssueRef",
    "JiraAPIError",
    "JiraRestClient",
    "PlatformError",
    "ReviewBridge",
    "ReviewText",
    "SearchConfig",
    "TrackedIssue",
    "Transition",
    "build_key_pattern",
    "build_remote_link",
    "detect_platform",
    "load_config",
    "resolve_keys",
    "split_fields",
    "__version__",
]
