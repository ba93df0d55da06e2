"""Pytest configuration for reviewbridge tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`), and provides an
in-memory tracker that records every call the batch layer makes.
"""

from __future__ import annotations

import sys
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

_TEST_START_TIMES: dict[str, float] = {}
_TEST_DURATIONS: list[tuple[str, float]] = []

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from reviewbridge.errors import IssueNotFoundError, JiraAPIError  # noqa: E402
from reviewbridge.models import IssueRef, Transition  # noqa: E402

_CONNECTION_VARS = (
    "JIRA_URL",
    "JIRA_USER",
    "JIRA_API_TOKEN",
    "DANGER_JIRA_URL",
    "DANGER_JIRA_USER",
    "DANGER_JIRA_API_TOKEN",
    "JIRA_BASE_URL",
    "JIRA_EMAIL",
    "JIRA_TOKEN",
    "REVIEWBRIDGE_PREFIXES",
    "REVIEWBRIDGE_LOG_JSON",
    "REVIEWBRIDGE_LOG_LEVEL",
    "REVIEWBRIDGE_QUIET",
    "GITLAB_CI",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in _CONNECTION_VARS:
        monkeypatch.delenv(var, raising=False)


class FakeTracker:
    """In-memory stand-in for JiraRestClient.

    ``fail`` maps an issue key to the set of operations that should raise a
    JiraAPIError for it.
    """

    def __init__(
        self,
        issues: Mapping[str, IssueRef] | None = None,
        transitions: Mapping[str, list[Transition]] | None = None,
        fail: Mapping[str, set[str]] | None = None,
    ):
        self.issues = dict(issues or {})
        self.transitions = dict(transitions or {})
        self.fail = dict(fail or {})
        self.calls: list[tuple[str, str, Any]] = []

    def _maybe_fail(self, op: str, key: str) -> None:
        if op in self.fail.get(key, set()):
            raise JiraAPIError(f"Jira API {op} {key} failed with 500", status=500)

    def find_issue(self, key: str) -> IssueRef:
        self.calls.append(("find", key, None))
        for known, issue in self.issues.items():
            if known.upper() == key.upper():
                return issue
        raise IssueNotFoundError(key)

    def list_transitions(self, issue: IssueRef) -> list[Transition]:
        self.calls.append(("list_transitions", issue.key, None))
        self._maybe_fail("list_transitions", issue.key)
        return list(self.transitions.get(issue.key, []))

    def submit_transition(self, issue: IssueRef, payload: Mapping[str, Any]) -> bool:
        self.calls.append(("transition", issue.key, dict(payload)))
        self._maybe_fail("transition", issue.key)
        return True

    def update_fields(self, issue: IssueRef, fields: Mapping[str, Any]) -> bool:
        self.calls.append(("update", issue.key, dict(fields)))
        self._maybe_fail("update", issue.key)
        return True

    def create_remote_link(self, issue: IssueRef, payload: Mapping[str, Any]) -> bool:
        self.calls.append(("remote_link", issue.key, dict(payload)))
        self._maybe_fail("remote_link", issue.key)
        return True

    def ops(self, name: str) -> list[tuple[str, Any]]:
        return [(key, data) for op, key, data in self.calls if op == name]


REVIEW_TRANSITIONS = [
    Transition(id="2", name="In Review", fields=frozenset({"assignee", "summary"})),
    Transition(id="31", name="Done", fields=None),
]


@pytest.fixture
def tracker() -> FakeTracker:
    issues = {
        key: IssueRef(key=key, id=str(100 + n), fields={"summary": f"Issue {key}"})
        for n, key in enumerate(("WEB-130", "WEB-131", "WEB-132", "WEB-133"))
    }
    transitions = {key: list(REVIEW_TRANSITIONS) for key in issues}
    return FakeTracker(issues=issues, transitions=transitions)


# --- Timing utilities to help identify slow/stalling tests ---


def pytest_runtest_setup(item):  # type: ignore
    _TEST_START_TIMES[item.nodeid] = time.perf_counter()


def pytest_runtest_teardown(item):  # type: ignore
    start = _TEST_START_TIMES.pop(item.nodeid, None)
    if start is not None:
        duration = time.perf_counter() - start
        _TEST_DURATIONS.append((item.nodeid, duration))


def pytest_sessionfinish(session, exitstatus):  # type: ignore
    if not _TEST_DURATIONS:
        return
    slow = sorted(_TEST_DURATIONS, key=lambda x: x[1], reverse=True)[:10]
    print("\n=== Slowest Tests (top 10) ===")
    for nodeid, secs in slow:
        print(f"{secs:0.3f}s  {nodeid}")
    total_time = sum(d for _, d in _TEST_DURATIONS)
    print(
        f"Total recorded test time: {total_time:0.3f}s over {len(_TEST_DURATIONS)} tests"
    )
