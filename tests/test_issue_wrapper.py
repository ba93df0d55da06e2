from __future__ import annotations

from reviewbridge.issue import TrackedIssue
from reviewbridge.logging import StructuredLogger

from conftest import FakeTracker


def _wrap(tracker: FakeTracker, key: str) -> TrackedIssue:
    return TrackedIssue(
        tracker.issues[key],
        tracker,
        "https://jira.company.com/jira/",
        StructuredLogger(name="reviewbridge.test"),
    )


def test_browse_link(tracker: FakeTracker):
    issue = _wrap(tracker, "WEB-130")
    assert issue.browse_link == "https://jira.company.com/jira/browse/WEB-130"
    assert issue.summary == "Issue WEB-130"
    assert repr(issue) == "TrackedIssue('WEB-130')"


def test_update_with_no_fields_is_a_no_op(tracker: FakeTracker):
    assert _wrap(tracker, "WEB-130").update() is True
    assert tracker.calls == []


def test_update_sends_fields(tracker: FakeTracker):
    assert _wrap(tracker, "WEB-130").update(assignee={"name": "username"}) is True
    assert tracker.ops("update") == [("WEB-130", {"assignee": {"name": "username"}})]


def test_get_transition_id(tracker: FakeTracker):
    issue = _wrap(tracker, "WEB-130")
    assert issue.get_transition_id("in review") == "2"
    assert issue.get_transition_id("Reopen") is None


def test_transition_by_name_not_found_returns_false(tracker: FakeTracker):
    assert _wrap(tracker, "WEB-130").transition("Reopen") is False
    assert tracker.ops("transition") == []


def test_transition_and_update(tracker: FakeTracker):
    issue = _wrap(tracker, "WEB-131")
    assert issue.transition_and_update("In Review", summary="s", colour="red") is True
    assert tracker.ops("transition") == [
        ("WEB-131", {"transition": {"id": "2"}, "fields": {"summary": "s"}})
    ]
    assert tracker.ops("update") == [("WEB-131", {"colour": "red"})]


def test_split_transition_fields(tracker: FakeTracker):
    transition_fields, other_fields = _wrap(tracker, "WEB-131").split_transition_fields(
        2, assignee={"name": "username"}, customfield_11005="example"
    )
    assert transition_fields == {"assignee": {"name": "username"}}
    assert other_fields == {"customfield_11005": "example"}
