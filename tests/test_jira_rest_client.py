import json
from dataclasses import dataclass
from typing import Any

import pytest

from reviewbridge.errors import IssueNotFoundError, JiraAPIError
from reviewbridge.jira_rest import JiraRestClient
from reviewbridge.models import IssueRef

BASE = "https://jira.company.com/jira"


@dataclass
class _DummyResponse:
    status_code: int
    payload: Any

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    @property
    def text(self) -> str:
        payload = self.payload
        if payload is None:
            return ""
        if isinstance(payload, (dict, list)):
            return json.dumps(payload)
        return str(payload)


class _DummySession:
    def __init__(self, responses: list[_DummyResponse]):
        self._responses = responses
        self.request_log: list[tuple[str, str, dict[str, Any]]] = []
        self.headers: dict[str, str] = {}
        self.auth: Any = None

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        json: Any | None = None,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> _DummyResponse:
        self.request_log.append((method, url, {"json": json, "params": params, "timeout": timeout}))
        if not self._responses:
            raise AssertionError("No response queued for request")
        return self._responses.pop(0)


def _client(session: _DummySession) -> JiraRestClient:
    return JiraRestClient(base_url=BASE + "/", user="username", token="secret", session=session)  # type: ignore[arg-type]


def test_client_sets_basic_auth_and_headers():
    session = _DummySession([])
    _client(session)
    assert session.auth == ("username", "secret")
    assert session.headers["Accept"] == "application/json"


def test_find_issue():
    session = _DummySession(
        [
            _DummyResponse(
                200,
                {
                    "id": "10042",
                    "key": "WEB-130",
                    "self": f"{BASE}/rest/api/2/issue/10042",
                    "fields": {"summary": "Do it", "status": {"name": "In Progress"}},
                },
            )
        ]
    )
    issue = _client(session).find_issue("WEB-130")

    assert issue.key == "WEB-130"
    assert issue.id == "10042"
    assert issue.summary == "Do it"
    assert issue.status_name == "In Progress"
    assert session.request_log[0][:2] == ("GET", f"{BASE}/rest/api/2/issue/WEB-130")


def test_find_issue_not_found():
    session = _DummySession([_DummyResponse(404, {"errorMessages": ["Issue does not exist"]})])
    with pytest.raises(IssueNotFoundError) as excinfo:
        _client(session).find_issue("WEB-404")
    assert excinfo.value.key == "WEB-404"
    assert excinfo.value.status == 404


def test_list_transitions_expands_fields():
    session = _DummySession(
        [
            _DummyResponse(
                200,
                {
                    "transitions": [
                        {
                            "id": "2",
                            "name": "In Review",
                            "fields": {"assignee": {"required": False}, "summary": {}},
                        },
                        {"id": "31", "name": "Done"},
                    ]
                },
            )
        ]
    )
    transitions = _client(session).list_transitions(IssueRef(key="WEB-130"))

    method, url, extra = session.request_log[0]
    assert method == "GET"
    assert url == f"{BASE}/rest/api/2/issue/WEB-130/transitions"
    assert extra["params"] == {"expand": "transitions.fields"}
    assert [(t.id, t.name) for t in transitions] == [("2", "In Review"), ("31", "Done")]
    assert transitions[0].fields == frozenset({"assignee", "summary"})
    assert transitions[1].fields is None


def test_submit_transition_posts_payload():
    session = _DummySession([_DummyResponse(204, None)])
    payload = {
        "transition": {"id": "2"},
        "fields": {"assignee": {"name": "username"}, "customfield_11005": "example"},
    }
    assert _client(session).submit_transition(IssueRef(key="WEB-131"), payload) is True
    method, url, extra = session.request_log[0]
    assert (method, url) == ("POST", f"{BASE}/rest/api/2/issue/WEB-131/transitions")
    assert extra["json"] == payload


def test_update_fields_puts_fields_object():
    session = _DummySession([_DummyResponse(204, None)])
    fields = {"assignee": {"name": "username"}, "customfield_11005": "example"}
    assert _client(session).update_fields(IssueRef(key="WEB-132"), fields) is True
    method, url, extra = session.request_log[0]
    assert (method, url) == ("PUT", f"{BASE}/rest/api/2/issue/WEB-132")
    assert extra["json"] == {"fields": fields}


def test_create_remote_link():
    session = _DummySession([_DummyResponse(201, {"id": 10000, "self": "x"})])
    payload = {"globalId": "https://github.com/test/pull/1234", "object": {"url": "u", "title": "t"}}
    assert _client(session).create_remote_link(IssueRef(key="WEB-134"), payload) is True
    assert session.request_log[0][1] == f"{BASE}/rest/api/2/issue/WEB-134/remotelink"


def test_error_status_raises_with_details():
    session = _DummySession([_DummyResponse(400, {"errors": {"colour": "Field cannot be set"}})])
    with pytest.raises(JiraAPIError) as excinfo:
        _client(session).update_fields(IssueRef(key="WEB-133"), {"colour": "red"})
    assert excinfo.value.status == 400
    assert "cannot be set" in (excinfo.value.response_text or "")


def test_non_json_body_is_returned_as_text():
    session = _DummySession([_DummyResponse(200, ValueError("not json"))])
    # text of an exception payload is its str(); json() raises ValueError
    assert _client(session)._request("GET", "/serverInfo") == "not json"
