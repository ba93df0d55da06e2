from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests

from .errors import IssueNotFoundError, JiraAPIError
from .models import FieldSet, IssueRef, Transition

API_PREFIX = "/rest/api/2"
USER_AGENT = "reviewbridge/0.3.0"
HTTP_ERROR_STATUS = 400
HTTP_NOT_FOUND = 404
DEFAULT_TIMEOUT = 30.0


@dataclass
class JiraRestClient:
    """Lightweight Jira REST client covering the calls reviewbridge needs.

    Every call is a single blocking request; failures surface as
    :class:`JiraAPIError` (or ``requests.RequestException`` for transport
    problems) and are never retried here.
    """

    base_url: str
    user: str
    token: str
    timeout: float = DEFAULT_TIMEOUT
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._session.auth = (self.user, self.token)
        self._session.headers.setdefault("Accept", "application/json")
        self._session.headers.setdefault("Content-Type", "application/json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    # ---- REST helpers -------------------------------------------------
    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{API_PREFIX}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        url = self._url(path)
        response = self._session.request(
            method,
            url,
            params=params,
            json=json_body,
            headers=self._session.headers,
            timeout=self.timeout,
        )
        if response.status_code >= HTTP_ERROR_STATUS:
            raise JiraAPIError(
                f"Jira API {method} {url} failed with {response.status_code}",
                status=response.status_code,
                response_text=response.text,
            )
        if response.text:
            try:
                return response.json()
            except ValueError:
                return response.text
        return None

    # ---- Issue operations --------------------------------------------
    def find_issue(self, key: str) -> IssueRef:
        try:
            data = self._request("GET", f"/issue/{key}")
        except JiraAPIError as exc:
            if exc.status == HTTP_NOT_FOUND:
                raise IssueNotFoundError(key, response_text=exc.response_text) from exc
            raise
        if not isinstance(data, Mapping):
            raise IssueNotFoundError(key)
        return IssueRef.from_record(data)

    def list_transitions(self, issue: IssueRef) -> list[Transition]:
        """Transitions currently available on ``issue``, with screen fields."""
        data = self._request(
            "GET",
            f"/issue/{issue.key}/transitions",
            params={"expand": "transitions.fields"},
        )
        entries = data.get("transitions") if isinstance(data, Mapping) else None
        out: list[Transition] = []
        for entry in entries or []:
            if isinstance(entry, Mapping):
                out.append(Transition.from_record(entry))
        return out

    def submit_transition(self, issue: IssueRef, payload: Mapping[str, Any]) -> bool:
        self._request("POST", f"/issue/{issue.key}/transitions", json_body=dict(payload))
        return True

    def update_fields(self, issue: IssueRef, fields: FieldSet) -> bool:
        self._request("PUT", f"/issue/{issue.key}", json_body={"fields": dict(fields)})
        return True

    def create_remote_link(self, issue: IssueRef, payload: Mapping[str, Any]) -> bool:
        self._request("POST", f"/issue/{issue.key}/remotelink", json_body=dict(payload))
        return True


__all__ = ["JiraRestClient", "API_PREFIX"]
