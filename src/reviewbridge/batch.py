"""Apply issue operations across one or many issues.

Every operation attempts all issues, whatever happened to the previous
ones, and reports a single boolean: True iff every issue succeeded.
Transport failures on an issue count as False for that issue and are
logged; they never abort the batch.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

import requests

from .errors import JiraAPIError, classify_error
from .logging import StructuredLogger, get_logger
from .models import FieldSet, IssueRef, TrackerClient
from .remote_link import DEFAULT_RELATIONSHIP, build_remote_link
from .routing import (
    TransitionRef,
    find_transition,
    is_transition_name,
    resolve_transition,
    resolve_transition_id,
    split_fields,
    split_transition_fields,
)

Issues = IssueRef | Sequence[IssueRef]


def as_issue_list(issues: Issues) -> list[IssueRef]:
    if isinstance(issues, IssueRef):
        return [issues]
    return list(issues)


def transition_payload(transition_id: str, fields: Mapping[str, Any] | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"transition": {"id": str(transition_id)}}
    if fields:
        payload["fields"] = dict(fields)
    return payload


class BatchRunner:
    def __init__(self, client: TrackerClient, logger: StructuredLogger | None = None):
        self.client = client
        self.logger = logger or get_logger()

    # --- internal helpers -------------------------------------------------
    def _attempt(self, action: str, issue: IssueRef, call: Callable[[IssueRef], bool]) -> bool:
        try:
            ok = bool(call(issue))
        except (JiraAPIError, requests.RequestException) as exc:
            info = classify_error(exc)
            self.logger.log_error(
                f"{action} failed for {issue.key}",
                error=info.message,
                category=info.category,
                issue_key=issue.key,
            )
            ok = False
        self.logger.log_issue_action(action, issue.key, ok)
        return ok

    def _run(self, action: str, issues: Issues, call: Callable[[IssueRef], bool]) -> bool:
        result = True
        for issue in as_issue_list(issues):
            ok = self._attempt(action, issue, call)
            result = result and ok
        return result

    def _transition_one(
        self, issue: IssueRef, transition: TransitionRef, fields: Mapping[str, Any] | None
    ) -> bool:
        if is_transition_name(transition):
            transition_id = resolve_transition_id(self.client.list_transitions(issue), str(transition))
            if transition_id is None:
                self.logger.warning(
                    f"transition {transition!r} not found on {issue.key}",
                    issue_key=issue.key,
                    transition=str(transition),
                )
                return False
        else:
            transition_id = str(transition).strip()
        return self.client.submit_transition(issue, transition_payload(transition_id, fields))

    # --- operations -------------------------------------------------------
    def update(self, issues: Issues, fields: Mapping[str, Any]) -> bool:
        """Update ``fields`` on every issue; nothing is sent when empty."""
        if not fields:
            return True
        payload = dict(fields)
        return self._run("update", issues, lambda issue: self.client.update_fields(issue, payload))

    def transition(
        self,
        issues: Issues,
        transition: TransitionRef,
        fields: Mapping[str, Any] | None = None,
    ) -> bool:
        """Transition every issue by id or by (case-insensitive) name.

        ``fields`` must only contain fields of the transition screen; see
        :meth:`transition_and_update` otherwise.
        """
        return self._run(
            "transition", issues, lambda issue: self._transition_one(issue, transition, fields)
        )

    def split_transition_fields(
        self, issue: IssueRef, transition: TransitionRef, fields: Mapping[str, Any]
    ) -> tuple[FieldSet, FieldSet]:
        return split_transition_fields(self.client, issue, transition, fields)

    def transition_and_update(
        self,
        issues: Issues,
        transition: TransitionRef,
        fields: Mapping[str, Any],
    ) -> bool:
        """Transition with the screen fields, then update with the rest.

        The split is computed against the first issue's transition screen
        and reused for the whole batch. Nothing is sent when the transition
        cannot be resolved on that issue.
        """
        targets = as_issue_list(issues)
        if not targets:
            return True
        first = targets[0]
        try:
            transitions = self.client.list_transitions(first)
        except (JiraAPIError, requests.RequestException) as exc:
            info = classify_error(exc)
            self.logger.log_error(
                f"cannot read transition screen of {first.key}",
                error=info.message,
                category=info.category,
                issue_key=first.key,
            )
            return False
        transition_id = resolve_transition(transitions, transition)
        if transition_id is None:
            self.logger.warning(
                f"transition {transition!r} not found on {first.key}",
                issue_key=first.key,
                transition=str(transition),
            )
            return False
        match = find_transition(transitions, transition_id)
        transition_fields, other_fields = split_fields(
            match.fields if match is not None else None, fields
        )
        transitioned = self.transition(targets, transition, transition_fields)
        updated = self.update(targets, other_fields)
        return transitioned and updated

    def add_remote_link(
        self,
        issues: Issues,
        url: str,
        title: str,
        platform_kind: str,
        *,
        relationship: str | None = DEFAULT_RELATIONSHIP,
        status: Mapping[str, Any] | bool | None = None,
    ) -> bool:
        payload = build_remote_link(
            url, title, platform_kind, relationship=relationship, status=status
        )
        return self._run(
            "remote_link", issues, lambda issue: self.client.create_remote_link(issue, payload)
        )


__all__ = ["BatchRunner", "Issues", "as_issue_list", "transition_payload"]
