"""Per-issue convenience wrapper.

``TrackedIssue`` bundles a resolved issue with the client that can act on
it, so scripts can write ``issue.transition("Done")`` instead of going
through the batch API with a one-element list.
"""

from __future__ import annotations

from typing import Any

from .batch import BatchRunner
from .logging import StructuredLogger
from .models import FieldSet, IssueRef, TrackerClient
from .routing import TransitionRef, resolve_transition_id


class TrackedIssue:
    def __init__(
        self,
        issue: IssueRef,
        client: TrackerClient,
        base_url: str,
        logger: StructuredLogger | None = None,
    ):
        self.issue = issue
        self.client = client
        self.base_url = base_url.rstrip("/")
        self._runner = BatchRunner(client, logger)

    def __repr__(self) -> str:
        return f"TrackedIssue({self.key!r})"

    @property
    def key(self) -> str:
        return self.issue.key

    @property
    def summary(self) -> str | None:
        return self.issue.summary

    @property
    def status_name(self) -> str | None:
        return self.issue.status_name

    @property
    def browse_link(self) -> str:
        return f"{self.base_url}/browse/{self.key}"

    def update(self, **fields: Any) -> bool:
        return self._runner.update(self.issue, fields)

    def get_transition_id(self, name: str) -> str | None:
        """Id of the transition named ``name``, or None when unavailable."""
        return resolve_transition_id(self.client.list_transitions(self.issue), name)

    def transition(self, transition: TransitionRef, **fields: Any) -> bool:
        """Transition by id or name; ``fields`` must be on the transition screen."""
        return self._runner.transition(self.issue, transition, fields)

    def split_transition_fields(
        self, transition: TransitionRef, **fields: Any
    ) -> tuple[FieldSet, FieldSet]:
        return self._runner.split_transition_fields(self.issue, transition, fields)

    def transition_and_update(self, transition: TransitionRef, **fields: Any) -> bool:
        return self._runner.transition_and_update(self.issue, transition, fields)


__all__ = ["TrackedIssue"]
