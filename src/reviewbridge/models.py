from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

FieldSet = dict[str, Any]


@dataclass
class IssueRef:
    """A Jira issue resolved from its key.

    ``fields`` is the raw ``fields`` object of the issue record; values are
    not interpreted beyond the convenience accessors below.
    """

    key: str
    id: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)
    self_url: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> IssueRef:
        raw_fields = record.get("fields")
        return cls(
            key=str(record.get("key") or ""),
            id=str(record["id"]) if record.get("id") is not None else None,
            fields=dict(raw_fields) if isinstance(raw_fields, Mapping) else {},
            self_url=record.get("self") if isinstance(record.get("self"), str) else None,
        )

    @property
    def summary(self) -> str | None:
        value = self.fields.get("summary")
        return value if isinstance(value, str) else None

    @property
    def status_name(self) -> str | None:
        status = self.fields.get("status")
        if isinstance(status, Mapping):
            name = status.get("name")
            if isinstance(name, str):
                return name
        return None


@dataclass(frozen=True)
class Transition:
    """One workflow transition available on an issue.

    ``fields`` holds the field ids present on the transition screen, or None
    when the tracker declares no screen for it.
    """

    id: str
    name: str
    fields: frozenset[str] | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Transition:
        raw_fields = record.get("fields")
        screen: frozenset[str] | None = None
        if isinstance(raw_fields, Mapping):
            screen = frozenset(str(k) for k in raw_fields)
        return cls(
            id=str(record.get("id") or ""),
            name=str(record.get("name") or ""),
            fields=screen,
        )


class TrackerClient(Protocol):
    """Operations the routing and batch layers need from the tracker."""

    def find_issue(self, key: str) -> IssueRef: ...

    def list_transitions(self, issue: IssueRef) -> list[Transition]: ...

    def submit_transition(self, issue: IssueRef, payload: Mapping[str, Any]) -> bool: ...

    def update_fields(self, issue: IssueRef, fields: FieldSet) -> bool: ...

    def create_remote_link(self, issue: IssueRef, payload: Mapping[str, Any]) -> bool: ...


__all__ = ["FieldSet", "IssueRef", "TrackerClient", "Transition"]
