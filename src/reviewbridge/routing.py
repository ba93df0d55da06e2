"""Route proposed field values between a transition screen and a plain update.

Jira only accepts, with a transition, the fields that appear on that
transition's screen. Everything else has to go through a regular issue
update. The schema is re-read from the tracker on every routing decision.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .models import FieldSet, IssueRef, TrackerClient, Transition

TransitionRef = int | str


def is_transition_name(transition: TransitionRef) -> bool:
    """Numeric ids (int or digit-only strings) are ids, anything else a name."""
    if isinstance(transition, int):
        return False
    return not str(transition).strip().isdigit()


def find_transition(
    transitions: Iterable[Transition], transition_id: TransitionRef
) -> Transition | None:
    wanted = str(transition_id).strip()
    for transition in transitions:
        if transition.id == wanted:
            return transition
    return None


def resolve_transition_id(transitions: Iterable[Transition], name: str) -> str | None:
    """Id of the first transition whose name matches ``name`` ignoring case."""
    wanted = name.strip().casefold()
    for transition in transitions:
        if transition.name.casefold() == wanted:
            return transition.id
    return None


def resolve_transition(
    transitions: Sequence[Transition], transition: TransitionRef
) -> str | None:
    if is_transition_name(transition):
        return resolve_transition_id(transitions, str(transition))
    return str(transition).strip()


def split_fields(
    screen_field_ids: Iterable[str] | None, fields: Mapping[str, Any]
) -> tuple[FieldSet, FieldSet]:
    """Partition ``fields`` into (transition_fields, other_fields).

    A field goes with the transition iff its id is on the screen. The input
    mapping is left untouched.
    """
    screen = frozenset(str(f) for f in screen_field_ids) if screen_field_ids else frozenset()
    transition_fields: FieldSet = {}
    other_fields: FieldSet = {}
    for name, value in fields.items():
        if str(name) in screen:
            transition_fields[name] = value
        else:
            other_fields[name] = value
    return transition_fields, other_fields


def transition_screen_fields(
    client: TrackerClient, issue: IssueRef, transition: TransitionRef
) -> frozenset[str] | None:
    transitions = client.list_transitions(issue)
    transition_id = resolve_transition(transitions, transition)
    if transition_id is None:
        return None
    match = find_transition(transitions, transition_id)
    return match.fields if match is not None else None


def split_transition_fields(
    client: TrackerClient,
    issue: IssueRef,
    transition: TransitionRef,
    fields: Mapping[str, Any],
) -> tuple[FieldSet, FieldSet]:
    return split_fields(transition_screen_fields(client, issue, transition), fields)


__all__ = [
    "TransitionRef",
    "find_transition",
    "is_transition_name",
    "resolve_transition",
    "resolve_transition_id",
    "split_fields",
    "split_transition_fields",
    "transition_screen_fields",
]
