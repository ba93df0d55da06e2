"""reviewbridge CLI.

Subcommands:
  find        -> list the Jira issues referenced by the current review request
  link        -> add (or refresh) a remote link from those issues to the request
  transition  -> transition those issues, optionally updating other fields
  update      -> update fields on those issues

Meant to be called from a CI job of a pull/merge request pipeline. Exit
status is 0 when every issue operation succeeded, 1 when any failed and 2
for configuration or platform problems.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Sequence
from typing import Any

import requests

from reviewbridge.bridge import ReviewBridge
from reviewbridge.env_auth import create_env_auth_manager
from reviewbridge.errors import (
    ConfigError,
    IssueNotFoundError,
    JiraAPIError,
    PlatformError,
    classify_error,
)
from reviewbridge.models import FieldSet, IssueRef

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2

PREFIX_HELP = "Jira project key to look for (repeatable; default: search.prefixes from config)"

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _add_search_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--prefix", action="append", dest="prefixes", help=PREFIX_HELP)
    p.add_argument(
        "--no-title", dest="title", action="store_false", default=None,
        help="Do not search the request title",
    )
    p.add_argument("--commits", action="store_true", default=None, help="Search commit messages")
    p.add_argument("--branch", action="store_true", default=None, help="Search the branch name")


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="reviewbridge", description="Link pull/merge requests to Jira issues"
    )
    p.add_argument("--config", help="Optional YAML config file")
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors (env: REVIEWBRIDGE_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pf = sub.add_parser("find", help="List issues referenced by the review request")
    _add_search_args(pf)
    pf.add_argument("--json", action="store_true", help="Emit JSON instead of text")

    pl = sub.add_parser("link", help="Add a remote link to the review request on each issue")
    _add_search_args(pl)
    status = pl.add_mutually_exclusive_group()
    status.add_argument("--resolved", dest="resolved", action="store_true", default=None)
    status.add_argument("--unresolved", dest="resolved", action="store_false", default=None)
    pl.add_argument("--relationship", default=None, help='Link label (default "relates to")')

    pt = sub.add_parser("transition", help="Transition referenced issues")
    _add_search_args(pt)
    pt.add_argument("transition", help="Transition id or name")
    pt.add_argument(
        "--field", action="append", default=[], metavar="NAME=VALUE",
        help="Field value (JSON or plain string); repeatable",
    )
    pt.add_argument(
        "--and-update",
        action="store_true",
        help="Send fields missing from the transition screen as a plain update",
    )

    pu = sub.add_parser("update", help="Update fields on referenced issues")
    _add_search_args(pu)
    pu.add_argument(
        "--field", action="append", default=[], metavar="NAME=VALUE", required=True,
        help="Field value (JSON or plain string); repeatable",
    )
    return p


def parse_fields(items: Sequence[str]) -> FieldSet:
    """``name=value`` pairs to a field set; values are JSON when they parse."""
    fields: FieldSet = {}
    for item in items:
        name, sep, raw = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"--field expects NAME=VALUE, got {item!r}")
        try:
            value: Any = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        fields[name.strip()] = value
    return fields


def _build_bridge(args: argparse.Namespace) -> ReviewBridge:
    bridge = ReviewBridge.from_environment(args.config)
    if args.quiet:
        bridge.logger.set_level("WARNING")
    return bridge


def _find(bridge: ReviewBridge, args: argparse.Namespace) -> list[IssueRef]:
    return bridge.find_issues(
        args.prefixes,
        search_title=args.title,
        search_commits=args.commits,
        search_branch=args.branch,
    )


def _cmd_find(bridge: ReviewBridge, args: argparse.Namespace) -> int:
    issues = _find(bridge, args)
    if args.json:
        rows = [
            {
                "key": i.key,
                "summary": i.summary,
                "status": i.status_name,
                "url": bridge.issue_link(i),
            }
            for i in issues
        ]
        print(json.dumps(rows, indent=2))
    elif not issues:
        print("No Jira issue referenced by this review request.")
    else:
        for i in issues:
            print(f"{i.key}\t{i.status_name or '-'}\t{i.summary or ''}\t{bridge.issue_link(i)}")
    return EXIT_OK


def _cmd_link(bridge: ReviewBridge, args: argparse.Namespace) -> int:
    ok = bridge.add_remote_link(
        _find(bridge, args), status=args.resolved, relationship=args.relationship
    )
    return EXIT_OK if ok else EXIT_FAILED


def _cmd_transition(bridge: ReviewBridge, args: argparse.Namespace) -> int:
    fields = parse_fields(args.field)
    issues = _find(bridge, args)
    if args.and_update:
        ok = bridge.transition_and_update(issues, args.transition, **fields)
    else:
        ok = bridge.transition(issues, args.transition, **fields)
    return EXIT_OK if ok else EXIT_FAILED


def _cmd_update(bridge: ReviewBridge, args: argparse.Namespace) -> int:
    fields = parse_fields(args.field)
    ok = bridge.update(_find(bridge, args), **fields)
    return EXIT_OK if ok else EXIT_FAILED


_HANDLERS = {
    "find": _cmd_find,
    "link": _cmd_link,
    "transition": _cmd_transition,
    "update": _cmd_update,
}


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.quiet and os.environ.get("REVIEWBRIDGE_QUIET") == "1":
        args.quiet = True
    handler = _HANDLERS.get(args.cmd)
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return EXIT_FAILED
    try:
        bridge = _build_bridge(args)
    except ConfigError as exc:
        print(f"[reviewbridge] {exc}", file=sys.stderr)
        for hint in create_env_auth_manager().get_authentication_recommendations():
            print(f"[reviewbridge]   - {hint}", file=sys.stderr)
        return EXIT_CONFIG
    except PlatformError as exc:
        print(f"[reviewbridge] {exc}", file=sys.stderr)
        return EXIT_CONFIG
    try:
        return handler(bridge, args)
    except ValueError as exc:
        print(f"[reviewbridge] {exc}", file=sys.stderr)
        return EXIT_CONFIG
    except IssueNotFoundError as exc:
        print(f"[reviewbridge] {exc}", file=sys.stderr)
        return EXIT_FAILED
    except (JiraAPIError, PlatformError, requests.RequestException) as exc:
        info = classify_error(exc)
        bridge.logger.log_error("command failed", error=info.message, category=info.category)
        return EXIT_FAILED


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
