"""
CLI entry point for slack-guard.

Subcommands: check-channel, sanitize, check-thread.
Lets operators try a channel policy or a message against the guardrails
without posting anything to Slack.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Dict, List, Optional

import structlog

from slack_guard.config.settings import current_channel_policy, get_settings
from slack_guard.guardrails import (
    DirectoryResolver,
    GuardrailResult,
    GuardViolation,
    sanitize_message_content,
    secure_resolve_channel,
    validate_thread_timestamp,
)
from slack_guard.utils.logging import configure_logging

logger = structlog.get_logger(__name__)

_CONTENT_TYPE_CHOICES = ("text/plain", "text/markdown")


def _parse_directory(pairs: List[str]) -> Dict[str, str]:
    """Parse NAME=ID pairs (e.g. '#general=C1234567890') into a mapping."""
    directory: Dict[str, str] = {}
    for pair in pairs:
        name, sep, channel_id = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"directory entry must be NAME=ID, got {pair!r}")
        directory[name.strip()] = channel_id.strip()
    return directory


def _report_violation(error: GuardViolation) -> int:
    result = GuardrailResult.from_violation(error)
    print(f"Error: {result.message}", file=sys.stderr)
    print(json.dumps(result.model_dump(), indent=2), file=sys.stderr)
    return 1


def _cmd_check_channel(reference: str, policy: Optional[str], directory: List[str]) -> int:
    """Run secure resolution for reference and print the resolved channel."""
    try:
        resolver = DirectoryResolver(_parse_directory(directory))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    policy_config = policy if policy is not None else current_channel_policy()
    try:
        channel_id = secure_resolve_channel(reference, resolver, policy_config)
    except GuardViolation as e:
        return _report_violation(e)
    print(json.dumps({"reference": reference, "channel_id": channel_id}))
    return 0


def _cmd_sanitize(text: str, content_type: Optional[str]) -> int:
    """Print text as it would be sent after sanitization."""
    content_type = content_type or get_settings().guardrails.default_content_type
    try:
        print(sanitize_message_content(text, content_type))
    except GuardViolation as e:
        return _report_violation(e)
    return 0


def _cmd_check_thread(thread_ts: str) -> int:
    try:
        validate_thread_timestamp(thread_ts)
    except GuardViolation as e:
        return _report_violation(e)
    print(json.dumps({"thread_ts": thread_ts, "valid": True}))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse CLI args and dispatch to subcommands. Returns 0 on success, 1 on a violation."""
    parser = argparse.ArgumentParser(
        description="slack-guard: check channels, content and thread timestamps against the guardrails.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # check-channel
    chan_p = subparsers.add_parser("check-channel", help="Resolve a channel reference and apply the policy.")
    chan_p.add_argument("reference", help="Channel reference (e.g. 'C1234567890', '#general', '@alice').")
    chan_p.add_argument(
        "--policy",
        default=None,
        help="Policy string to evaluate. Default: SLACK_MCP_ADD_MESSAGE_TOOL.",
    )
    chan_p.add_argument(
        "--directory",
        action="append",
        default=[],
        metavar="NAME=ID",
        help="Directory entry used to resolve names and mentions (repeatable).",
    )

    # sanitize
    san_p = subparsers.add_parser("sanitize", help="Sanitize message text.")
    san_p.add_argument("text", help="Message text.")
    san_p.add_argument(
        "--content-type",
        choices=_CONTENT_TYPE_CHOICES,
        default=None,
        help="Content type (default: GUARDRAIL_DEFAULT_CONTENT_TYPE, text/markdown).",
    )

    # check-thread
    thread_p = subparsers.add_parser("check-thread", help="Validate a thread timestamp.")
    thread_p.add_argument("thread_ts", help="Thread timestamp (e.g. '1234567890.123456').")

    args = parser.parse_args(argv)
    configure_logging(get_settings().logging)

    if args.command == "check-channel":
        return _cmd_check_channel(args.reference, args.policy, args.directory)
    if args.command == "sanitize":
        return _cmd_sanitize(args.text, args.content_type)
    if args.command == "check-thread":
        return _cmd_check_thread(args.thread_ts)
    return 1


if __name__ == "__main__":
    sys.exit(main())
