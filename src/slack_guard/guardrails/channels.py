"""
Channel identifier validation.

A reference is accepted only if it matches exactly one recognised shape:
a concrete id (C/D/G followed by ten uppercase alphanumerics), a channel name
("#general") or a user mention ("@username").
"""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Tuple

from slack_guard.guardrails.constants import MAX_CHANNEL_NAME_LENGTH
from slack_guard.guardrails.content import TextInput, ensure_utf8_text
from slack_guard.guardrails.errors import EncodingError, InvalidIdentifier


class IdentifierKind(str, Enum):
    CHANNEL = "channel"
    DIRECT_MESSAGE = "direct_message"
    GROUP = "group"
    CHANNEL_NAME = "channel_name"
    USER_MENTION = "user_mention"


# Name characters: printable, no whitespace, no nested sigils.
_NAME = r"[^\s\x00-\x1f\x7f#@]+"

_SHAPES: List[Tuple[re.Pattern[str], IdentifierKind]] = [
    (re.compile(r"C[A-Z0-9]{10}"), IdentifierKind.CHANNEL),
    (re.compile(r"D[A-Z0-9]{10}"), IdentifierKind.DIRECT_MESSAGE),
    (re.compile(r"G[A-Z0-9]{10}"), IdentifierKind.GROUP),
    (re.compile(r"#" + _NAME), IdentifierKind.CHANNEL_NAME),
    (re.compile(r"@" + _NAME), IdentifierKind.USER_MENTION),
]

CONCRETE_KINDS = frozenset(
    {IdentifierKind.CHANNEL, IdentifierKind.DIRECT_MESSAGE, IdentifierKind.GROUP}
)


def classify_channel_identifier(identifier: TextInput) -> IdentifierKind:
    """
    Validate a channel reference and return which shape it matched.

    Raises InvalidIdentifier (with a descriptive reason) on any failure,
    including invalid encoding.
    """
    try:
        text = ensure_utf8_text(identifier, what="channel identifier")
    except EncodingError as e:
        raise InvalidIdentifier(e.reason) from e
    if not text:
        raise InvalidIdentifier("channel identifier is empty")
    if len(text) > MAX_CHANNEL_NAME_LENGTH:
        raise InvalidIdentifier(
            f"channel identifier is {len(text)} characters, exceeding the limit of {MAX_CHANNEL_NAME_LENGTH}"
        )
    # fullmatch so trailing characters never slip through
    for pattern, kind in _SHAPES:
        if pattern.fullmatch(text):
            return kind
    lead = text[0]
    if lead in "CDG":
        raise InvalidIdentifier(
            f"channel id {text!r} must be {lead} followed by exactly 10 uppercase letters or digits"
        )
    if lead in "#@":
        raise InvalidIdentifier(f"reference {text!r} contains characters not allowed in a name")
    raise InvalidIdentifier(f"channel identifier {text!r} has unrecognised prefix {lead!r}")


def validate_channel_identifier(identifier: TextInput, *, concrete_only: bool = False) -> None:
    """
    Raise InvalidIdentifier unless identifier is a well-formed channel reference.

    With concrete_only=True, name and mention references are rejected as well;
    used to check a resolver's output, which must be a concrete id.
    """
    kind = classify_channel_identifier(identifier)
    if concrete_only and kind not in CONCRETE_KINDS:
        raise InvalidIdentifier(
            f"expected a concrete channel id, got a {kind.value} reference"
        )


def is_concrete_channel_id(identifier: str) -> bool:
    """True if identifier is a valid C/D/G id (no lookup needed)."""
    try:
        return classify_channel_identifier(identifier) in CONCRETE_KINDS
    except InvalidIdentifier:
        return False
