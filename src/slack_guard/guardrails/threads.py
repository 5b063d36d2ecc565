"""Thread timestamp validation: "" or exactly <10 digits>.<6 digits>."""

from __future__ import annotations

import re
from typing import Optional

from slack_guard.guardrails.constants import MAX_THREAD_TS_LENGTH
from slack_guard.guardrails.content import TextInput, ensure_utf8_text
from slack_guard.guardrails.errors import EncodingError, InvalidTimestamp

# [0-9] rather than \d: \d also matches non-ASCII digits.
_THREAD_TS_PATTERN = re.compile(r"[0-9]{10}\.[0-9]{6}")


def validate_thread_timestamp(thread_ts: Optional[TextInput]) -> None:
    """
    Raise InvalidTimestamp unless thread_ts is empty or a Slack message timestamp.

    An empty value means the message is not a thread reply. bytes are decoded
    as UTF-8; anything that is not text is rejected as InvalidTimestamp.
    """
    if thread_ts is None:
        return
    try:
        text = ensure_utf8_text(thread_ts, what="thread timestamp")
    except EncodingError as e:
        raise InvalidTimestamp(e.reason) from e
    if not text:
        return
    if len(text) > MAX_THREAD_TS_LENGTH:
        raise InvalidTimestamp(
            f"thread timestamp is {len(text)} characters, exceeding the limit of {MAX_THREAD_TS_LENGTH}"
        )
    if not _THREAD_TS_PATTERN.fullmatch(text):
        raise InvalidTimestamp(
            f"thread timestamp {text!r} must be 10 digits, a dot, then 6 digits"
        )
