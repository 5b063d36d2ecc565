"""
Content sanitizer for outbound Slack messages.

Checks that message text is valid UTF-8, enforces Slack's message length limit,
and escapes markup-significant characters when the content is rendered as
markdown. Plain text is passed through untouched since it is never rendered as
markup downstream.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Union

import structlog

from slack_guard.guardrails.constants import MAX_MESSAGE_LENGTH
from slack_guard.guardrails.errors import (
    EncodingError,
    LengthExceeded,
    UnsupportedContentType,
)

logger = structlog.get_logger(__name__)

TextInput = Union[str, bytes]


class ContentType(str, Enum):
    """Content-type discriminant of an outbound message."""

    PLAIN = "text/plain"
    MARKDOWN = "text/markdown"


_CONTENT_TYPE_ALIASES: Dict[str, ContentType] = {
    "text/plain": ContentType.PLAIN,
    "plain": ContentType.PLAIN,
    "text/markdown": ContentType.MARKDOWN,
    "markdown": ContentType.MARKDOWN,
}

# One table, one str.translate pass: "&" is never re-scanned after replacement.
_MARKUP_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        "'": "&#39;",
        '"': "&#34;",
    }
)


def parse_content_type(content_type: Union[str, ContentType]) -> ContentType:
    """Map a content-type string (or short alias) to ContentType."""
    if isinstance(content_type, ContentType):
        return content_type
    resolved = _CONTENT_TYPE_ALIASES.get((content_type or "").strip().lower())
    if resolved is None:
        raise UnsupportedContentType(f"unsupported content type: {content_type!r}")
    return resolved


def ensure_utf8_text(value: TextInput, what: str = "content") -> str:
    """
    Return value as str, rejecting anything that is not valid UTF-8.

    bytes are decoded strictly; str values containing lone surrogates
    (e.g. from a surrogateescape decode upstream) are rejected too.
    """
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"{what} is not valid UTF-8 (byte offset {e.start})") from e
    if not isinstance(value, str):
        raise EncodingError(f"{what} must be text, got {type(value).__name__}")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(f"{what} is not valid UTF-8 (character offset {e.start})") from e
    return value


def escape_markup(text: str) -> str:
    """
    Replace < > & ' " with their entity forms.

    Not idempotent: escaping already-escaped text double-escapes it
    ("&lt;" becomes "&amp;lt;"). Apply exactly once per message.
    """
    return text.translate(_MARKUP_ESCAPES)


def sanitize_message_content(
    content: TextInput,
    content_type: Union[str, ContentType] = ContentType.MARKDOWN,
    max_length: int = MAX_MESSAGE_LENGTH,
) -> str:
    """
    Validate and sanitize message content.

    Args:
        content: Message body as str or raw bytes.
        content_type: "text/plain" or "text/markdown" (aliases "plain", "markdown").
        max_length: Maximum length in characters; content at the limit is accepted.

    Returns:
        The safe content: unchanged for plain text, markup-escaped for markdown.

    Raises:
        UnsupportedContentType: content_type is not recognised.
        EncodingError: content is not valid UTF-8.
        LengthExceeded: content is longer than max_length characters.
    """
    kind = parse_content_type(content_type)
    text = ensure_utf8_text(content)
    if len(text) > max_length:
        raise LengthExceeded(
            f"content is {len(text)} characters, exceeding the limit of {max_length}"
        )
    if not text or kind is ContentType.PLAIN:
        return text
    escaped = escape_markup(text)
    if escaped != text:
        logger.debug("markup_escaped", original_length=len(text), escaped_length=len(escaped))
    return escaped
