"""
Message-send pipeline: runs every guardrail, in order, before a message is dispatched.

resolve channel securely -> sanitize content -> validate thread timestamp.
Only a fully validated OutboundMessage ever leaves this module; the Slack client
that posts it is the caller's.
"""

from __future__ import annotations

from typing import Optional, Union

import structlog
from pydantic import BaseModel, Field

from slack_guard.config.settings import GuardrailSettings, current_channel_policy
from slack_guard.guardrails.content import (
    ContentType,
    TextInput,
    ensure_utf8_text,
    parse_content_type,
    sanitize_message_content,
)
from slack_guard.guardrails.errors import GuardViolation
from slack_guard.guardrails.resolution import ChannelResolver, secure_resolve_channel
from slack_guard.guardrails.result import GuardrailResult
from slack_guard.guardrails.threads import validate_thread_timestamp

logger = structlog.get_logger(__name__)


class OutboundMessage(BaseModel):
    """A message that passed every guardrail and may be posted to Slack."""

    channel_id: str = Field(..., description="Concrete, policy-permitted channel id")
    text: str = Field(..., description="Sanitized message text")
    content_type: ContentType = Field(..., description="Content type the text was sanitized for")
    thread_ts: Optional[str] = Field(default=None, description="Parent message timestamp, if a reply")


def prepare_outbound_message(
    channel: TextInput,
    content: TextInput,
    resolver: ChannelResolver,
    *,
    content_type: Union[str, ContentType, None] = None,
    thread_ts: Optional[TextInput] = None,
    policy_config: Optional[str] = None,
    settings: Optional[GuardrailSettings] = None,
) -> OutboundMessage:
    """
    Validate a send request and build the OutboundMessage.

    policy_config defaults to the SLACK_MCP_ADD_MESSAGE_TOOL environment
    variable, read at call time. content_type defaults to the configured
    default_content_type. Content is sanitized exactly once here; callers
    must not sanitize it again.

    Raises:
        GuardViolation: any guardrail rejected the request.
    """
    settings = settings or GuardrailSettings()
    if policy_config is None:
        policy_config = current_channel_policy()
    kind = parse_content_type(content_type or settings.default_content_type)

    channel_id = secure_resolve_channel(channel, resolver, policy_config)
    try:
        text = sanitize_message_content(content, kind, max_length=settings.max_message_length)
        validate_thread_timestamp(thread_ts)
        thread = ensure_utf8_text(thread_ts, what="thread timestamp") if thread_ts else None
    except GuardViolation as e:
        logger.warning(
            "message_rejected",
            channel_id=channel_id,
            kind=e.kind.value,
            reason=e.reason,
        )
        raise

    logger.info(
        "message_accepted",
        channel_id=channel_id,
        content_type=kind.value,
        length=len(text),
        thread_reply=thread is not None,
    )
    return OutboundMessage(
        channel_id=channel_id,
        text=text,
        content_type=kind,
        thread_ts=thread,
    )


def check_outbound_message(
    channel: TextInput,
    content: TextInput,
    resolver: ChannelResolver,
    *,
    content_type: Union[str, ContentType, None] = None,
    thread_ts: Optional[TextInput] = None,
    policy_config: Optional[str] = None,
    settings: Optional[GuardrailSettings] = None,
) -> GuardrailResult:
    """Guardrail form of prepare_outbound_message: never raises on a violation."""
    try:
        message = prepare_outbound_message(
            channel,
            content,
            resolver,
            content_type=content_type,
            thread_ts=thread_ts,
            policy_config=policy_config,
            settings=settings,
        )
    except GuardViolation as e:
        return GuardrailResult.from_violation(e)
    return GuardrailResult(
        status="pass",
        message="Message passed all guardrails.",
        details={"message": message.model_dump(mode="json")},
        retry_allowed=True,
    )
