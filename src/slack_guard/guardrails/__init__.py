"""
Slack Guard Guardrails Module

Input validation and access control for outbound Slack messages: content
sanitization, channel identifier and thread timestamp validation, and the
channel policy gate with secure resolution.
"""

from slack_guard.guardrails.channels import (
    IdentifierKind,
    classify_channel_identifier,
    is_concrete_channel_id,
    validate_channel_identifier,
)
from slack_guard.guardrails.content import (
    ContentType,
    escape_markup,
    parse_content_type,
    sanitize_message_content,
)
from slack_guard.guardrails.errors import (
    EncodingError,
    GuardViolation,
    InvalidIdentifier,
    InvalidTimestamp,
    LengthExceeded,
    PolicyDenied,
    ResolutionFailed,
    ResolutionStage,
    UnsupportedContentType,
    ViolationKind,
)
from slack_guard.guardrails.policy import (
    ChannelPolicy,
    PolicyMode,
    is_channel_allowed,
    parse_channel_policy,
)
from slack_guard.guardrails.resolution import (
    ChannelNotFound,
    ChannelResolver,
    DirectoryResolver,
    secure_resolve_channel,
)
from slack_guard.guardrails.result import GuardrailResult
from slack_guard.guardrails.threads import validate_thread_timestamp

__all__ = [
    "ChannelNotFound",
    "ChannelPolicy",
    "ChannelResolver",
    "ContentType",
    "DirectoryResolver",
    "EncodingError",
    "GuardViolation",
    "GuardrailResult",
    "IdentifierKind",
    "InvalidIdentifier",
    "InvalidTimestamp",
    "LengthExceeded",
    "PolicyDenied",
    "PolicyMode",
    "ResolutionFailed",
    "ResolutionStage",
    "UnsupportedContentType",
    "ViolationKind",
    "classify_channel_identifier",
    "escape_markup",
    "is_channel_allowed",
    "is_concrete_channel_id",
    "parse_channel_policy",
    "parse_content_type",
    "sanitize_message_content",
    "secure_resolve_channel",
    "validate_channel_identifier",
    "validate_thread_timestamp",
]
