"""
Guard violations raised by the message guardrails.

Every rejection is a GuardViolation subclass carrying a ViolationKind and a
human-readable reason. Violations are deterministic functions of their input,
so callers must never retry them; the pipeline translates them into an API
error for the original caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ViolationKind(str, Enum):
    """Classification of a rejected message, used for audit logging."""

    ENCODING_ERROR = "encoding_error"
    LENGTH_EXCEEDED = "length_exceeded"
    UNSUPPORTED_CONTENT_TYPE = "unsupported_content_type"
    INVALID_IDENTIFIER = "invalid_identifier"
    INVALID_TIMESTAMP = "invalid_timestamp"
    POLICY_DENIED = "policy_denied"
    RESOLUTION_FAILED = "resolution_failed"


class ResolutionStage(str, Enum):
    """Step of secure channel resolution at which a reference was rejected."""

    VALIDATE = "validate"
    RESOLVE = "resolve"
    REVALIDATE = "revalidate"
    POLICY = "policy"


class GuardViolation(Exception):
    """Base class for all guardrail rejections."""

    kind: ViolationKind

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.stage: Optional[ResolutionStage] = None
        self.policy_mode: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for audit logs and API error bodies."""
        data: Dict[str, Any] = {"kind": self.kind.value, "reason": self.reason}
        if self.stage is not None:
            data["stage"] = self.stage.value
        if self.policy_mode is not None:
            data["policy_mode"] = self.policy_mode
        return data


class EncodingError(GuardViolation):
    """Content or identifier is not valid UTF-8 text."""

    kind = ViolationKind.ENCODING_ERROR


class LengthExceeded(GuardViolation):
    """Content is longer than the message limit."""

    kind = ViolationKind.LENGTH_EXCEEDED


class UnsupportedContentType(GuardViolation):
    kind = ViolationKind.UNSUPPORTED_CONTENT_TYPE


class InvalidIdentifier(GuardViolation):
    kind = ViolationKind.INVALID_IDENTIFIER


class InvalidTimestamp(GuardViolation):
    kind = ViolationKind.INVALID_TIMESTAMP


class PolicyDenied(GuardViolation):
    """Resolved channel is not permitted by the channel policy."""

    kind = ViolationKind.POLICY_DENIED


class ResolutionFailed(GuardViolation):
    """Directory lookup failed or returned nothing usable."""

    kind = ViolationKind.RESOLUTION_FAILED
