"""Guardrail result model shared by the message pipeline and the CLI."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from slack_guard.guardrails.errors import GuardViolation


class GuardrailResult(BaseModel):
    """Result of a guardrail check."""

    status: Literal["pass", "fail", "warn"] = Field(
        description="pass=allowed, fail=block, warn=log but allow"
    )
    message: str = Field(default="", description="Human-readable outcome message")
    details: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Extra data (e.g. violation kind, stage, resolved channel)",
    )
    retry_allowed: bool = Field(
        default=True,
        description="Whether the caller may retry after this result",
    )

    def is_ok(self) -> bool:
        """True if the message may be sent (pass or warn)."""
        return self.status in ("pass", "warn")

    def should_block(self) -> bool:
        """True if the message must not be sent."""
        return self.status == "fail"

    @classmethod
    def from_violation(cls, error: GuardViolation) -> "GuardrailResult":
        # Validation is deterministic: the same input always fails the same way.
        return cls(
            status="fail",
            message=error.reason,
            details=error.to_dict(),
            retry_allowed=False,
        )
