"""
Secure channel resolution: validate -> resolve -> re-validate -> policy check.

The directory lookup itself belongs to the caller (any ChannelResolver); this
module only guarantees that what goes into and comes out of it is well formed
and that the final channel is permitted by the policy. Every rejection is
logged with the failing stage, the raw reference and the policy mode.
"""

from __future__ import annotations

from typing import Mapping, Optional, Protocol

import structlog

from slack_guard.guardrails.channels import (
    is_concrete_channel_id,
    validate_channel_identifier,
)
from slack_guard.guardrails.content import TextInput, ensure_utf8_text
from slack_guard.guardrails.errors import (
    EncodingError,
    GuardViolation,
    InvalidIdentifier,
    PolicyDenied,
    ResolutionFailed,
    ResolutionStage,
)
from slack_guard.guardrails.policy import parse_channel_policy

logger = structlog.get_logger(__name__)


class ChannelResolver(Protocol):
    """Maps a "#name" or "@user" reference to a concrete channel id."""

    def __call__(self, reference: str) -> str: ...


class ChannelNotFound(LookupError):
    """Raised by DirectoryResolver for references not in its directory."""


class DirectoryResolver:
    """ChannelResolver backed by a static mapping of references to channel ids."""

    def __init__(self, directory: Mapping[str, str]) -> None:
        self._directory = dict(directory)

    def __call__(self, reference: str) -> str:
        try:
            return self._directory[reference]
        except KeyError:
            raise ChannelNotFound(f"no channel found for {reference!r}") from None


def _reject(
    error: GuardViolation,
    stage: ResolutionStage,
    reference: str,
    policy_mode: Optional[str],
) -> GuardViolation:
    error.stage = stage
    error.policy_mode = policy_mode
    logger.warning(
        "channel_resolution_rejected",
        stage=stage.value,
        raw_reference=reference,
        policy_mode=policy_mode,
        kind=error.kind.value,
        reason=error.reason,
    )
    return error


def secure_resolve_channel(
    reference: TextInput,
    resolver: ChannelResolver,
    policy_config: Optional[str],
) -> str:
    """
    Resolve reference to a concrete channel id that the policy permits.

    Concrete ids (C/D/G form) are used as-is; "#name" and "@user" references go
    through resolver. Resolver failures of any kind (not found, timeout,
    transport error) surface as ResolutionFailed, chained to the original.

    Raises:
        InvalidIdentifier: reference or resolved id is malformed.
        ResolutionFailed: resolver raised or returned nothing usable.
        PolicyDenied: resolved channel is not permitted.
    """
    policy = parse_channel_policy(policy_config)
    mode = policy.mode.value

    try:
        text = ensure_utf8_text(reference, what="channel identifier")
        validate_channel_identifier(text)
    except EncodingError as e:
        err = InvalidIdentifier(e.reason)
        raise _reject(err, ResolutionStage.VALIDATE, repr(reference), mode) from e
    except InvalidIdentifier as e:
        raise _reject(e, ResolutionStage.VALIDATE, text, mode)
    # carry the decoded str forward; bytes never reach the resolver or the policy
    reference = text

    if is_concrete_channel_id(reference):
        resolved = reference
    else:
        try:
            resolved = resolver(reference)
        except Exception as e:
            err = ResolutionFailed(f"could not resolve {reference!r}: {e}")
            raise _reject(err, ResolutionStage.RESOLVE, reference, mode) from e
        if not isinstance(resolved, str) or not resolved:
            err = ResolutionFailed(f"resolver returned no channel id for {reference!r}")
            raise _reject(err, ResolutionStage.RESOLVE, reference, mode)

    try:
        validate_channel_identifier(resolved, concrete_only=True)
    except InvalidIdentifier as e:
        err = InvalidIdentifier(f"resolved id for {reference!r} is invalid: {e.reason}")
        raise _reject(err, ResolutionStage.REVALIDATE, reference, mode) from e

    if not policy.allows(resolved):
        err = PolicyDenied(f"channel {resolved!r} is not permitted by the {mode} policy")
        raise _reject(err, ResolutionStage.POLICY, reference, mode)

    logger.debug("channel_resolved", raw_reference=reference, channel_id=resolved, policy_mode=mode)
    return resolved
