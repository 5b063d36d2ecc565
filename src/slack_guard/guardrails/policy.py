"""
Channel policy gate for outbound messages.

The policy is a single string, parsed on every check:

- empty / unset        -> deny every channel
- "true" or "1"        -> allow every channel
- "C123,D456"          -> allow-list: only the listed channels
- "!C123,!D456"        -> deny-list: every channel except the listed ones

A list mixing "!"-prefixed and bare entries takes its mode from the first
entry; entries of the other form are ignored and logged as a warning.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Optional

import structlog

logger = structlog.get_logger(__name__)

_ALLOW_ALL_VALUES = ("true", "1")
_NEGATION = "!"


class PolicyMode(str, Enum):
    DENY_ALL = "deny_all"
    ALLOW_ALL = "allow_all"
    ALLOW_LIST = "allow_list"
    DENY_LIST = "deny_list"


def _split_csv(raw: str) -> List[str]:
    return [x.strip() for x in (raw or "").split(",") if x.strip()]


@dataclass(frozen=True)
class ChannelPolicy:
    """Parsed channel policy. channels holds the ids without any "!" prefix."""

    mode: PolicyMode
    channels: FrozenSet[str] = frozenset()
    ignored: FrozenSet[str] = frozenset()

    def allows(self, channel_id: str) -> bool:
        if self.mode is PolicyMode.ALLOW_ALL:
            return True
        if self.mode is PolicyMode.ALLOW_LIST:
            return channel_id in self.channels
        if self.mode is PolicyMode.DENY_LIST:
            return channel_id not in self.channels
        return False


def parse_channel_policy(policy_config: Optional[str]) -> ChannelPolicy:
    """Parse a policy string into a ChannelPolicy. Never raises."""
    raw = (policy_config or "").strip()
    if not raw:
        return ChannelPolicy(mode=PolicyMode.DENY_ALL)
    if raw.lower() in _ALLOW_ALL_VALUES:
        return ChannelPolicy(mode=PolicyMode.ALLOW_ALL)

    entries = _split_csv(raw)
    if not entries:
        return ChannelPolicy(mode=PolicyMode.DENY_ALL)

    deny_mode = entries[0].startswith(_NEGATION)
    kept: List[str] = []
    ignored: List[str] = []
    for entry in entries:
        if entry.startswith(_NEGATION) == deny_mode:
            kept.append(entry[len(_NEGATION):].strip() if deny_mode else entry)
        else:
            ignored.append(entry)

    mode = PolicyMode.DENY_LIST if deny_mode else PolicyMode.ALLOW_LIST
    if ignored:
        logger.warning(
            "policy_mixed_entries",
            policy_mode=mode.value,
            ignored_entries=ignored,
        )
    channels = frozenset(c for c in kept if c)
    if deny_mode and not channels:
        # "!" with no ids denies nothing, so every channel is allowed
        logger.warning("policy_empty_deny_list", policy_mode=mode.value, policy=raw)
    return ChannelPolicy(mode=mode, channels=channels, ignored=frozenset(ignored))


def is_channel_allowed(channel_id: str, policy_config: Optional[str]) -> bool:
    """True if the (already validated) channel may receive messages under policy_config."""
    return parse_channel_policy(policy_config).allows(channel_id)
