"""Shared utilities and helpers for the slack-guard package."""

from slack_guard.utils.logging import configure_logging

__all__ = ["configure_logging"]
