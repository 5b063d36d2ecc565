"""
slack_guard: input validation and access control for outbound Slack messages.

This package provides the guardrails (content sanitizer, channel identifier and
thread timestamp validators, channel policy gate) and the message pipeline that
runs them before anything is posted to Slack.
"""
