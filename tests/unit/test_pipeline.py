"""
Unit tests for the message-send pipeline: the full ordered guardrail chain,
policy read from the environment at call time, and the GuardrailResult form.
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from structlog.testing import capture_logs

from slack_guard.config.settings import GuardrailSettings
from slack_guard.guardrails import (
    ContentType,
    DirectoryResolver,
    EncodingError,
    InvalidIdentifier,
    InvalidTimestamp,
    LengthExceeded,
    PolicyDenied,
    UnsupportedContentType,
)
from slack_guard.pipeline import (
    OutboundMessage,
    check_outbound_message,
    prepare_outbound_message,
)

POLICY_ENV = "SLACK_MCP_ADD_MESSAGE_TOOL"


@pytest.fixture
def resolver() -> DirectoryResolver:
    return DirectoryResolver({"#general": "C1234567890", "@alice": "D1234567890"})


# -----------------------------------------------------------------------------
# prepare_outbound_message
# -----------------------------------------------------------------------------


class TestPrepareOutboundMessage:
    def test_end_to_end_success(self, resolver: DirectoryResolver) -> None:
        msg = prepare_outbound_message(
            "#general",
            "<b>hi</b>",
            resolver,
            content_type="text/markdown",
            thread_ts="1234567890.123456",
            policy_config="C1234567890",
        )
        assert msg == OutboundMessage(
            channel_id="C1234567890",
            text="&lt;b&gt;hi&lt;/b&gt;",
            content_type=ContentType.MARKDOWN,
            thread_ts="1234567890.123456",
        )

    def test_end_to_end_policy_denied(self, resolver: DirectoryResolver) -> None:
        with pytest.raises(PolicyDenied):
            prepare_outbound_message("#general", "hi", resolver, policy_config="C9999999999")

    def test_plain_text_passes_through(self, resolver: DirectoryResolver) -> None:
        msg = prepare_outbound_message(
            "@alice", "<b>x</b>", resolver, content_type="text/plain", policy_config="true"
        )
        assert msg.text == "<b>x</b>"
        assert msg.channel_id == "D1234567890"
        assert msg.thread_ts is None

    def test_default_content_type_is_markdown(self, resolver: DirectoryResolver) -> None:
        msg = prepare_outbound_message("#general", "a & b", resolver, policy_config="1")
        assert msg.content_type is ContentType.MARKDOWN
        assert msg.text == "a &amp; b"

    def test_default_content_type_from_settings(self, resolver: DirectoryResolver) -> None:
        settings = GuardrailSettings(default_content_type="text/plain")
        msg = prepare_outbound_message("#general", "a & b", resolver, policy_config="1", settings=settings)
        assert msg.text == "a & b"

    def test_content_is_escaped_exactly_once(self, resolver: DirectoryResolver) -> None:
        msg = prepare_outbound_message("#general", "&lt;", resolver, policy_config="1")
        assert msg.text == "&amp;lt;"

    def test_invalid_reference(self, resolver: DirectoryResolver) -> None:
        with pytest.raises(InvalidIdentifier):
            prepare_outbound_message("general", "hi", resolver, policy_config="1")

    def test_invalid_content(self, resolver: DirectoryResolver) -> None:
        with pytest.raises(EncodingError):
            prepare_outbound_message("#general", b"\xff\xfe", resolver, policy_config="1")

    def test_content_too_long(self, resolver: DirectoryResolver) -> None:
        with pytest.raises(LengthExceeded):
            prepare_outbound_message("#general", "A" * 40_001, resolver, policy_config="1")

    def test_invalid_thread(self, resolver: DirectoryResolver) -> None:
        with capture_logs() as logs:
            with pytest.raises(InvalidTimestamp):
                prepare_outbound_message(
                    "#general", "hi", resolver, thread_ts="1234567890.12345", policy_config="1"
                )
        rejected = [e for e in logs if e["event"] == "message_rejected"]
        assert rejected and rejected[0]["kind"] == "invalid_timestamp"

    def test_unsupported_content_type(self, resolver: DirectoryResolver) -> None:
        with pytest.raises(UnsupportedContentType):
            prepare_outbound_message("#general", "hi", resolver, content_type="text/html", policy_config="1")


# -----------------------------------------------------------------------------
# Policy read from the environment
# -----------------------------------------------------------------------------


class TestPolicyFromEnvironment:
    def test_unset_env_denies(self, resolver: DirectoryResolver) -> None:
        env = {k: v for k, v in os.environ.items() if k != POLICY_ENV}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(PolicyDenied):
                prepare_outbound_message("#general", "hi", resolver)

    def test_env_policy_changes_take_effect_on_next_call(self, resolver: DirectoryResolver) -> None:
        with patch.dict(os.environ, {POLICY_ENV: "C1234567890"}):
            assert prepare_outbound_message("#general", "hi", resolver).channel_id == "C1234567890"
        with patch.dict(os.environ, {POLICY_ENV: "!C1234567890"}):
            with pytest.raises(PolicyDenied):
                prepare_outbound_message("#general", "hi", resolver)

    def test_explicit_policy_overrides_env(self, resolver: DirectoryResolver) -> None:
        with patch.dict(os.environ, {POLICY_ENV: ""}):
            msg = prepare_outbound_message("#general", "hi", resolver, policy_config="true")
        assert msg.channel_id == "C1234567890"


# -----------------------------------------------------------------------------
# check_outbound_message
# -----------------------------------------------------------------------------


class TestCheckOutboundMessage:
    def test_pass_result_carries_message(self, resolver: DirectoryResolver) -> None:
        r = check_outbound_message("#general", "hi", resolver, policy_config="1")
        assert r.status == "pass"
        assert r.is_ok()
        assert r.details["message"]["channel_id"] == "C1234567890"
        assert r.details["message"]["content_type"] == "text/markdown"

    def test_fail_result_is_not_retryable(self, resolver: DirectoryResolver) -> None:
        r = check_outbound_message("#general", "hi", resolver, policy_config="C9999999999")
        assert r.should_block()
        assert r.retry_allowed is False
        assert r.details["kind"] == "policy_denied"
        assert r.details["stage"] == "policy"
        assert r.details["policy_mode"] == "allow_list"

    def test_content_failure_has_no_stage(self, resolver: DirectoryResolver) -> None:
        r = check_outbound_message("#general", b"\xff", resolver, policy_config="1")
        assert r.status == "fail"
        assert r.details == {"kind": "encoding_error", "reason": r.message}

    def test_keyword_options_are_forwarded(self, resolver: DirectoryResolver) -> None:
        r = check_outbound_message(
            "#general",
            "<b>hi</b>",
            resolver,
            content_type="text/plain",
            thread_ts="1234567890.123456",
            policy_config="1",
            settings=GuardrailSettings(max_message_length=100),
        )
        assert r.status == "pass"
        message = r.details["message"]
        assert message["content_type"] == "text/plain"
        assert message["text"] == "<b>hi</b>"
        assert message["thread_ts"] == "1234567890.123456"

    def test_settings_length_limit_is_forwarded(self, resolver: DirectoryResolver) -> None:
        r = check_outbound_message(
            "#general",
            "x" * 11,
            resolver,
            policy_config="1",
            settings=GuardrailSettings(max_message_length=10),
        )
        assert r.details["kind"] == "length_exceeded"

    def test_bytes_thread_ts_is_decoded(self, resolver: DirectoryResolver) -> None:
        r = check_outbound_message(
            "C1234567890", "hi", resolver, policy_config="1", thread_ts=b"1234567890.123456"
        )
        assert r.status == "pass"
        assert r.details["message"]["thread_ts"] == "1234567890.123456"

    @pytest.mark.parametrize("thread_ts", [b"\xff\xfe", b"1234567890.12345", 1234567890])
    def test_bad_thread_ts_is_a_fail_result(self, resolver: DirectoryResolver, thread_ts) -> None:
        r = check_outbound_message("C1234567890", "hi", resolver, policy_config="1", thread_ts=thread_ts)
        assert r.status == "fail"
        assert r.details["kind"] == "invalid_timestamp"

    def test_bytes_channel_is_decoded(self, resolver: DirectoryResolver) -> None:
        r = check_outbound_message(b"C1234567890", "hi", resolver, policy_config="C1234567890")
        assert r.status == "pass"
        assert r.details["message"]["channel_id"] == "C1234567890"
