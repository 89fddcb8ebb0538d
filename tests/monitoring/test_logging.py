"""Tests for structured logging functionality."""

from __future__ import annotations

import pytest
from pytest_mock.plugin import MockerFixture
from structlog.contextvars import get_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer

from app.configs.settings import settings
from app.monitoring.logging import (
    bind_generation_context,
    bind_request_id,
    build_renderer,
    clear_context,
    redact_pii,
    sanitize_event_dict,
    sanitize_headers,
    sanitize_log_message,
    truncate,
    unbind_generation_context,
)


class TestSanitizeLogMessage:
    """Tests for log message sanitization."""

    def test_newlines_escaped(self) -> None:
        """Newlines in model output must not forge new log lines."""
        result = sanitize_log_message("Line1\nLine2\rLine3")
        assert result == "Line1\\nLine2\\rLine3"

    def test_normal_message_unchanged(self) -> None:
        message = "Chunk 1/2 generated"
        assert sanitize_log_message(message) == message


class TestSanitizeHeaders:
    """Tests for HTTP header sanitization."""

    @pytest.mark.parametrize("name", ["Authorization", "Cookie", "X-Goog-Api-Key"])
    def test_sensitive_redacted(self, name: str) -> None:
        assert sanitize_headers({name: "secret"})[name] == "[REDACTED]"

    def test_other_headers_kept(self) -> None:
        assert sanitize_headers({"Content-Type": "application/json"}) == {
            "Content-Type": "application/json",
        }


class TestRedactPii:
    """Tests for secret and PII redaction."""

    def test_google_api_key(self) -> None:
        key = "AIza" + "A" * 35
        assert redact_pii(f"key={key}") == "key=[REDACTED_API_KEY]"

    def test_bearer_token(self) -> None:
        assert redact_pii("Authorization: Bearer abc.def-123") == "Authorization: Bearer [REDACTED]"

    def test_email(self) -> None:
        assert redact_pii("Contact traveler@example.com") == "Contact [REDACTED_EMAIL]"

    def test_travel_text_unchanged(self) -> None:
        text = "Visit Louvre at 09:00 for 20 USD on 2025-06-01"
        assert redact_pii(text) == text


class TestSanitizeEventDict:
    def test_all_string_values_sanitized(self) -> None:
        event = {
            "event": "ai_retry",
            "error": "bad\noutput from traveler@example.com",
            "attempt": 2,
            "headers": {"Authorization": "Bearer x"},
        }
        result = sanitize_event_dict(None, "warning", event)

        assert result["error"] == "bad\\noutput from [REDACTED_EMAIL]"
        assert result["attempt"] == 2
        assert result["headers"] == {"Authorization": "[REDACTED]"}


class TestContext:
    """Tests for context variable binding."""

    def test_bind_and_clear(self) -> None:
        bind_request_id("req-1")
        bind_generation_context("gen-1", city="Paris", days=4)

        context = get_contextvars()
        assert context["request_id"] == "req-1"
        assert context["generation_id"] == "gen-1"
        assert context["city"] == "Paris"

        unbind_generation_context("city", "days")
        context = get_contextvars()
        assert "generation_id" not in context
        assert context["request_id"] == "req-1"

        clear_context()
        assert get_contextvars() == {}


class TestTruncate:
    def test_short_value_unchanged(self) -> None:
        assert truncate("Louvre") == "Louvre"

    def test_long_model_reply_truncated(self) -> None:
        result = sanitize_event_dict(None, "warning", {"raw": "x" * 600})
        assert result["raw"] == "x" * 500 + "... [100 chars truncated]"


class TestBuildRenderer:
    def test_json_outside_development(self, mocker: MockerFixture) -> None:
        mocker.patch.object(settings, "ENVIRONMENT", "production")
        assert isinstance(build_renderer(colors=False), JSONRenderer)

    def test_console_in_development(self, mocker: MockerFixture) -> None:
        mocker.patch.object(settings, "ENVIRONMENT", "development")
        assert isinstance(build_renderer(colors=False), ConsoleRenderer)
