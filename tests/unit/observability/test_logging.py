"""Tests for structured logging."""

import pytest
import structlog

from backoffice.observability.logging import PIIRedactor, get_logger, setup_logging


class TestSetupLogging:
    @pytest.mark.parametrize("format", ["json", "console"])
    def test_formats(self, format: str) -> None:
        setup_logging(level="DEBUG", format=format, redact_pii=True)
        get_logger("test").info("test_message", email="user@example.com")

    def test_context_binding(self, capsys: pytest.CaptureFixture[str]) -> None:
        structlog.reset_defaults()
        setup_logging(level="INFO", format="json", redact_pii=False)
        structlog.contextvars.bind_contextvars(request_id="req-1")
        try:
            get_logger("test").info("bound_event")
        finally:
            structlog.contextvars.clear_contextvars()

        err = capsys.readouterr().err
        assert "bound_event" in err
        assert "req-1" in err


class TestPIIRedactor:
    @pytest.fixture
    def redactor(self) -> PIIRedactor:
        return PIIRedactor()

    def test_redacts_sensitive_keys(self, redactor: PIIRedactor) -> None:
        event = {"smtpPassword": "hunter2", "Authorization": "Bearer abc", "key": "siteTitle"}
        result = redactor(None, "info", event)  # type: ignore[arg-type]
        assert result["smtpPassword"] == "[REDACTED]"
        assert result["Authorization"] == "[REDACTED]"
        assert result["key"] == "siteTitle"

    def test_redacts_values_in_strings(self, redactor: PIIRedactor) -> None:
        event = {"event": "login by jane@example.com", "note": "sent Bearer abc.def"}
        result = redactor(None, "info", event)  # type: ignore[arg-type]
        assert result["event"] == "login by [EMAIL]"
        assert result["note"] == "sent Bearer [TOKEN]"

    def test_recurses_into_nested_values(self, redactor: PIIRedactor) -> None:
        event = {"details": {"password": "x", "items": ["a@b.io", {"token": "t"}]}}
        result = redactor(None, "info", event)  # type: ignore[arg-type]
        assert result["details"]["password"] == "[REDACTED]"
        assert result["details"]["items"] == ["[EMAIL]", {"token": "[REDACTED]"}]
