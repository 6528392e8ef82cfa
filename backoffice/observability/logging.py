"""Structured logging configuration using structlog.

JSON output for production, colored console output for development, with
contextvars merging and redaction of credentials and personal data.
"""

import re
import sys
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

if TYPE_CHECKING:
    from backoffice.config.models.observability import LoggingConfig

# Compared lowercased
SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password",
    "passwd",
    "smtppassword",
    "smtp_password",
    "secret",
    "token",
    "access_token",
    "refresh_token",
    "api_key",
    "apikey",
    "authorization",
    "cookie",
    "credentials",
    "jwt",
    "email",
    "contactemail",
    "fromemail",
    "phone",
    "card_number",
})

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
BEARER_PATTERN = re.compile(r"Bearer\s+[A-Za-z0-9\-_.=]+")

LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


class PIIRedactor:
    """Processor that redacts credentials and PII from log events.

    Known sensitive keys are replaced wholesale; string values are scanned
    for email addresses and bearer tokens.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact_dict(event_dict))

    def _redact_dict(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in SENSITIVE_KEYS:
                result[key] = "[REDACTED]"
            elif isinstance(value, dict):
                result[key] = self._redact_dict(value)
            elif isinstance(value, str):
                result[key] = self._redact_string(value)
            elif isinstance(value, list):
                result[key] = self._redact_list(value)
            else:
                result[key] = value
        return result

    def _redact_string(self, value: str) -> str:
        value = BEARER_PATTERN.sub("Bearer [TOKEN]", value)
        return EMAIL_PATTERN.sub("[EMAIL]", value)

    def _redact_list(self, items: list[Any]) -> list[Any]:
        result: list[Any] = []
        for item in items:
            if isinstance(item, dict):
                result.append(self._redact_dict(item))
            elif isinstance(item, str):
                result.append(self._redact_string(item))
            elif isinstance(item, list):
                result.append(self._redact_list(item))
            else:
                result.append(item)
        return result


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: "json" for production, "console" for development
        redact_pii: Whether to redact credentials and PII from events
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if redact_pii:
        processors.append(PIIRedactor())

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LEVELS.get(level.upper(), 20)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def setup_logging_from_config(config: "LoggingConfig") -> None:
    """Configure logging from the observability.logging config section."""
    setup_logging(level=config.level, format=config.format, redact_pii=config.redact_pii)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
