"""Structured logging configuration using structlog.

Console output for interactive use, JSON output for CI. A redaction processor
runs before rendering so credential values never reach the log stream.
"""

import logging
import re
import sys
from typing import Any

import structlog

REDACTED = "***REDACTED***"

# Key names whose values are always masked
SENSITIVE_KEYS = (
    "password",
    "secret",
    "token",
    "api_key",
    "apikey",
    "authorization",
    "private_key",
    "plaintext",
)

SENSITIVE_PATTERNS = [
    # Service token shapes (GitHub, Stripe)
    (re.compile(r"\b(gh[pousr]_)[A-Za-z0-9]{20,}"), r"\1" + REDACTED),
    (re.compile(r"\b((?:sk|pk|rk)_(?:test|live)_)[A-Za-z0-9]+"), r"\1" + REDACTED),
    # Bearer tokens
    (re.compile(r"(bearer|token)\s+[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE), r"\1 " + REDACTED),
    # Long opaque strings
    (re.compile(r"(^|[\s:=])[A-Za-z0-9]{32,}"), r"\1" + REDACTED),
]


def redact_sensitive_data(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive information from log events.

    Args:
        logger: The logger instance
        method_name: The name of the called method
        event_dict: The event dictionary to process

    Returns:
        The event dictionary with sensitive data redacted
    """
    for key, value in event_dict.items():
        key_lower = key.lower()
        if isinstance(value, str):
            if any(pattern in key_lower for pattern in SENSITIVE_KEYS):
                event_dict[key] = REDACTED
                continue
            redacted = value
            for pattern, replacement in SENSITIVE_PATTERNS:
                redacted = pattern.sub(replacement, redacted)
            event_dict[key] = redacted
        elif isinstance(value, dict):
            event_dict[key] = redact_sensitive_data(logger, method_name, value)
    return event_dict


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog for the CLI.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Emit JSON lines instead of console-formatted output

    Raises:
        ValueError: If an invalid logging level is provided
    """
    level = log_level.upper()
    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if level not in valid_levels:
        raise ValueError(f"Invalid log level '{log_level}'. Must be one of: {', '.join(sorted(valid_levels))}")

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_sensitive_data,
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("vault_saved", services=2)
    """
    return structlog.get_logger(name)
