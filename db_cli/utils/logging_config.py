"""
Logging configuration using structlog.

Logs go to stderr so that command output on stdout stays clean. Secrets are
never passed to loggers on purpose, and ``redact_secrets`` masks any value
whose key looks like one in case a caller slips.
"""

import re
import sys
from typing import Any

import structlog

SECRET_KEYS = ("password", "passwd", "secret", "token")
REDACTED = "***REDACTED***"

# user:password@ inside a connection URL
_URL_CREDENTIALS = re.compile(r"(postgres(?:ql)?://[^:/@\s]+):[^@\s]+@", re.IGNORECASE)


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask secret-looking values in a log event.

    Args:
        logger: The logger instance
        method_name: The name of the called method
        event_dict: The event dictionary to process

    Returns:
        The event dictionary with secrets replaced
    """
    for key, value in event_dict.items():
        if not isinstance(value, str):
            continue
        if any(marker in key.lower() for marker in SECRET_KEYS):
            event_dict[key] = REDACTED
        else:
            event_dict[key] = _URL_CREDENTIALS.sub(rf"\1:{REDACTED}@", value)
    return event_dict


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Resolve sys.stderr per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(log_level: str = "WARNING", json_logs: bool = False) -> None:
    """Configure structured logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON lines instead of human-readable console output
    """
    renderer: Any
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            redact_secrets,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level.upper()),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )

