"""
Centralized logging configuration.

This module sets up structured logging with:
- Settings-based configuration (dev vs production)
- JSON formatting for production, pretty console for development
- Identity hashing for privacy in production
- Redaction of credentials, captcha tokens and secrets
"""

import hashlib
import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, Processor

# Flipped by setup_logging(); hash_identity() reads it
_HASH_IDENTITIES = False

# Sensitive fields to redact from logs
REDACTED_FIELDS = {
    "password",
    "credential",
    "token",
    "recaptcha_token",
    "api_key",
    "Authorization",
    "Cookie",
    "secret",
    "key",
}


def hash_identity(identity: str) -> str:
    """
    Hash a login identity (email) for privacy in production.

    In production, returns SHA-256 hash (first 16 chars).
    In development, returns the original identity for easier debugging.
    """
    if _HASH_IDENTITIES and identity:
        return hashlib.sha256(identity.encode()).hexdigest()[:16]
    return identity


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key.lower() in REDACTED_FIELDS or any(
            sensitive in key.lower()
            for sensitive in ["password", "token", "key", "secret"]
        ):
            if key not in ["level", "event", "timestamp", "logger"]:
                event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(log_format: str) -> None:
    """
    Configure structlog with appropriate processors for the environment.

    json: one JSON object per line
    console: pretty console formatting with colors
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(log_level: str) -> None:
    """Route standard library logging to stdout at *log_level*."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    env: str = "development",
) -> None:
    """
    Initialize logging system for the application.

    Called once from create_app(); safe to call again in tests.
    """
    global _HASH_IDENTITIES
    is_production = env == "production"
    _HASH_IDENTITIES = is_production
    if log_format is None:
        log_format = "json" if is_production else "console"

    configure_stdlib_logging(log_level)
    configure_structlog(log_format)

    logger = structlog.get_logger(__name__)
    logger.info(
        "logging_initialized",
        env=env,
        log_level=log_level,
        log_format=log_format,
    )
