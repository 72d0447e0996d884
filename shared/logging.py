"""
Logging entry points — framework-agnostic.

Provides:
- get_logger(): Get a configured logger instance
- hash_identity(): Hash login identities for privacy
- log_with_context(): Bind common context to a logger
"""

import structlog
from structlog.stdlib import BoundLogger

from shared.logging_config import hash_identity, setup_logging

__all__ = [
    "get_logger",
    "hash_identity",
    "log_with_context",
    "setup_logging",
]


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured structlog BoundLogger instance

    Example:
        >>> from shared.logging import get_logger
        >>> log = get_logger(__name__)
        >>> log.info("login_succeeded", identity=hash_identity("a@x.edu"))
    """
    return structlog.get_logger(name)


def log_with_context(logger: BoundLogger, **context) -> BoundLogger:
    """
    Bind context to a logger for all subsequent log calls.

    Example:
        >>> log = log_with_context(get_logger(__name__), request_id="req_abc")
        >>> log.info("login_attempt")  # Will include request_id
    """
    return logger.bind(**context)
