from __future__ import annotations

import logging


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger."""
    return logging.getLogger(name or __name__)


def log_token_event(
    logger: logging.Logger,
    grant: str,
    token: str | None,
    level_success: int = logging.INFO,
    level_failure: int = logging.WARNING,
) -> None:
    """
    Structured helper for reporting token grant outcomes.

    Avoid logging the token value; only the grant label is emitted.
    """
    if token:
        logger.log(level_success, "Breakout %s grant stored a new access token", grant)
    else:
        logger.log(level_failure, "Breakout %s grant produced no access token", grant)


_request_logger = get_logger("breakout.requests")


def log_request(method: str, url: str) -> None:
    """Diagnostic hook printing ``METHOD URL`` for every outgoing request."""
    _request_logger.debug("%s %s", method.upper(), url)
