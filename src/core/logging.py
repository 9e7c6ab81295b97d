"""Logfire setup and the structured-logging helpers taskdeck's services share.

Services log through plain ``logging.getLogger(__name__)`` loggers; once
``configure_logfire`` has run, Logfire picks those records up along with the
request spans from ``instrument_fastapi``. Structured fields travel in
``extra`` so they stay queryable, e.g. every task mutation carries
``account_id`` and ``task_id``.
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import settings


def configure_logfire() -> None:
    """Point Logfire at this service. Export only happens when LOGFIRE_TOKEN is set."""
    logfire.configure(
        token=settings.logfire_token,
        service_name="taskdeck",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def instrument_fastapi(app: FastAPI) -> None:
    logfire.instrument_fastapi(app)
    logger = logging.getLogger(__name__)
    logger.info("FastAPI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Open a span around one service operation, named ``<module>.<function>``."""
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """Emit ``message`` at ``level`` with ``context`` as record attributes.

    ``level`` is a method name on the logger (``"info"``, ``"warning"``, ...),
    matched case-insensitively.
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)


def log_with_user_context(
    logger: logging.Logger,
    level: str,
    message: str,
    account_id: str | None = None,
    **extra: object,
) -> None:
    """Like ``log_with_context``, tagging the record with the acting account.

    Anonymous events (no ``account_id``) are logged without the field rather
    than with ``account_id=None``.
    """
    context = {"account_id": account_id, **extra} if account_id else extra
    log_with_context(logger, level, message, **context)
