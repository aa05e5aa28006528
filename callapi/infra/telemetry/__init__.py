"""
Telemetry Layer
===============

Structured logging with request correlation ids.

Usage:
    from callapi.infra.telemetry import get_logger

    logger = get_logger(__name__)
    logger.debug("request_sent", endpoint="/users")
"""

from callapi.infra.telemetry.logger import (
    StructuredFormatter,
    StructuredLogger,
    clear_request_context,
    get_logger,
    reset_request_context,
    set_request_context,
    setup_logging,
)

__all__ = [
    "StructuredFormatter",
    "StructuredLogger",
    "clear_request_context",
    "get_logger",
    "reset_request_context",
    "set_request_context",
    "setup_logging",
]
