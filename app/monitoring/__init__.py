"""
Observability for the itinerary backend.

Usage
-----
>>> from app.monitoring import configure_logging, get_logger
>>> configure_logging()
>>> get_logger(__name__).info("generation_started", days=4)
"""

from app.monitoring.logging import (
    bind_generation_context,
    bind_request_id,
    clear_context,
    configure_logging,
    get_logger,
    redact_pii,
    sanitize_headers,
    sanitize_log_message,
    unbind_generation_context,
)

__all__ = [
    "bind_generation_context",
    "bind_request_id",
    "clear_context",
    "configure_logging",
    "get_logger",
    "redact_pii",
    "sanitize_headers",
    "sanitize_log_message",
    "unbind_generation_context",
]
