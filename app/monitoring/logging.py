"""
Structured logging for the generation pipeline.

structlog owns the root handler: events from ``get_logger`` and records from
plain ``logging`` loggers are rendered by the same ``ProcessorFormatter``, so a
retry warning and the ``file_logger`` line next to it share request and
generation IDs.

Rendering depends on ``ENVIRONMENT``: a rich console in development and one
JSON object per line everywhere else. Every string value passes through the
sanitizing processors first, because model output and request bodies end up
in events verbatim.

Examples
--------
>>> from app.monitoring import get_logger
>>> events = get_logger("app.services.itinerary")
>>> events.info("chunk_generated", chunk=1, total=2)
"""

from logging import StreamHandler, root
from re import Pattern
from re import compile as re_compile
from typing import Any

from structlog import configure
from structlog import get_logger as struct_logger
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    merge_contextvars,
    unbind_contextvars,
)
from structlog.dev import ConsoleRenderer, RichTracebackFormatter
from structlog.processors import (
    JSONRenderer,
    StackInfoRenderer,
    UnicodeDecoder,
    add_log_level,
    format_exc_info,
)
from structlog.processors import json as struct_json
from structlog.stdlib import (
    BoundLogger,
    LoggerFactory,
    PositionalArgumentsFormatter,
    ProcessorFormatter,
    add_logger_name,
    filter_by_level,
)
from structlog.types import EventDict, Processor, WrappedLogger

from app.configs.settings import settings
from app.utils.helpers import today_str

REDACTED = "[REDACTED]"

# Raw model replies can run to several kilobytes
MAX_VALUE_LENGTH = 500

SECRET_HEADERS: frozenset[str] = frozenset(
    {"authorization", "cookie", "proxy-authorization", "x-api-key", "x-goog-api-key"},
)

# Applied in order; the API key rule must run before the generic token rule
REDACTION_RULES: tuple[tuple[Pattern[str], str], ...] = (
    (re_compile(r"AIza[0-9A-Za-z_-]{35}"), "[REDACTED_API_KEY]"),
    (re_compile(r"(?i)bearer\s+[a-z0-9._~+/-]+=*"), f"Bearer {REDACTED}"),
    (re_compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"), "[REDACTED_EMAIL]"),
)

ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": ""})


def sanitize_log_message(message: str) -> str:
    r"""
    Escape line breaks so a model reply cannot forge log lines.

    Examples:
    --------
    >>> sanitize_log_message("Hello\nWorld")
    'Hello\\nWorld'
    """
    return message.translate(ESCAPES)


def sanitize_headers(headers: dict[str, Any]) -> dict[str, Any]:
    """
    Return a copy of ``headers`` with credential values replaced.

    Examples:
    --------
    >>> sanitize_headers({"x-goog-api-key": "secret", "Content-Type": "json"})
    {'x-goog-api-key': '[REDACTED]', 'Content-Type': 'json'}
    """
    return {name: REDACTED if name.lower() in SECRET_HEADERS else value for name, value in headers.items()}


def redact_pii(message: str) -> str:
    """
    Replace API keys, bearer tokens and email addresses in ``message``.

    Examples:
    --------
    >>> redact_pii("Contact traveler@example.com")
    'Contact [REDACTED_EMAIL]'
    """
    for pattern, replacement in REDACTION_RULES:
        message = pattern.sub(replacement, message)
    return message


def truncate(value: str, limit: int = MAX_VALUE_LENGTH) -> str:
    if len(value) <= limit:
        return value
    return f"{value[:limit]}... [{len(value) - limit} chars truncated]"


def add_timestamp(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    event_dict["timestamp"] = today_str()
    return event_dict


def sanitize_event_dict(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """
    Clean every value of an event before it is rendered.

    Strings are escaped, truncated and redacted. A ``headers`` mapping has its
    credential headers replaced. Other values are left alone.
    """
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = redact_pii(truncate(sanitize_log_message(value)))
        elif key.lower() == "headers" and isinstance(value, dict):
            event_dict[key] = sanitize_headers(value)
    return event_dict


def build_renderer(*, colors: bool = True) -> Processor:
    """Pick the final processor for the current ``ENVIRONMENT``."""
    if settings.ENVIRONMENT == "development":
        return ConsoleRenderer(
            colors=colors,
            pad_level=False,
            exception_formatter=RichTracebackFormatter(),
        )
    return JSONRenderer(serializer=struct_json.dumps)


def configure_logging() -> None:
    """
    Install the structlog pipeline and a single console handler on the root logger.

    Safe to call again on reload: existing root handlers are dropped first.
    """
    root.handlers.clear()
    root.setLevel(settings.LOG_LEVEL.upper())

    configure(
        processors=[
            filter_by_level,
            merge_contextvars,
            add_logger_name,
            add_log_level,
            PositionalArgumentsFormatter(),
            StackInfoRenderer(),
            format_exc_info,
            UnicodeDecoder(),
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            processors=[
                ProcessorFormatter.remove_processors_meta,
                add_timestamp,
                sanitize_event_dict,
                build_renderer(colors=True),
            ],
            # plain logging records get the same context as structlog events
            foreign_pre_chain=[merge_contextvars, add_logger_name, add_log_level],
        ),
    )
    root.addHandler(handler)


def get_logger(name: str) -> BoundLogger:
    return struct_logger(name)


def bind_request_id(request_id: str) -> None:
    bind_contextvars(request_id=request_id)


def bind_generation_context(generation_id: str, **fields: Any) -> None:  # noqa: ANN401
    """
    Tag every event of one itinerary generation.

    Examples:
    --------
    >>> bind_generation_context("a1b2c3", city="Paris", days=4)
    """
    bind_contextvars(generation_id=generation_id, **fields)


def unbind_generation_context(*keys: str) -> None:
    """Drop the generation ID and the extra ``keys`` bound with it."""
    unbind_contextvars("generation_id", *keys)


def clear_context() -> None:
    clear_contextvars()
