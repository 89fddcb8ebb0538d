from datetime import datetime
from logging import INFO, Formatter, Handler, Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from time import perf_counter

from fastapi import Request

from app.configs.settings import settings

_file_handler: Handler | None = None


def _shared_file_handler() -> Handler:
    global _file_handler
    if _file_handler is None:
        log_file = Path(settings.LOG_FILE)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
        handler.setLevel(INFO)
        handler.setFormatter(
            Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"),
        )
        _file_handler = handler
    return _file_handler


def file_logger(logger: Logger) -> Logger:
    """
    Attach the shared rotating file handler to a logger.

    The handler is created once per process and only when LOG_TO_FILE is set.

    Args:
        logger: Logger instance, usually ``getLogger(__name__)``.

    Returns:
        The same logger, for use in a module-level assignment.
    """
    if settings.LOG_TO_FILE:
        handler = _shared_file_handler()
        if handler not in logger.handlers:
            logger.addHandler(handler)
    return logger


def host(request: Request) -> str:
    """Return the host IP address."""
    return request.client.host if request.client else "unknown"


def today_str() -> str:
    """Return today's date as a string."""
    return datetime.now(datetime.now().astimezone().tzinfo).strftime(
        "%Y-%m-%d %H:%M:%S",
    )


def time_taken(start_time: float) -> str:
    minutes, seconds = divmod(perf_counter() - start_time, 60)
    formatted_time = f"{int(minutes)}m {int(seconds)}s"

    return formatted_time
