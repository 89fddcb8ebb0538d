"""Utility helper functions."""

from app.utils.helpers import file_logger, host, time_taken, today_str

__all__ = [
    "file_logger",
    "host",
    "time_taken",
    "today_str",
]
