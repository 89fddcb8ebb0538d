# tests/utils/test_helpers.py
"""Tests for app/utils/helpers.py module."""

from logging import getLogger
from pathlib import Path
from time import perf_counter
from unittest.mock import MagicMock

from pytest_mock.plugin import MockerFixture

from app.configs import settings
from app.utils import helpers
from app.utils.helpers import file_logger, host, time_taken


class TestFileLogger:
    """Tests for the shared rotating file handler."""

    def test_disabled(self) -> None:
        logger = file_logger(getLogger("tests.file_logger.disabled"))
        assert logger.handlers == []

    def test_enabled_shares_one_handler(self, mocker: MockerFixture, tmp_path: Path) -> None:
        mocker.patch.object(settings, "LOG_TO_FILE", True)
        mocker.patch.object(settings, "LOG_FILE", str(tmp_path / "logs" / "app.log"))
        mocker.patch.object(helpers, "_file_handler", None)

        first = file_logger(getLogger("tests.file_logger.first"))
        second = file_logger(getLogger("tests.file_logger.second"))
        file_logger(first)

        assert len(first.handlers) == 1
        assert first.handlers[0] is second.handlers[0]
        assert (tmp_path / "logs").is_dir()

        for logger in (first, second):
            logger.handlers[0].close()
            logger.handlers.clear()


class TestHost:
    def test_with_client(self) -> None:
        request = MagicMock()
        request.client.host = "10.0.0.1"
        assert host(request) == "10.0.0.1"

    def test_without_client(self) -> None:
        request = MagicMock(client=None)
        assert host(request) == "unknown"


def test_time_taken_format() -> None:
    assert time_taken(perf_counter()) == "0m 0s"
