# tests/errors/test_base.py
"""Tests for app/errors/base.py and app/errors/ai.py modules."""

from unittest.mock import MagicMock

import pytest
from orjson import loads

from app.errors import (
    AiError,
    AiNetworkError,
    AiQuotaExceededError,
    AiTimeoutError,
    AssemblyInconsistencyError,
    BaseAppError,
    ConfigurationError,
    GenerationCancelledError,
    MalformedResponseError,
    SchemaValidationError,
    TransientServiceError,
    ai_exception_handler,
    create_exception_handler,
)


def mock_request(path: str = "/ai/itinerary") -> MagicMock:
    request = MagicMock()
    request.client.host = "192.168.1.1"
    request.url.path = path
    return request


class TestBaseAppError:
    """Tests for BaseAppError exception."""

    def test_default_values(self) -> None:
        error = BaseAppError()
        assert error.detail == "Internal Server Error"
        assert error.status_code == 500

    def test_str_representation(self) -> None:
        assert str(BaseAppError(detail="Test error")) == "Test error"

    def test_to_dict_without_extras(self) -> None:
        assert BaseAppError(detail="Test error", status_code=400).to_dict() == {
            "detail": "Test error",
        }


class TestAiErrorTaxonomy:
    """Tests for the AI error hierarchy and status codes."""

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (AiError(), 500),
            (ConfigurationError(), 503),
            (TransientServiceError(), 503),
            (AiNetworkError(), 503),
            (AiTimeoutError(), 504),
            (AiQuotaExceededError(), 429),
            (MalformedResponseError(), 502),
            (SchemaValidationError(), 502),
            (AssemblyInconsistencyError(), 500),
            (GenerationCancelledError(), 503),
        ],
    )
    def test_status_codes(self, error: AiError, status_code: int) -> None:
        assert error.status_code == status_code
        assert isinstance(error, AiError)

    def test_transient_subtypes(self) -> None:
        for error in (AiNetworkError(), AiTimeoutError(), AiQuotaExceededError()):
            assert isinstance(error, TransientServiceError)
        assert not isinstance(MalformedResponseError(), TransientServiceError)
        assert not isinstance(SchemaValidationError(), TransientServiceError)

    def test_schema_error_detail(self) -> None:
        error = SchemaValidationError(
            reason="Currency must be USD, got EUR",
            field="dayPlans[0].activities[2].cost.currency",
            day_index=0,
            activity_index=2,
            expected="USD",
            actual="EUR",
        )
        assert error.detail == "dayPlans[0].activities[2].cost.currency: Currency must be USD, got EUR"
        assert error.to_dict()["activity_index"] == 2
        assert error.to_dict()["errors"] == []


class TestCreateExceptionHandler:
    """Tests for create_exception_handler factory function."""

    @pytest.mark.asyncio
    async def test_handler_with_base_app_error(self) -> None:
        logger = MagicMock()
        handler = create_exception_handler(logger)

        response = await handler(mock_request("/api/test"), BaseAppError("Test error", 400))

        assert response.status_code == 400
        assert response.body == b'{"detail":"Test error"}'
        logger.warning.assert_called_once_with(
            "Test error for ip: 192.168.1.1 for endpoint /api/test",
        )

    @pytest.mark.asyncio
    async def test_handler_with_generic_exception(self) -> None:
        handler = create_exception_handler(MagicMock())

        response = await handler(mock_request(), ValueError("Something went wrong"))

        assert response.status_code == 500
        assert loads(response.body) == {"detail": "Internal Server Error"}

    @pytest.mark.asyncio
    async def test_ai_handler_includes_schema_details(self) -> None:
        error = SchemaValidationError(
            reason="endTime 13:00 must be after startTime 14:00",
            field="dayPlans[0].activities[1].endTime",
            day_index=0,
            activity_index=1,
            expected="14:00",
            actual="13:00",
        )

        response = await ai_exception_handler(mock_request(), error)
        body = loads(response.body)

        assert response.status_code == 502
        assert body["field"] == "dayPlans[0].activities[1].endTime"
        assert body["expected"] == "14:00"
        assert body["actual"] == "13:00"
