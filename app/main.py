# app/main.py

"""Itinerary Generation Backend - AI day-by-day travel plans over FastAPI."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from app.configs import settings
from app.errors import AiError, ai_exception_handler, validation_exception_handler
from app.middleware import (
    LoggingMiddleware,
    SecurityHeadersMiddleware,
    configure_cors,
    lifespan,
)
from app.routes import ai_router
from app.schemas import HealthCheckResponse
from app.utils.helpers import today_str

app = FastAPI(
    title=settings.APP_NAME,
    description="AI-powered multi-day itinerary generation API",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.DEBUG,
    swagger_ui_parameters={
        "docExpansion": "none",
        "operationsSorter": "method",
    },
)

configure_cors(app)

app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.include_router(ai_router)

errors = [
    (AiError, ai_exception_handler),
    (RequestValidationError, validation_exception_handler),
]

_ = [app.add_exception_handler(exc_type, handler) for exc_type, handler in errors]


@app.get(
    "/health",
    tags=["🩺 Health"],
    summary="Health check endpoint",
    response_model=HealthCheckResponse,
    response_class=ORJSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "version": "1.0.0",
                        "status": "ok",
                        "timestamp": "2025-01-01 00:00:00",
                        "ai_client": "initialized",
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
async def health_check(request: Request) -> ORJSONResponse:
    """
    Health check endpoint.

    Examples
    --------
    Request
        GET /health
    Response
        200 OK
        {"version": "1.0.0", "status": "ok", "timestamp": "...", "ai_client": "initialized"}
    """
    ai_client_status = (
        "initialized" if getattr(request.app.state, "ai_client", None) else "not_initialized"
    )
    health = HealthCheckResponse(
        version=app.version,
        status="ok",
        timestamp=today_str(),
        ai_client=ai_client_status,
    )
    return ORJSONResponse(health.model_dump())
