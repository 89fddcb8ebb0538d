# app/middleware/middleware.py
"""
Middleware components for the itinerary backend.

This module contains request logging and security header middleware, CORS
configuration and the lifespan event handler that builds the shared AI
client and itinerary generator.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import getLogger
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from rich.traceback import install
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from app.clients.ai_client import AiClient
from app.configs import settings
from app.monitoring import bind_request_id, clear_context, configure_logging
from app.services.itinerary import ItineraryGenerator
from app.utils.helpers import file_logger, host

logger = file_logger(getLogger(__name__))

install()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Build the AI client and generator on startup and close them on shutdown."""
    configure_logging()
    logger.info(f"Starting {app.title}...")

    # A missing API key raises ConfigurationError here and aborts startup
    try:
        ai_client = AiClient()
        app.state.ai_client = ai_client
        app.state.itinerary_generator = ItineraryGenerator(ai_client)
        logger.info(f"AI client initialized with model {ai_client.model_name}")
        if settings.LOG_TO_FILE:
            logger.info(f"Logging to file {settings.LOG_FILE}")
        logger.info("Services:")
        logger.info("  - Backend API: http://localhost:8000")
        logger.info("  - API Documentation: http://localhost:8000/docs")
        logger.info("  - Health Check: http://localhost:8000/health")
    except Exception:
        logger.exception("Failed to initialize services")
        raise

    yield

    logger.info(f"Shutting down {app.title}...")
    await ai_client.close()


def configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    if frontend_url := settings.PRODUCTION_FRONTEND_URL:
        allowed_origins.append(frontend_url)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Log request summary and timing, correlated by request ID."""
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        bind_request_id(request_id)
        start_time = perf_counter()
        logger.info(f"Request: {request.method} {request.url.path}, from ip: {host(request)}")

        try:
            response = await call_next(request)
        finally:
            clear_context()

        duration = perf_counter() - start_time
        logger.info(
            f"Response: {response.status_code} for {request.method} {request.url.path} "
            f"in {duration:.2f}s",
        )
        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Add security headers to all responses."""
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response
