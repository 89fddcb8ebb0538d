from pydantic import BaseModel, Field


class HealthCheckResponse(BaseModel):
    """Response model for the health check endpoint."""

    version: str = Field(..., description="API version")
    status: str = Field(..., description="Overall service status")
    timestamp: str = Field(..., description="Server time of the check")
    ai_client: str = Field(..., description="AI client state: initialized or not_initialized")
