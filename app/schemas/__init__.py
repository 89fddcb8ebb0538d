from app.schemas.health import HealthCheckResponse

__all__ = ["HealthCheckResponse"]
