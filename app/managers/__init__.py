from app.managers.retry_orchestrator import (
    RetryAttempt,
    RetryOrchestrator,
    RetryPolicy,
)

__all__ = [
    "RetryAttempt",
    "RetryOrchestrator",
    "RetryPolicy",
]
