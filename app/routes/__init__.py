from app.routes.ai import get_itinerary_generator
from app.routes.ai import router as ai_router

__all__ = [
    "ai_router",
    "get_itinerary_generator",
]
