from app.services.itinerary import ItineraryGenerator
from app.services.normalizer import normalize_request

__all__ = ["ItineraryGenerator", "normalize_request"]
