"""AI itinerary generation backend."""
