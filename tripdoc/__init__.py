"""Itinerary document composition and multi-format export engine."""
