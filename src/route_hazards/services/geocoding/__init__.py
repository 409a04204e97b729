"""Geocoding clients."""

from .nominatim_client import GeocodeMatch, NominatimClient, geocode, reverse_geocode

__all__ = ["GeocodeMatch", "NominatimClient", "geocode", "reverse_geocode"]
