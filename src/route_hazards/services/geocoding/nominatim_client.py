"""HTTP client for the Nominatim geocoding service."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from ...config import settings
from ...errors import ProviderError
from ...models.domain import GeoPoint
from ..geospatial import format_coordinates
from ..http import build_client, request_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GeocodeMatch:
    location: GeoPoint
    display_name: str


class NominatimClient:
    """Best-effort address lookup. Neither method raises on service failure."""

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.nominatim_base_url).rstrip("/")
        self.user_agent = user_agent or settings.user_agent
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return build_client(self.timeout, self.user_agent, self._transport)

    def search(self, address: str) -> GeocodeMatch | None:
        """Resolve ``address`` to its best match, or ``None``."""
        query = address.strip()
        if not query:
            return None
        with self._get_client() as client:
            try:
                results = request_json(
                    client,
                    "GET",
                    f"{self.base_url}/search",
                    provider="nominatim",
                    params={"format": "json", "q": query, "limit": 1},
                )
            except ProviderError as e:
                logger.warning(f"Geocoding failed for '{query}': {e}")
                return None

        if not isinstance(results, list) or not results:
            logger.info(f"No geocoding match for '{query}'")
            return None
        first = results[0]
        try:
            location = GeoPoint(lat=float(first["lat"]), lng=float(first["lon"]))
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Malformed geocoding result for '{query}': {first!r}")
            return None
        return GeocodeMatch(location=location, display_name=str(first.get("display_name") or query))

    def geocode(self, address: str) -> GeoPoint | None:
        match = self.search(address)
        return match.location if match else None

    def reverse_geocode(self, point: GeoPoint) -> str:
        """Label for ``point``; falls back to its formatted coordinates."""
        fallback = format_coordinates(point)
        with self._get_client() as client:
            try:
                result = request_json(
                    client,
                    "GET",
                    f"{self.base_url}/reverse",
                    provider="nominatim",
                    params={"format": "json", "lat": point.lat, "lon": point.lng},
                )
            except ProviderError as e:
                logger.warning(f"Reverse geocoding failed for {fallback}: {e}")
                return fallback
        if not isinstance(result, dict):
            return fallback
        label = result.get("display_name")
        return str(label) if label else fallback


def geocode(address: str) -> GeoPoint | None:
    return NominatimClient().geocode(address)


def reverse_geocode(point: GeoPoint) -> str:
    return NominatimClient().reverse_geocode(point)
