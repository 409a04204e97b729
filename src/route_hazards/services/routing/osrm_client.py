"""HTTP client for the keyless OSRM routing service."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from ...config import settings
from ...errors import ProviderError
from ...models.domain import GeoPoint, ItineraryStep, RouteOption
from ..http import build_client, request_json
from .base import RouteProvider, route_display_name
from .maneuvers import osrm_turn_type

logger = logging.getLogger(__name__)


class OSRMClient(RouteProvider):
    name = "osrm"

    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return build_client(self.timeout, settings.user_agent, self._transport)

    def route(self, coordinates: Sequence[GeoPoint]) -> dict:
        """Raw OSRM route response with alternatives, steps and full polyline geometry."""
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for OSRM route.")

        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "true",
            "alternatives": "true",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{format_coordinates(coordinates)}"

        with self._get_client() as client:
            data = request_json(
                client,
                "GET",
                url,
                provider=self.name,
                max_retries=self.max_retries,
                backoff_seconds=self.backoff_seconds,
                params=params,
            )
        if not isinstance(data, dict) or data.get("code") != "Ok" or not data.get("routes"):
            message = data.get("message", "Unknown OSRM route error") if isinstance(data, dict) else "bad payload"
            raise ProviderError(self.name, f"route request failed: {message}")
        return data

    def compute_routes(
        self,
        start: GeoPoint,
        end: GeoPoint,
        waypoints: Sequence[GeoPoint] = (),
    ) -> list[RouteOption]:
        data = self.route([start, *waypoints, end])
        try:
            routes = [_parse_route(route, index, self.name) for index, route in enumerate(data["routes"])]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(self.name, f"malformed route payload: {e}") from e
        logger.info(f"OSRM returned {len(routes)} route(s)")
        return routes


def _parse_route(route: dict[str, Any], index: int, provider: str) -> RouteOption:
    geometry = tuple(GeoPoint(lat=lat, lng=lng) for lat, lng in decode_polyline(route["geometry"]))
    legs = route.get("legs") or []
    steps = tuple(_parse_step(step) for leg in legs for step in leg.get("steps") or [])
    summary = " → ".join(leg.get("summary", "") for leg in legs if leg.get("summary"))
    return RouteOption(
        id=f"{provider}-route-{index}",
        name=route_display_name(index),
        geometry=geometry,
        distance=float(route["distance"]),
        duration=float(route["duration"]),
        steps=steps,
        summary=summary,
        provider=provider,
    )


def _parse_step(step: dict[str, Any]) -> ItineraryStep:
    maneuver = step.get("maneuver") or {}
    lng, lat = maneuver["location"]
    road_name = step.get("name") or ""
    return ItineraryStep(
        instruction=maneuver.get("instruction") or road_name or "Continue",
        distance=float(step.get("distance", 0.0)),
        duration=float(step.get("duration", 0.0)),
        location=GeoPoint(lat=float(lat), lng=float(lng)),
        road_name=road_name,
        turn_type=osrm_turn_type(maneuver.get("type"), maneuver.get("modifier")),
    )


def format_coordinates(coordinates: Sequence[GeoPoint]) -> str:
    """OSRM expects ``lon,lat;lon,lat;...``."""
    return ";".join(f"{point.lng},{point.lat}" for point in coordinates)


def decode_polyline(polyline: str) -> list[tuple[float, float]]:
    """Decode Google polyline string to list of (lat, lon) coordinates.

    OSRM uses Google's polyline encoding format (precision 5) for route geometry.
    """
    coordinates = []
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        shift = 0
        result = 0
        while True:
            b = ord(polyline[index]) - 63
            index += 1
            result |= (b & 0x1f) << shift
            shift += 5
            if b < 0x20:
                break
        dlat = ~(result >> 1) if (result & 1) else (result >> 1)
        lat += dlat

        shift = 0
        result = 0
        while True:
            b = ord(polyline[index]) - 63
            index += 1
            result |= (b & 0x1f) << shift
            shift += 5
            if b < 0x20:
                break
        dlon = ~(result >> 1) if (result & 1) else (result >> 1)
        lon += dlon

        coordinates.append((lat / 1e5, lon / 1e5))

    return coordinates


def check_health(base_url: str | None = None, transport: httpx.BaseTransport | None = None) -> bool:
    """Check OSRM reachability with a minimal two-point route request."""
    client = OSRMClient(base_url=base_url, max_retries=0, timeout=5.0, transport=transport)
    try:
        client.route([GeoPoint(52.517037, 13.388860), GeoPoint(52.496891, 13.385983)])
        return True
    except ProviderError:
        return False
