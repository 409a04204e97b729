"""HTTP client for the OpenRouteService directions API (HGV profile)."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from ...config import settings
from ...errors import ProviderError
from ...models.domain import GeoPoint, ItineraryStep, RouteOption
from ..http import build_client, request_json
from .base import RouteProvider, route_display_name
from .maneuvers import ors_turn_type

logger = logging.getLogger(__name__)


class OpenRouteServiceClient(RouteProvider):
    name = "ors"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        alternatives: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.ors_api_key
        if not self.api_key:
            raise ValueError("OpenRouteService API key is not configured.")
        self.base_url = (base_url or settings.ors_base_url).rstrip("/")
        self.profile = profile or settings.ors_profile
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.backoff_seconds
        self.alternatives = alternatives if alternatives is not None else settings.route_alternatives
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return build_client(self.timeout, settings.user_agent, self._transport)

    def directions(self, coordinates: Sequence[GeoPoint]) -> dict:
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for ORS directions.")

        payload: dict[str, Any] = {
            "coordinates": [[point.lng, point.lat] for point in coordinates],
            "instructions": True,
            "geometry": True,
        }
        # ORS only computes alternatives for plain origin/destination requests.
        if len(coordinates) == 2 and self.alternatives > 1:
            payload["alternative_routes"] = {"target_count": self.alternatives}

        with self._get_client() as client:
            data = request_json(
                client,
                "POST",
                f"{self.base_url}/directions/{self.profile}/geojson",
                provider=self.name,
                max_retries=self.max_retries,
                backoff_seconds=self.backoff_seconds,
                json=payload,
                headers={"Authorization": self.api_key},
            )
        if not isinstance(data, dict) or not data.get("features"):
            raise ProviderError(self.name, "directions response contained no routes")
        return data

    def compute_routes(
        self,
        start: GeoPoint,
        end: GeoPoint,
        waypoints: Sequence[GeoPoint] = (),
    ) -> list[RouteOption]:
        data = self.directions([start, *waypoints, end])
        try:
            routes = [
                _parse_feature(feature, index, self.name) for index, feature in enumerate(data["features"])
            ]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(self.name, f"malformed directions payload: {e}") from e
        logger.info(f"OpenRouteService returned {len(routes)} route(s)")
        return routes


def _parse_feature(feature: dict[str, Any], index: int, provider: str) -> RouteOption:
    coordinates = feature["geometry"]["coordinates"]
    geometry = tuple(GeoPoint(lat=float(c[1]), lng=float(c[0])) for c in coordinates)
    properties = feature.get("properties") or {}
    totals = properties.get("summary") or {}

    steps: list[ItineraryStep] = []
    for segment in properties.get("segments") or []:
        for step in segment.get("steps") or []:
            first_vertex = step.get("way_points", [0])[0]
            road_name = step.get("name") or ""
            if road_name == "-":
                road_name = ""
            steps.append(
                ItineraryStep(
                    instruction=step.get("instruction") or road_name or "Continue",
                    distance=float(step.get("distance", 0.0)),
                    duration=float(step.get("duration", 0.0)),
                    location=geometry[first_vertex],
                    road_name=road_name,
                    turn_type=ors_turn_type(step.get("type")),
                )
            )

    return RouteOption(
        id=f"{provider}-route-{index}",
        name=route_display_name(index),
        geometry=geometry,
        distance=float(totals.get("distance", 0.0)),
        duration=float(totals.get("duration", 0.0)),
        steps=tuple(steps),
        summary=_summarize(steps),
        provider=provider,
    )


def _summarize(steps: Sequence[ItineraryStep]) -> str:
    """Names of the two longest named roads, in driving order."""
    named = [(position, step) for position, step in enumerate(steps) if step.road_name]
    longest = sorted(named, key=lambda item: item[1].distance, reverse=True)[:2]
    ordered: list[str] = []
    for _, step in sorted(longest, key=lambda item: item[0]):
        if step.road_name not in ordered:
            ordered.append(step.road_name)
    return " → ".join(ordered)
