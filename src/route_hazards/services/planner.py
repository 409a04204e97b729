"""Route planning orchestration service."""

from __future__ import annotations

import logging
import threading
from typing import Sequence, Union

from ..errors import AddressNotFoundError
from ..models.domain import GeoPoint, LoadEnvelope, RouteOption, RoutePlanResult, VehicleEnvelope
from .analysis.analyzer import AnalysisPolicy, RouteAnalyzer
from .geocoding.nominatim_client import NominatimClient
from .hazards.overpass_client import OverpassClient
from .routing.providers import FallbackRouteProvider, build_route_providers

logger = logging.getLogger(__name__)

Location = Union[GeoPoint, str]


def resolve_location(location: Location, geocoder: NominatimClient | None = None) -> GeoPoint:
    if isinstance(location, GeoPoint):
        return location
    geocoder = geocoder or NominatimClient()
    point = geocoder.geocode(location)
    if point is None:
        raise AddressNotFoundError(location)
    return point


def plan_routes(
    start: Location,
    end: Location,
    waypoints: Sequence[Location] = (),
    *,
    load: LoadEnvelope,
    vehicle: VehicleEnvelope,
    api_key: str | None = None,
    policy: AnalysisPolicy | None = None,
    cancel_event: threading.Event | None = None,
) -> RoutePlanResult:
    """Geocode, route and analyse; returns routes ranked safest first."""

    geocoder = NominatimClient()
    start_point = resolve_location(start, geocoder)
    end_point = resolve_location(end, geocoder)
    via_points = [resolve_location(waypoint, geocoder) for waypoint in waypoints]

    provider = FallbackRouteProvider(build_route_providers(api_key=api_key))
    candidates = provider.compute_routes(start_point, end_point, via_points)
    logger.info(f"Computed {len(candidates)} candidate route(s); analysing hazards")

    analyzer = RouteAnalyzer(OverpassClient(), policy=policy)
    ranked = analyzer.analyze_routes(candidates, load, vehicle, cancel_event=cancel_event)
    return RoutePlanResult(
        routes=tuple(ranked),
        load=load,
        vehicle=vehicle,
        metadata={
            "start": start_point,
            "end": end_point,
            "waypoints": via_points,
            "provider": ranked[0].provider if ranked else None,
        },
    )


def analyze_candidates(
    routes: Sequence[RouteOption],
    *,
    load: LoadEnvelope,
    vehicle: VehicleEnvelope,
    policy: AnalysisPolicy | None = None,
) -> RoutePlanResult:
    """Re-rank routes the caller already holds against new envelopes."""
    analyzer = RouteAnalyzer(OverpassClient(), policy=policy)
    ranked = analyzer.analyze_routes(routes, load, vehicle)
    return RoutePlanResult(routes=tuple(ranked), load=load, vehicle=vehicle)
