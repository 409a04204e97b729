"""Route providers."""

from .base import RouteProvider
from .ors_client import OpenRouteServiceClient
from .osrm_client import OSRMClient
from .providers import FallbackRouteProvider, build_route_providers, compute_routes

__all__ = [
    "RouteProvider",
    "OSRMClient",
    "OpenRouteServiceClient",
    "FallbackRouteProvider",
    "build_route_providers",
    "compute_routes",
]
