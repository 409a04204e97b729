"""Ordered fallback chain over route providers."""

from __future__ import annotations

import logging
from typing import Sequence

from ...config import Settings, settings as default_settings
from ...errors import ProviderError, RouteUnavailableError
from ...models.domain import GeoPoint, RouteOption
from .base import RouteProvider
from .ors_client import OpenRouteServiceClient
from .osrm_client import OSRMClient

logger = logging.getLogger(__name__)


class FallbackRouteProvider(RouteProvider):
    """Tries each provider in order and returns the first non-empty answer."""

    name = "fallback"

    def __init__(self, providers: Sequence[RouteProvider]) -> None:
        if not providers:
            raise ValueError("At least one route provider is required.")
        self.providers = list(providers)

    def compute_routes(
        self,
        start: GeoPoint,
        end: GeoPoint,
        waypoints: Sequence[GeoPoint] = (),
    ) -> list[RouteOption]:
        for provider in self.providers:
            try:
                routes = provider.compute_routes(start, end, waypoints)
            except ProviderError as e:
                logger.warning(f"Route provider '{provider.name}' failed, trying next: {e}")
                continue
            if routes:
                return routes
            logger.warning(f"Route provider '{provider.name}' returned no routes, trying next")
        raise RouteUnavailableError()


def build_route_providers(
    config: Settings | None = None, api_key: str | None = None
) -> list[RouteProvider]:
    """Primary ORS provider when a key is available, then keyless OSRM."""
    config = config or default_settings
    key = api_key or config.ors_api_key
    providers: list[RouteProvider] = []
    if key:
        providers.append(
            OpenRouteServiceClient(
                api_key=key,
                base_url=config.ors_base_url,
                profile=config.ors_profile,
                timeout=config.http_timeout_seconds,
                max_retries=config.max_retries,
                backoff_seconds=config.backoff_seconds,
                alternatives=config.route_alternatives,
            )
        )
    else:
        logger.debug("No OpenRouteService key configured; using OSRM only")
    providers.append(
        OSRMClient(
            base_url=config.osrm_base_url,
            profile=config.osrm_profile,
            timeout=config.http_timeout_seconds,
            max_retries=config.max_retries,
            backoff_seconds=config.backoff_seconds,
        )
    )
    return providers


def compute_routes(
    start: GeoPoint,
    end: GeoPoint,
    waypoints: Sequence[GeoPoint] = (),
    api_key: str | None = None,
) -> list[RouteOption]:
    return FallbackRouteProvider(build_route_providers(api_key=api_key)).compute_routes(start, end, waypoints)
